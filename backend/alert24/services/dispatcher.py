"""Check dispatcher - runs every active check that is due.

One call to run_batch() is one cron tick:
- due-ness is computed fresh from last_check_at, so a check overdue by
  several intervals runs once, not once per missed interval
- checks that waited longest (or never ran) are processed first
- a failure on one check is reported in that check's outcome and never stops
  the rest of the batch

execute_now() runs selected checks immediately, ignoring due-ness.
"""
import asyncio
import logging
from datetime import datetime, timedelta
from typing import Awaitable, Callable, List, Optional, TypeVar

from ..models import MonitoringCheck
from ..schemas.monitoring import (
    BatchRunResult,
    BatchSummary,
    CheckOutcome,
    ExecuteChecksResult,
    ExecutedCheck,
    ProbeSummary,
)
from ..store import MonitoringStore
from ..utils.time_utils import as_utc, utcnow
from .checker import CheckerService, ProbeResult, summarize
from .status_tracker import StatusTracker

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_CHECK_INTERVAL_SECONDS = 300

# Probes running at once within a batch
MAX_CONCURRENT_CHECKS = 10


def next_due_at(check: MonitoringCheck, default_interval: int = DEFAULT_CHECK_INTERVAL_SECONDS) -> Optional[datetime]:
    """When the check is next due, or None if it never ran."""
    if check.last_check_at is None:
        return None
    interval = check.check_interval_seconds or default_interval
    return as_utc(check.last_check_at) + timedelta(seconds=interval)


def is_check_due(
    check: MonitoringCheck,
    now: datetime,
    default_interval: int = DEFAULT_CHECK_INTERVAL_SECONDS,
) -> bool:
    """A check is due if it never ran or its interval has elapsed."""
    due_at = next_due_at(check, default_interval)
    return due_at is None or as_utc(now) >= due_at


def _processing_key(check: MonitoringCheck):
    # Never-checked first, then oldest last_check_at
    if check.last_check_at is None:
        return (0, check.id or "")
    return (1, as_utc(check.last_check_at), check.id or "")


class CheckSelectionError(ValueError):
    """An on-demand run named neither a check nor an organization to run."""


class CheckDispatcher:
    """Executes due checks and reports a per-check outcome."""

    def __init__(
        self,
        store: MonitoringStore,
        checker: CheckerService,
        tracker: StatusTracker,
        max_concurrent_checks: int = MAX_CONCURRENT_CHECKS,
        default_interval: int = DEFAULT_CHECK_INTERVAL_SECONDS,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.store = store
        self.checker = checker
        self.tracker = tracker
        self.max_concurrent_checks = max(1, max_concurrent_checks)
        self.default_interval = default_interval
        self._clock = clock

    async def _run_limited(
        self,
        checks: List[MonitoringCheck],
        process: Callable[[MonitoringCheck], Awaitable[T]],
    ) -> List[T]:
        """Run `process` over the checks on the bounded worker pool."""
        semaphore = asyncio.Semaphore(self.max_concurrent_checks)

        async def process_with_limit(check: MonitoringCheck) -> T:
            async with semaphore:
                return await process(check)

        # gather() keeps input order, so outcomes follow processing order
        return list(await asyncio.gather(*[process_with_limit(check) for check in checks]))

    async def run_batch(self, now: Optional[datetime] = None) -> BatchRunResult:
        """Run one batch.

        Failing to list the active checks is the only error that escapes;
        everything after that is isolated per check.
        """
        now = as_utc(now) if now else self._clock()
        logger.info("Starting monitoring batch")

        checks = await self.store.list_active_checks()
        checks = sorted(checks, key=_processing_key)
        logger.info(f"Found {len(checks)} active monitoring checks")

        outcomes = await self._run_limited(checks, lambda check: self._process_check(check, now))

        summary = BatchSummary(
            total_checks=len(checks),
            executed=sum(1 for o in outcomes if o.status == "executed"),
            skipped=sum(1 for o in outcomes if o.status == "skipped"),
            errors=sum(1 for o in outcomes if o.status == "error"),
        )
        logger.info(
            f"Monitoring batch completed: {summary.executed} executed, "
            f"{summary.skipped} skipped, {summary.errors} errors"
        )
        return BatchRunResult(summary=summary, results=outcomes, executed_at=now)

    async def select_checks(
        self,
        check_id: Optional[str] = None,
        execute_all: bool = False,
        organization_id: Optional[str] = None,
    ) -> List[MonitoringCheck]:
        """Checks for an on-demand run; empty when nothing matches.

        A check_id wins over execute_all. When an organization is given with a
        check_id, the check must belong to it.
        """
        if check_id:
            check = await self.store.get_check(check_id)
            if check is None or (organization_id and check.organization_id != organization_id):
                return []
            return [check]
        if execute_all and organization_id:
            return await self.store.list_checks(organization_id)
        raise CheckSelectionError("Either checkId or executeAll with organizationId required")

    async def execute_now(self, checks: List[MonitoringCheck]) -> ExecuteChecksResult:
        """Probe and record the given checks now, whether or not they are due."""
        executed_at = self._clock()
        logger.info(f"Executing {len(checks)} monitoring checks on demand")

        results = await self._run_limited(checks, self._execute_check)
        return ExecuteChecksResult(
            message=f"Executed {len(results)} monitoring checks",
            results=results,
            executed_at=executed_at,
        )

    async def _probe_and_record(self, check: MonitoringCheck) -> ProbeResult:
        logger.info(f"Executing {check.check_type} check: {check.name} -> {check.target_url}")
        result = await self.checker.check(check.check_type, check.target_url, check.probe_config())
        if not result.is_successful:
            logger.info(f"Check failed: {check.name} - {result.error_message}")

        await self.tracker.record(check, result, self._clock())
        return result

    async def _process_check(self, check: MonitoringCheck, now: datetime) -> CheckOutcome:
        try:
            if not is_check_due(check, now, self.default_interval):
                next_due = next_due_at(check, self.default_interval)
                logger.debug(f"Skipping check {check.name} (next due: {next_due.isoformat()})")
                return CheckOutcome(check_id=check.id, check_name=check.name, status="skipped", next_due=next_due)

            result = await self._probe_and_record(check)
            return CheckOutcome(
                check_id=check.id,
                check_name=check.name,
                status="executed",
                result=ProbeSummary(**summarize(result)),
            )
        except Exception as e:
            logger.error(f"Error processing check {check.id}: {e}")
            return CheckOutcome(check_id=check.id, check_name=check.name, status="error", error=str(e) or repr(e))

    async def _execute_check(self, check: MonitoringCheck) -> ExecutedCheck:
        try:
            result = await self._probe_and_record(check)
        except Exception as e:
            logger.error(f"Error executing check {check.id}: {e}")
            return ExecutedCheck(check_id=check.id, check_name=check.name, success=False, error=str(e) or repr(e))
        return ExecutedCheck(check_id=check.id, check_name=check.name, **summarize(result))
