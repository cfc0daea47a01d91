"""Status tracker - applies probe outcomes to a check's status fields."""
import logging
from datetime import datetime
from typing import Optional

from ..models import MonitoringCheck
from ..store import MonitoringStore
from .checker import ProbeResult
from .service_status import LinkedServiceUpdater

logger = logging.getLogger(__name__)


def build_status_update(check: MonitoringCheck, result: ProbeResult, checked_at: datetime) -> dict:
    """Column values to write after a probe.

    Status follows the latest outcome directly; failure_threshold and
    success_threshold are not consulted. The consecutive counters are kept so
    that alerting can apply them.
    """
    values = {
        "current_status": "up" if result.is_successful else "down",
        "last_check_at": checked_at,
        "updated_at": checked_at,
    }

    if result.is_successful:
        values.update(
            last_success_at=checked_at,
            consecutive_successes=(check.consecutive_successes or 0) + 1,
            consecutive_failures=0,
            failure_message=None,
        )
    else:
        values.update(
            last_failure_at=checked_at,
            consecutive_failures=(check.consecutive_failures or 0) + 1,
            consecutive_successes=0,
            failure_message=result.error_message,
        )
    return values


class StatusTracker:
    """Records results and updates check status after every probe."""

    def __init__(self, store: MonitoringStore, service_updater: Optional[LinkedServiceUpdater] = None):
        self.store = store
        self.service_updater = service_updater

    async def record(self, check: MonitoringCheck, result: ProbeResult, checked_at: datetime) -> dict:
        """Persist a probe outcome.

        The result row is best-effort. The status update is not: if it fails
        the error propagates so the dispatcher reports the check as errored.

        Returns the status values written.
        """
        await self._store_result(check, result, checked_at)

        values = build_status_update(check, result, checked_at)
        await self.store.update_check_status(check.id, values)

        logger.info(
            f"Updated check {check.id}: {'SUCCESS' if result.is_successful else 'FAILED'} "
            f"({result.response_time_ms}ms)"
        )

        if self.service_updater:
            await self.service_updater.apply(check, result, checked_at)

        return values

    async def _store_result(self, check: MonitoringCheck, result: ProbeResult, checked_at: datetime):
        try:
            await self.store.insert_check_result(
                check.id,
                timestamp=checked_at,
                is_successful=result.is_successful,
                response_time_ms=result.response_time_ms,
                status_code=result.status_code,
                error_message=result.error_message,
                ssl_info=result.ssl_info.as_dict() if result.ssl_info else None,
            )
        except Exception as e:
            # History is best-effort; status visibility matters more
            logger.warning(f"Could not store check result for {check.id}: {e}")
