"""Persistence operations used by the monitoring core.

Each method opens its own short session, so callers running on the
dispatcher's worker pool never share a session.
"""
from datetime import datetime
from typing import List, Optional

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from .models import (
    CheckResult,
    MonitoringCheck,
    OnCallSchedule,
    Service,
    ServiceMonitoringCheck,
    StatusUpdate,
)
from .utils.db_utils import retry_on_transient_error


class MonitoringStore:
    """Table-level access to checks, results, services and schedules."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    async def _add(self, row):
        async with self._session_factory() as session:
            session.add(row)
            await retry_on_transient_error(session.commit)
            return row

    # Monitoring checks

    async def list_active_checks(self) -> List[MonitoringCheck]:
        """Active checks, least recently checked first (never-checked first of all)."""
        async with self._session_factory() as session:
            result = await session.execute(
                select(MonitoringCheck)
                .where(MonitoringCheck.status == "active")
                .order_by(MonitoringCheck.last_check_at.asc().nulls_first(), MonitoringCheck.id)
            )
            return list(result.scalars().all())

    async def list_checks(self, organization_id: str) -> List[MonitoringCheck]:
        """Every check of an organization, whatever its status."""
        async with self._session_factory() as session:
            result = await session.execute(
                select(MonitoringCheck)
                .where(MonitoringCheck.organization_id == organization_id)
                .order_by(MonitoringCheck.created_at, MonitoringCheck.id)
            )
            return list(result.scalars().all())

    async def get_check(self, check_id: str) -> Optional[MonitoringCheck]:
        async with self._session_factory() as session:
            return await session.get(MonitoringCheck, check_id)

    async def add_check(self, check: MonitoringCheck) -> MonitoringCheck:
        return await self._add(check)

    async def update_check_status(self, check_id: str, values: dict) -> None:
        """Write status fields; raises LookupError when the check is gone."""
        async with self._session_factory() as session:
            result = await session.execute(
                update(MonitoringCheck).where(MonitoringCheck.id == check_id).values(**values)
            )
            await retry_on_transient_error(session.commit)
            if result.rowcount == 0:
                raise LookupError(f"Monitoring check {check_id} not found")

    # Check results

    async def insert_check_result(
        self,
        check_id: str,
        timestamp: datetime,
        is_successful: bool,
        response_time_ms: Optional[int],
        status_code: Optional[int],
        error_message: Optional[str],
        ssl_info: Optional[dict],
    ) -> CheckResult:
        return await self._add(CheckResult(
            monitoring_check_id=check_id,
            timestamp=timestamp,
            is_successful=is_successful,
            response_time_ms=response_time_ms,
            status_code=status_code,
            error_message=error_message,
            ssl_info=ssl_info,
        ))

    async def list_check_results(self, check_id: str, limit: int = 100) -> List[CheckResult]:
        """Most recent results first."""
        async with self._session_factory() as session:
            result = await session.execute(
                select(CheckResult)
                .where(CheckResult.monitoring_check_id == check_id)
                .order_by(CheckResult.timestamp.desc())
                .limit(limit)
            )
            return list(result.scalars().all())

    # Linked services

    async def list_service_associations(self, check_id: str) -> List[ServiceMonitoringCheck]:
        async with self._session_factory() as session:
            result = await session.execute(
                select(ServiceMonitoringCheck).where(ServiceMonitoringCheck.monitoring_check_id == check_id)
            )
            return list(result.scalars().all())

    async def get_service(self, service_id: str) -> Optional[Service]:
        async with self._session_factory() as session:
            return await session.get(Service, service_id)

    async def update_service_status(self, service_id: str, status: str, updated_at: datetime) -> None:
        async with self._session_factory() as session:
            await session.execute(
                update(Service).where(Service.id == service_id).values(status=status, updated_at=updated_at)
            )
            await retry_on_transient_error(session.commit)

    async def insert_status_update(self, status_update: StatusUpdate) -> StatusUpdate:
        return await self._add(status_update)

    async def list_status_updates(self, status_page_id: str) -> List[StatusUpdate]:
        async with self._session_factory() as session:
            result = await session.execute(
                select(StatusUpdate)
                .where(StatusUpdate.status_page_id == status_page_id)
                .order_by(StatusUpdate.created_at.desc())
            )
            return list(result.scalars().all())

    # On-call schedules

    async def get_schedule(self, schedule_id: str) -> Optional[OnCallSchedule]:
        async with self._session_factory() as session:
            return await session.get(OnCallSchedule, schedule_id)

    async def list_schedules(
        self,
        organization_id: Optional[str] = None,
        active_only: bool = False,
    ) -> List[OnCallSchedule]:
        """Schedules, newest first."""
        query = select(OnCallSchedule)
        if organization_id:
            query = query.where(OnCallSchedule.organization_id == organization_id)
        if active_only:
            query = query.where(OnCallSchedule.is_active.is_(True))
        query = query.order_by(OnCallSchedule.created_at.desc())

        async with self._session_factory() as session:
            result = await session.execute(query)
            return list(result.scalars().all())

    async def add_schedule(self, schedule: OnCallSchedule) -> OnCallSchedule:
        return await self._add(schedule)

    async def add_service(self, service: Service) -> Service:
        return await self._add(service)

    async def add_service_association(self, association: ServiceMonitoringCheck) -> ServiceMonitoringCheck:
        return await self._add(association)
