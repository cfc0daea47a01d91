"""Linked service updates - mirror check outcomes onto status-page services."""
import logging
from datetime import datetime
from typing import List, Optional

from ..models import MonitoringCheck, Service, ServiceMonitoringCheck, StatusUpdate
from ..store import MonitoringStore
from .checker import ProbeResult

logger = logging.getLogger(__name__)

OPERATIONAL = "operational"
DEFAULT_FAILURE_STATUS = "degraded"


def status_update_message(service: Service, new_status: str, result: ProbeResult, custom_message: Optional[str]) -> str:
    """Text for a status page entry; a configured message replaces the default."""
    if custom_message and custom_message.strip():
        return custom_message
    if new_status == "down":
        return f"{service.name} is currently down due to monitoring check failure: {result.error_message}"
    return (
        f"{service.name} is experiencing degraded performance due to monitoring check issues: "
        f"{result.error_message}"
    )


class LinkedServiceUpdater:
    """Moves services linked to a check between operational and their failure status."""

    def __init__(self, store: MonitoringStore):
        self.store = store

    async def apply(self, check: MonitoringCheck, result: ProbeResult, now: datetime) -> List[dict]:
        """Update every service linked to `check`.

        Best-effort: failures are logged per service and never raised.
        Returns the changes made as {service_id, service_name, old_status, new_status}.
        """
        try:
            associations = await self.store.list_service_associations(check.id)
        except Exception as e:
            logger.error(f"Error fetching service associations for check {check.id}: {e}")
            return []

        changes = []
        for association in associations:
            try:
                change = await self._apply_one(check, association, result, now)
            except Exception as e:
                logger.error(f"Error updating service {association.service_id} for check {check.id}: {e}")
                continue
            if change:
                changes.append(change)
        return changes

    async def _apply_one(
        self,
        check: MonitoringCheck,
        association: ServiceMonitoringCheck,
        result: ProbeResult,
        now: datetime,
    ) -> Optional[dict]:
        service = await self.store.get_service(association.service_id)
        if service is None:
            logger.warning(f"Associated service {association.service_id} not found")
            return None

        if result.is_successful:
            new_status = OPERATIONAL
        else:
            new_status = association.failure_status or DEFAULT_FAILURE_STATUS

        if service.status == new_status:
            return None

        await self.store.update_service_status(service.id, new_status, now)
        logger.info(f"Updated associated service {service.name}: {service.status} -> {new_status}")

        if new_status != OPERATIONAL:
            await self._post_status_update(service, new_status, check, result, association.failure_message, now)

        return {
            "service_id": service.id,
            "service_name": service.name,
            "old_status": service.status,
            "new_status": new_status,
        }

    async def _post_status_update(
        self,
        service: Service,
        new_status: str,
        check: MonitoringCheck,
        result: ProbeResult,
        custom_message: Optional[str],
        now: datetime,
    ):
        if not service.status_page_id:
            logger.warning(f"Service {service.name} ({service.id}) has no status_page_id, skipping status update")
            return

        await self.store.insert_status_update(StatusUpdate(
            status_page_id=service.status_page_id,
            title=f"{service.name} Status Update",
            message=status_update_message(service, new_status, result, custom_message),
            status=new_status,
            update_type="monitoring",
            created_by=check.created_by,
            created_at=now,
        ))
