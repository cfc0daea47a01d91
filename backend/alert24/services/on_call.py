"""On-call service - schedule reads with the current assignee attached."""
import logging
from datetime import datetime
from typing import Callable, List, Optional

from pydantic import ValidationError

from ..models import OnCallSchedule
from ..schemas.on_call import OnCallScheduleResponse
from ..store import MonitoringStore
from ..utils.time_utils import utcnow
from .rotation import calculate_current_on_call_user_id

logger = logging.getLogger(__name__)


class OnCallService:
    """Reads schedules and recomputes who is on call on every read."""

    def __init__(self, store: MonitoringStore, clock: Callable[[], datetime] = utcnow):
        self.store = store
        self._clock = clock

    def describe(self, schedule: OnCallSchedule, now: Optional[datetime] = None) -> OnCallScheduleResponse:
        """Schedule response including current_on_call_user_id."""
        user_id = calculate_current_on_call_user_id(schedule, now or self._clock())
        response = OnCallScheduleResponse.model_validate(schedule)
        response.current_on_call_user_id = str(user_id) if user_id is not None else None
        return response

    async def get_schedule(self, schedule_id: str) -> Optional[OnCallScheduleResponse]:
        schedule = await self.store.get_schedule(schedule_id)
        if schedule is None:
            return None
        return self.describe(schedule)

    async def list_schedules(
        self,
        organization_id: Optional[str] = None,
        active_only: bool = False,
    ) -> List[OnCallScheduleResponse]:
        """Schedules with their current assignee; unreadable rows are logged and left out."""
        schedules = await self.store.list_schedules(organization_id=organization_id, active_only=active_only)
        now = self._clock()
        responses = []
        for schedule in schedules:
            try:
                responses.append(self.describe(schedule, now))
            except ValidationError as e:
                logger.warning(f"Skipping unreadable on-call schedule {schedule.id}: {e}")
        return responses
