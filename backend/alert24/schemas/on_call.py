"""On-call schedule schemas for API."""
from datetime import datetime
from typing import Any, List, Optional

from pydantic import BaseModel


class OnCallScheduleResponse(BaseModel):
    """Schedule with the member on call right now."""
    id: str
    organization_id: str
    name: str
    description: Optional[str] = None
    # Stored JSON is returned as-is; a malformed rotation shows nobody on call
    members: Any = None  # [{"user_id": ..., "order": ...}]
    rotation_config: Any = None
    timezone: Optional[str] = None
    is_active: Optional[bool] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    current_on_call_user_id: Optional[str] = None  # computed at read time

    class Config:
        from_attributes = True


class OnCallScheduleList(BaseModel):
    on_call_schedules: List[OnCallScheduleResponse]
    count: int
