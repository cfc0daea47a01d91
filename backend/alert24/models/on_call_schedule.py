"""OnCallSchedule model - rotations of organization members."""
from sqlalchemy import Column, String, DateTime, Boolean, JSON, Text

from ..database import Base
from .monitoring_check import _new_id, _utcnow


class OnCallSchedule(Base):
    """Ordered members rotating on a fixed duration.

    Who is on call is computed when the schedule is read, never stored.
    """

    __tablename__ = "on_call_schedules"

    id = Column(String(36), primary_key=True, default=_new_id)
    organization_id = Column(String(36), nullable=False, index=True)
    name = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    members = Column(JSON, nullable=False, default=list)  # [{"user_id": ..., "order": 1}, ...]
    rotation_config = Column(JSON, nullable=False, default=dict)
    timezone = Column(String, default="UTC")
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime(timezone=True), default=_utcnow)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)
