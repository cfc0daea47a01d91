"""Status-page services and their link to monitoring checks."""
from sqlalchemy import Column, String, DateTime, ForeignKey, Integer, Text

from ..database import Base
from .monitoring_check import _new_id, _utcnow


class Service(Base):
    """A component shown on a status page."""

    __tablename__ = "services"

    id = Column(String(36), primary_key=True, default=_new_id)
    organization_id = Column(String(36), nullable=True, index=True)
    status_page_id = Column(String(36), nullable=True)
    name = Column(String, nullable=False)
    status = Column(String, default="operational")  # operational, degraded, down, maintenance
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)


class ServiceMonitoringCheck(Base):
    """Junction row: how a failing check affects a service."""

    __tablename__ = "service_monitoring_checks"

    service_id = Column(String(36), ForeignKey("services.id", ondelete="CASCADE"), primary_key=True)
    monitoring_check_id = Column(
        String(36), ForeignKey("monitoring_checks.id", ondelete="CASCADE"), primary_key=True
    )
    failure_status = Column(String, default="degraded")  # status applied while the check fails
    failure_threshold_minutes = Column(Integer, default=0)
    failure_message = Column(Text, nullable=True)  # replaces the generated status update text


class StatusUpdate(Base):
    """Entry in a status page's update feed."""

    __tablename__ = "status_updates"

    id = Column(String(36), primary_key=True, default=_new_id)
    status_page_id = Column(String(36), nullable=False, index=True)
    title = Column(String, nullable=False)
    message = Column(Text, nullable=False)
    status = Column(String, nullable=False)
    update_type = Column(String, default="monitoring")
    created_by = Column(String(36), nullable=True)
    created_at = Column(DateTime(timezone=True), default=_utcnow)
