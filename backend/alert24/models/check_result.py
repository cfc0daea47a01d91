"""CheckResult model - append-only probe history."""
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Boolean, JSON, Text
from sqlalchemy.orm import relationship

from ..database import Base
from .monitoring_check import _new_id, _utcnow


class CheckResult(Base):
    """Outcome of a single probe attempt. Rows are never updated."""

    __tablename__ = "check_results"

    id = Column(String(36), primary_key=True, default=_new_id)
    monitoring_check_id = Column(
        String(36), ForeignKey("monitoring_checks.id", ondelete="CASCADE"), nullable=False, index=True
    )
    timestamp = Column(DateTime(timezone=True), default=_utcnow, index=True)
    is_successful = Column(Boolean, nullable=False)
    response_time_ms = Column(Integer, nullable=True)
    status_code = Column(Integer, nullable=True)
    error_message = Column(Text, nullable=True)
    ssl_info = Column(JSON, nullable=True)  # {valid, expires_at, days_until_expiry}

    # Relationship
    check = relationship("MonitoringCheck", back_populates="results")
