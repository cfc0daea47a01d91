"""MonitoringCheck model - probes configured per organization."""
import uuid
from datetime import datetime, timezone
from sqlalchemy import Column, Integer, String, DateTime, JSON, Text
from sqlalchemy.orm import relationship

from ..database import Base


def _new_id() -> str:
    return str(uuid.uuid4())


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class MonitoringCheck(Base):
    """An HTTP, TCP, ping or SSL check run by the dispatcher."""

    __tablename__ = "monitoring_checks"

    id = Column(String(36), primary_key=True, default=_new_id)
    organization_id = Column(String(36), nullable=False, index=True)
    name = Column(String, nullable=False)
    created_by = Column(String(36), nullable=True)

    # Probe configuration
    check_type = Column(String, nullable=False)  # http, tcp, ping, ssl
    target_url = Column(String, nullable=False)  # URL or hostname:port
    method = Column(String, default="GET")
    headers = Column(JSON, nullable=True)
    body = Column(Text, nullable=True)
    expected_status_code = Column(Integer, default=200)
    timeout_seconds = Column(Integer, default=30)
    check_interval_seconds = Column(Integer, default=300)
    failure_threshold = Column(Integer, default=1)
    success_threshold = Column(Integer, default=1)

    # Written only by the status tracker
    status = Column(String, default="active", index=True)  # active, disabled
    current_status = Column(String, default="pending")  # up, down, pending, unknown
    consecutive_failures = Column(Integer, default=0)
    consecutive_successes = Column(Integer, default=0)
    last_check_at = Column(DateTime(timezone=True), nullable=True, index=True)
    last_success_at = Column(DateTime(timezone=True), nullable=True)
    last_failure_at = Column(DateTime(timezone=True), nullable=True)
    failure_message = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), default=_utcnow)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)

    # Relationships
    results = relationship("CheckResult", back_populates="check", cascade="all, delete-orphan")

    def probe_config(self) -> dict:
        """Probe settings for the checker; unset fields are left out."""
        config = {
            "method": self.method,
            "headers": self.headers,
            "body": self.body,
            "expected_status_code": self.expected_status_code,
            "timeout_seconds": self.timeout_seconds,
        }
        return {key: value for key, value in config.items() if value is not None}
