"""Database models."""
from .monitoring_check import MonitoringCheck
from .check_result import CheckResult
from .on_call_schedule import OnCallSchedule
from .service import Service, ServiceMonitoringCheck, StatusUpdate

__all__ = [
    "MonitoringCheck",
    "CheckResult",
    "OnCallSchedule",
    "Service",
    "ServiceMonitoringCheck",
    "StatusUpdate",
]
