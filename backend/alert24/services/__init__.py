"""Services for probing, dispatching, status tracking and on-call rotation."""
from .checker import CheckerService, ProbeFailure, ProbeSuccess, SslInfo
from .dispatcher import CheckDispatcher
from .on_call import OnCallService
from .rotation import calculate_current_on_call_user_id
from .scheduler import SchedulerService
from .service_status import LinkedServiceUpdater
from .status_tracker import StatusTracker

__all__ = [
    "CheckerService",
    "ProbeFailure",
    "ProbeSuccess",
    "SslInfo",
    "CheckDispatcher",
    "OnCallService",
    "calculate_current_on_call_user_id",
    "SchedulerService",
    "LinkedServiceUpdater",
    "StatusTracker",
]
