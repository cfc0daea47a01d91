"""Pydantic schemas for API request/response models."""
from .monitoring import (
    BatchRunError,
    BatchRunResult,
    BatchSummary,
    CheckOutcome,
    ExecuteChecksRequest,
    ExecuteChecksResult,
    ExecutedCheck,
    ProbeSummary,
)
from .on_call import (
    OnCallScheduleList,
    OnCallScheduleResponse,
)

__all__ = [
    "BatchRunError",
    "BatchRunResult",
    "BatchSummary",
    "CheckOutcome",
    "ExecuteChecksRequest",
    "ExecuteChecksResult",
    "ExecutedCheck",
    "ProbeSummary",
    "OnCallScheduleList",
    "OnCallScheduleResponse",
]
