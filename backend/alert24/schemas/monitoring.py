"""Dispatcher batch result schemas."""
from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Serializes with camelCase keys for the cron caller."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ProbeSummary(CamelModel):
    """Outcome of an executed check."""
    success: bool
    response_time: Optional[int] = None
    status_code: Optional[int] = None
    error: Optional[str] = None


class CheckOutcome(CamelModel):
    """What the dispatcher did with one check."""
    check_id: str
    check_name: Optional[str] = None
    status: Literal["executed", "skipped", "error"]
    result: Optional[ProbeSummary] = None
    next_due: Optional[datetime] = None
    error: Optional[str] = None


class BatchSummary(CamelModel):
    total_checks: int
    executed: int
    skipped: int
    errors: int


class BatchRunResult(CamelModel):
    """Returned by every dispatcher run."""
    success: bool = True
    summary: BatchSummary
    results: List[CheckOutcome]
    executed_at: datetime


class BatchRunError(BaseModel):
    """Body of a failed cron run."""
    success: bool = False
    error: str
    details: Optional[str] = None


class ExecuteChecksRequest(CamelModel):
    """Selects checks to run now: one by id, or all of an organization."""
    check_id: Optional[str] = None
    execute_all: bool = False
    organization_id: Optional[str] = None


class ExecutedCheck(CamelModel):
    check_id: str
    check_name: Optional[str] = None
    success: bool
    response_time: Optional[int] = None
    status_code: Optional[int] = None
    error: Optional[str] = None


class ExecuteChecksResult(CamelModel):
    """Returned by an on-demand run."""
    success: bool = True
    message: str
    results: List[ExecutedCheck]
    executed_at: datetime
