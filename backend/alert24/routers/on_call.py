"""On-call schedule read endpoints."""
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from ..schemas.on_call import OnCallScheduleList, OnCallScheduleResponse
from ..services.on_call import OnCallService
from .deps import get_on_call_service

router = APIRouter(prefix="/api/on-call-schedules", tags=["on-call"])


@router.get("", response_model=OnCallScheduleList)
async def list_on_call_schedules(
    organization_id: Optional[str] = Query(None),
    active_only: bool = Query(False),
    service: OnCallService = Depends(get_on_call_service),
):
    """List schedules with who is on call right now."""
    schedules = await service.list_schedules(organization_id=organization_id, active_only=active_only)
    return OnCallScheduleList(on_call_schedules=schedules, count=len(schedules))


@router.get("/{schedule_id}", response_model=OnCallScheduleResponse)
async def get_on_call_schedule(
    schedule_id: str,
    service: OnCallService = Depends(get_on_call_service),
):
    """Get one schedule with who is on call right now."""
    schedule = await service.get_schedule(schedule_id)
    if not schedule:
        raise HTTPException(status_code=404, detail="On-call schedule not found")
    return schedule
