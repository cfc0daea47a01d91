"""Monitoring endpoints - cron batches and on-demand runs."""
import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from ..schemas.monitoring import BatchRunError, BatchRunResult, ExecuteChecksRequest, ExecuteChecksResult
from ..services.dispatcher import CheckDispatcher, CheckSelectionError
from .deps import get_dispatcher

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/monitoring", tags=["monitoring"])


@router.api_route(
    "/cron",
    methods=["GET", "POST"],
    response_model=BatchRunResult,
    responses={500: {"model": BatchRunError}},
)
async def run_monitoring_cron(dispatcher: CheckDispatcher = Depends(get_dispatcher)):
    """Execute every due check.

    Called by an external cron service on an interval shorter than the
    shortest check interval.
    """
    try:
        return await dispatcher.run_batch()
    except Exception as e:
        logger.error(f"Monitoring cron error: {e}")
        return JSONResponse(
            status_code=500,
            content=BatchRunError(error="Cron execution failed", details=str(e)).model_dump(),
        )


@router.post(
    "/execute",
    response_model=ExecuteChecksResult,
    responses={500: {"model": BatchRunError}},
)
async def execute_monitoring_checks(
    request: ExecuteChecksRequest,
    dispatcher: CheckDispatcher = Depends(get_dispatcher),
):
    """Run one check, or every check of an organization, right now."""
    try:
        checks = await dispatcher.select_checks(
            check_id=request.check_id,
            execute_all=request.execute_all,
            organization_id=request.organization_id,
        )
        if not checks:
            return JSONResponse(status_code=404, content={"error": "No monitoring checks found"})
        return await dispatcher.execute_now(checks)
    except CheckSelectionError as e:
        return JSONResponse(status_code=400, content={"error": str(e)})
    except Exception as e:
        logger.error(f"Error executing monitoring checks: {e}")
        return JSONResponse(
            status_code=500,
            content=BatchRunError(error="Failed to execute monitoring checks", details=str(e)).model_dump(),
        )
