"""Admin endpoints for the daily reset job.

Protected by CRON_TOKEN passed as the ?token= query parameter,
so an external cron service can trigger the reset.
"""

from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query, status

from src.config import config
from src.core.domain.day_clock import get_day_clock
from src.core.use_cases.get_stats import get_reset_stats
from src.interfaces.api.schemas import DailyResetResponse, ResetDayStatsResponse
from src.services import scheduler

router = APIRouter(prefix="/api/admin", tags=["admin"])


def verify_cron_token(token: str | None = Query(default=None)) -> None:
    """Check the ?token= query parameter against CRON_TOKEN."""
    if not config.CRON_TOKEN or token != config.CRON_TOKEN.get_secret_value():
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized",
        )


@router.post(
    "/daily-reset",
    response_model=DailyResetResponse,
    dependencies=[Depends(verify_cron_token)],
)
async def trigger_daily_reset(
    as_of: date | None = Query(default=None),
) -> DailyResetResponse:
    """Run the daily reset now. Returns skipped=true if a run is in progress."""
    result = await scheduler.run_daily_reset(as_of)
    return DailyResetResponse.model_validate(result)


@router.get("/daily-reset/status", dependencies=[Depends(verify_cron_token)])
async def daily_reset_status() -> dict:
    """Scheduler state and summary of the last run."""
    return scheduler.get_job_status()


@router.get(
    "/daily-reset/stats",
    response_model=list[ResetDayStatsResponse],
    dependencies=[Depends(verify_cron_token)],
)
async def daily_reset_stats(
    days: int = Query(default=7, ge=1, le=90),
) -> list[ResetDayStatsResponse]:
    """Per-day totals of settled days over the last N days."""
    stats = await get_reset_stats(get_day_clock().today(), days)
    return [ResetDayStatsResponse.model_validate(s) for s in stats]
