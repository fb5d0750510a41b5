"""
Progress API router.

Endpoints:
- GET /api/users/{user_id}/progress/{civil_day} - Progress for one day
- GET /api/users/{user_id}/progress?start_date=&end_date= - Progress for a range
- GET /api/users/{user_id}/progress/weekly/{civil_day} - Sunday to Saturday week
"""

from datetime import date

from fastapi import APIRouter, HTTPException, Query, status

from src.core.use_cases import get_progress
from src.interfaces.api.schemas import (
    DayProgressResponse,
    ProgressRangeResponse,
    WeeklyProgressResponse,
)

router = APIRouter(prefix="/api/users", tags=["progress"])


def _user_not_found() -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")


@router.get("/{user_id}/progress/weekly/{civil_day}", response_model=WeeklyProgressResponse)
async def weekly_progress(user_id: int, civil_day: date) -> WeeklyProgressResponse:
    """Weekly summary for the week containing civil_day."""
    week = await get_progress.get_weekly_progress(user_id, civil_day)
    if week is None:
        raise _user_not_found()
    return WeeklyProgressResponse.model_validate(week)


@router.get("/{user_id}/progress/{civil_day}", response_model=DayProgressResponse)
async def day_progress(user_id: int, civil_day: date) -> DayProgressResponse:
    """Per-task subtask completion state for a civil day."""
    progress = await get_progress.get_progress(user_id, civil_day)
    if progress is None:
        raise _user_not_found()
    return DayProgressResponse.model_validate(progress)


@router.get("/{user_id}/progress", response_model=ProgressRangeResponse)
async def range_progress(
    user_id: int,
    start_date: date = Query(...),
    end_date: date = Query(...),
) -> ProgressRangeResponse:
    """Progress for each day in [start_date, end_date], at most 31 days."""
    try:
        days = await get_progress.get_progress_range(user_id, start_date, end_date)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e
    if days is None:
        raise _user_not_found()

    return ProgressRangeResponse(
        start_date=start_date,
        end_date=end_date,
        days=[DayProgressResponse.model_validate(d) for d in days],
    )
