"""
User stats API router.

Endpoints:
- GET /api/users/{user_id}/stats - XP, currency, level, streak
- GET /api/users/{user_id}/streak?as_of= - Streak on a civil day
- GET /api/users/{user_id}/rewards/{civil_day} - Rewards issued for a day
"""

from datetime import date

from fastapi import APIRouter, HTTPException, Query, status

from src.core.domain.day_clock import get_day_clock
from src.core.use_cases import get_stats
from src.interfaces.api.schemas import (
    DayRewardsResponse,
    StreakResponse,
    UserStatsResponse,
)
from src.storage import user_repo

router = APIRouter(prefix="/api/users", tags=["users"])


@router.get("/{user_id}/stats", response_model=UserStatsResponse)
async def user_stats(user_id: int) -> UserStatsResponse:
    """
    Get user statistics.

    The streak is recomputed from submission history and persisted if it changed.
    """
    stats = await get_stats.get_user_stats(user_id)
    if stats is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found",
        )
    return UserStatsResponse.model_validate(stats)


@router.get("/{user_id}/streak", response_model=StreakResponse)
async def user_streak(
    user_id: int, as_of: date | None = Query(default=None)
) -> StreakResponse:
    """Consecutive-day streak as of a civil day (today by default)."""
    if not await user_repo.get_user(user_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found",
        )
    as_of = as_of or get_day_clock().today()
    streak = await get_stats.get_streak(user_id, as_of)
    return StreakResponse(user_id=user_id, as_of=as_of, streak=streak)


@router.get("/{user_id}/rewards/{civil_day}", response_model=DayRewardsResponse)
async def day_rewards(user_id: int, civil_day: date) -> DayRewardsResponse:
    """Rewards issued to the user for a civil day, with totals."""
    rewards = await get_stats.get_rewards_for_date(user_id, civil_day)
    return DayRewardsResponse.model_validate(rewards)
