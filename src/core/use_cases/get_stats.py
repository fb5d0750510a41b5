"""
Stats Queries - streak, статистика пользователя, награды за день.

AICODE-NOTE: Streak считается по требованию из истории отметок,
а не меняется как побочный эффект отметки. История ограничена
RETENTION_DAYS, поэтому streak не может быть длиннее окна хранения.
"""

import logging
from dataclasses import dataclass
from datetime import date, timedelta

from src.core.domain.day_clock import DayClock, get_day_clock
from src.core.domain.gamification import calculate_streak, next_level_xp
from src.database.models import Reward
from src.storage import daily_accrual_repo, reward_repo, submission_repo, user_repo

logger = logging.getLogger(__name__)


@dataclass
class UserStats:
    user_id: int
    name: str
    xp: int
    currency_earned: int
    level: int
    next_level_xp: int
    streak_count: int


@dataclass
class DayRewards:
    civil_day: date
    rewards: list[Reward]

    @property
    def total_xp(self) -> int:
        return sum(r.total_xp for r in self.rewards)

    @property
    def total_currency(self) -> int:
        return sum(r.total_currency for r in self.rewards)

    @property
    def count(self) -> int:
        return len(self.rewards)


@dataclass
class ResetDayStats:
    """Итоги одного закрытого дня по всем пользователям."""

    civil_day: date
    users: int = 0
    xp_accrued: int = 0
    currency_accrued: int = 0
    tasks_rewarded: int = 0


async def get_streak(user_id: int, as_of: date) -> int:
    """Текущий streak пользователя на день as_of."""
    valid_days = await submission_repo.get_valid_days(user_id, as_of)
    return calculate_streak(valid_days, as_of)


async def get_user_stats(user_id: int, clock: DayClock | None = None) -> UserStats | None:
    """
    Статистика пользователя.

    Streak пересчитывается и сохраняется, если отличается от сохранённого.
    """
    clock = clock or get_day_clock()
    user = await user_repo.get_user(user_id)
    if not user:
        return None

    streak = await get_streak(user_id, clock.today())
    if streak != user.streak_count:
        await user_repo.update_streak(user_id, streak, clock.now())
        logger.info(f"Streak for user {user_id} updated: {user.streak_count} -> {streak}")

    return UserStats(
        user_id=user.id,
        name=user.name,
        xp=user.xp,
        currency_earned=user.currency_earned,
        level=user.level,
        next_level_xp=next_level_xp(user.level),
        streak_count=streak,
    )


async def get_rewards_for_date(user_id: int, civil_day: date) -> DayRewards:
    """Награды пользователя за день с итогами."""
    rewards = await reward_repo.get_rewards_for_day(user_id, civil_day)
    return DayRewards(civil_day=civil_day, rewards=rewards)


async def get_reset_stats(today: date, days: int = 7) -> list[ResetDayStats]:
    """Итоги закрытых дней за последние days дней (новые первыми)."""
    accruals = await daily_accrual_repo.get_settled_between(
        today - timedelta(days=days), today
    )

    by_day: dict[date, ResetDayStats] = {}
    for accrual in accruals:
        stats = by_day.setdefault(
            accrual.civil_day, ResetDayStats(civil_day=accrual.civil_day)
        )
        stats.users += 1
        stats.xp_accrued += accrual.xp_accrued
        stats.currency_accrued += accrual.currency_accrued
        stats.tasks_rewarded += accrual.tasks_rewarded
    return [by_day[d] for d in sorted(by_day, reverse=True)]
