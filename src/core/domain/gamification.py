"""
Gamification Domain Rules - чистые функции для расчета наград, level, streak.

AICODE-NOTE: Чистые функции БЕЗ доступа к БД, БЕЗ side-effects.
Вызываются из use-cases для расчета наград.
"""

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date, timedelta

XP_PER_LEVEL = 100
MIN_BONUS_MULTIPLIER = 0.1

BONUS_TYPES = ("additional_video", "extra_activity")


@dataclass(frozen=True)
class TaskCompletionClaim:
    """Награда за завершение задачи: одна на (user, task, civil_day)."""

    user_id: int
    task_id: int
    civil_day: date
    reward_xp: int
    reward_currency: int
    bonus_multiplier: float = 1.0

    @property
    def source(self) -> str:
        return "task"

    @property
    def reason(self) -> str | None:
        return None


@dataclass(frozen=True)
class BonusClaim:
    """Награда за бонусную отметку: одна на запись BonusSubmission."""

    user_id: int
    task_id: int
    civil_day: date
    bonus_submission_id: int
    bonus_type: str
    reward_xp: int
    reward_currency: int
    bonus_multiplier: float = 1.0

    @property
    def source(self) -> str:
        return f"bonus:{self.bonus_submission_id}"

    @property
    def reason(self) -> str | None:
        return f"Bonus activity: {self.bonus_type}"


RewardClaim = TaskCompletionClaim | BonusClaim


def apply_multiplier(amount: int, multiplier: float) -> int:
    """Итоговая сумма с множителем (округление как в журнале наград)."""
    if multiplier < MIN_BONUS_MULTIPLIER:
        raise ValueError(f"bonus multiplier cannot be less than {MIN_BONUS_MULTIPLIER}")
    return round(amount * multiplier)


def calculate_level(total_xp: int) -> int:
    """
    Рассчитать уровень пользователя на основе общего XP.

    Формула: level = xp // 100 + 1
    - 0-99 XP = Level 1
    - 100-199 XP = Level 2
    """
    return max(total_xp, 0) // XP_PER_LEVEL + 1


def next_level_xp(level: int) -> int:
    """Сколько XP нужно для следующего уровня."""
    return level * XP_PER_LEVEL


def calculate_streak(valid_days: Iterable[date], reference_day: date) -> int:
    """
    Рассчитать текущий streak на reference_day.

    Логика:
    - Берём множество дней, где есть хотя бы одна валидная отметка
    - Если в reference_day отметки ещё нет → считаем серию, заканчивающуюся вчера
    - Идём назад по одному дню, первый пропуск обрывает серию
    """
    days = set(valid_days)
    if not days:
        return 0

    check_day = reference_day
    if check_day not in days:
        check_day -= timedelta(days=1)

    streak = 0
    while check_day in days:
        streak += 1
        check_day -= timedelta(days=1)
    return streak
