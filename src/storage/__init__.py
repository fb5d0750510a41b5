"""Storage layer - тупые CRUD репозитории без бизнес-логики."""

from . import (
    bonus_repo,
    daily_accrual_repo,
    reward_repo,
    submission_repo,
    task_repo,
    user_repo,
)

__all__ = [
    "bonus_repo",
    "daily_accrual_repo",
    "reward_repo",
    "submission_repo",
    "task_repo",
    "user_repo",
]
