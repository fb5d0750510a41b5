"""
Bonus Repository - тупые CRUD операции для BonusSubmission.

AICODE-NOTE: У бонусной отметки нет слота уникальности: каждая запись
получает свою награду (Reward.source = "bonus:<id>").
"""

from datetime import date, datetime

from tortoise.backends.base.client import BaseDBAsyncClient

from src.database.models import BonusSubmission


async def create_bonus_submission(
    user_id: int,
    task_id: int,
    subtask_key: str,
    bonus_type: str,
    civil_day: date,
    submitted_at: datetime,
    proof_reference: str,
    reward_xp: int,
    reward_currency: int,
    using_db: BaseDBAsyncClient | None = None,
) -> BonusSubmission:
    return await BonusSubmission.create(
        user_id=user_id,
        task_id=task_id,
        subtask_key=subtask_key,
        bonus_type=bonus_type,
        civil_day=civil_day,
        submitted_at=submitted_at,
        proof_reference=proof_reference,
        reward_xp=reward_xp,
        reward_currency=reward_currency,
        using_db=using_db,
    )


async def get_bonus_submissions_for_day(
    user_id: int, civil_day: date
) -> list[BonusSubmission]:
    """Бонусные отметки пользователя за день."""
    return await BonusSubmission.filter(user_id=user_id, civil_day=civil_day).order_by(
        "submitted_at"
    )


async def delete_older_than(cutoff_day: date) -> int:
    return await BonusSubmission.filter(civil_day__lt=cutoff_day).delete()
