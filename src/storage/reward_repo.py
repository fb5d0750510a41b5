"""
Reward Repository - журнал выданных наград.

AICODE-NOTE: Награды никогда не удаляются и не изменяются.
Удаления по retention здесь нет намеренно.
"""

from datetime import date

from tortoise.backends.base.client import BaseDBAsyncClient

from src.database.models import Reward


async def create_reward(
    user_id: int,
    task_id: int,
    civil_day: date,
    source: str,
    reward_xp: int,
    reward_currency: int,
    bonus_multiplier: float = 1.0,
    bonus_reason: str | None = None,
    using_db: BaseDBAsyncClient | None = None,
) -> Reward:
    """Вставить награду. IntegrityError - награда уже существует."""
    return await Reward.create(
        user_id=user_id,
        task_id=task_id,
        civil_day=civil_day,
        source=source,
        reward_xp=reward_xp,
        reward_currency=reward_currency,
        bonus_multiplier=bonus_multiplier,
        bonus_reason=bonus_reason,
        using_db=using_db,
    )


async def get_reward(
    user_id: int, task_id: int, civil_day: date, source: str = "task"
) -> Reward | None:
    return await Reward.get_or_none(
        user_id=user_id, task_id=task_id, civil_day=civil_day, source=source
    )


async def reward_exists(
    user_id: int, task_id: int, civil_day: date, source: str = "task"
) -> bool:
    return await Reward.exists(
        user_id=user_id, task_id=task_id, civil_day=civil_day, source=source
    )


async def get_rewards_for_day(user_id: int, civil_day: date) -> list[Reward]:
    """Все награды пользователя за день (задачи и бонусы)."""
    return await Reward.filter(user_id=user_id, civil_day=civil_day).order_by(
        "awarded_at"
    )


async def get_rewarded_task_ids(user_id: int, civil_day: date) -> set[int]:
    """ID задач, за которые уже выдана награда за завершение."""
    task_ids = await Reward.filter(
        user_id=user_id, civil_day=civil_day, source="task"
    ).values_list("task_id", flat=True)
    return set(task_ids)
