"""
Reward Settlement - выдача наград ровно один раз.

AICODE-NOTE: Вставка Reward под ограничением уникальности. Если вставка
упала с IntegrityError и награда уже есть - её выдал другой запрос,
это не ошибка ("already settled"). Вставка награды, начисление
XP/валюты и итоги дня - одна транзакция: либо всё, либо ничего.

issue_reward() - общий примитив для обычных и бонусных наград.
write_reward() - то же внутри чужой транзакции (бонус пишется вместе с наградой).
"""

import logging
from datetime import date

from tortoise.backends.base.client import BaseDBAsyncClient
from tortoise.exceptions import IntegrityError
from tortoise.transactions import in_transaction

from src.core.domain.gamification import (
    RewardClaim,
    TaskCompletionClaim,
    apply_multiplier,
    calculate_level,
)
from src.core.use_cases.check_completion import detect_completion
from src.database.models import Reward, Task
from src.storage import daily_accrual_repo, reward_repo, user_repo

logger = logging.getLogger(__name__)


async def write_reward(claim: RewardClaim, conn: BaseDBAsyncClient) -> Reward:
    """
    Записать награду внутри уже открытой транзакции conn.

    Вставка Reward, начисление пользователю, итоги дня и уровень.
    IntegrityError не перехватывается: решает вызывающий.
    """
    total_xp = apply_multiplier(claim.reward_xp, claim.bonus_multiplier)
    total_currency = apply_multiplier(claim.reward_currency, claim.bonus_multiplier)
    tasks_rewarded = 1 if isinstance(claim, TaskCompletionClaim) else 0

    reward = await reward_repo.create_reward(
        user_id=claim.user_id,
        task_id=claim.task_id,
        civil_day=claim.civil_day,
        source=claim.source,
        reward_xp=claim.reward_xp,
        reward_currency=claim.reward_currency,
        bonus_multiplier=claim.bonus_multiplier,
        bonus_reason=claim.reason,
        using_db=conn,
    )
    await user_repo.credit_totals(claim.user_id, total_xp, total_currency, using_db=conn)
    await daily_accrual_repo.add_accrued(
        claim.user_id,
        claim.civil_day,
        total_xp,
        total_currency,
        tasks_rewarded=tasks_rewarded,
        using_db=conn,
    )
    new_xp = await user_repo.get_xp(claim.user_id, using_db=conn)
    await user_repo.raise_level(claim.user_id, calculate_level(new_xp), using_db=conn)

    logger.info(
        f"Reward {claim.source} issued to user {claim.user_id} for task "
        f"{claim.task_id} on {claim.civil_day}: +{total_xp} XP, +{total_currency} currency"
    )
    return reward


async def issue_reward(claim: RewardClaim) -> Reward | None:
    """
    Выдать награду по заявке в отдельной транзакции.

    Returns:
        Reward - награда выдана этим вызовом
        None - награда уже была выдана раньше
    """
    try:
        async with in_transaction() as conn:
            return await write_reward(claim, conn)
    except IntegrityError:
        if await reward_repo.reward_exists(
            claim.user_id, claim.task_id, claim.civil_day, claim.source
        ):
            logger.info(
                f"Reward {claim.source} for user {claim.user_id}, task {claim.task_id} "
                f"on {claim.civil_day} already settled"
            )
            return None
        raise


async def settle_task_reward(
    user_id: int, task: Task, civil_day: date, bonus_multiplier: float = 1.0
) -> Reward | None:
    """
    Выдать награду за задачу, если она завершена вовремя.

    None - задача не заслуживает награды или награда уже выдана.
    """
    completion = await detect_completion(user_id, task.id, civil_day)
    if not completion.reward_eligible:
        return None

    return await issue_reward(
        TaskCompletionClaim(
            user_id=user_id,
            task_id=task.id,
            civil_day=civil_day,
            reward_xp=task.reward_xp,
            reward_currency=task.reward_currency,
            bonus_multiplier=bonus_multiplier,
        )
    )
