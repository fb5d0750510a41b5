"""
Submit Bonus Use Case - бонусная активность (дополнительное видео и т.п.).

AICODE-NOTE: Бонус не проходит через CompletionDetector и дедлайны:
награда выдаётся сразу через write_reward(), в одной транзакции с записью.
"""

import logging
from dataclasses import dataclass
from datetime import datetime

from tortoise.transactions import in_transaction

from src.config import config
from src.core.domain.day_clock import DayClock, get_day_clock
from src.core.domain.gamification import BONUS_TYPES, BonusClaim
from src.core.errors import SubmissionError
from src.core.use_cases.settle_reward import write_reward
from src.database.models import BonusSubmission, Reward
from src.storage import bonus_repo, daily_accrual_repo, task_repo, user_repo

logger = logging.getLogger(__name__)


@dataclass
class BonusResult:
    """Результат бонусной отметки."""

    success: bool
    bonus_submission: BonusSubmission | None = None
    reward: Reward | None = None
    error: SubmissionError | None = None
    error_message: str = ""


class SubmitBonusUseCase:
    """Use-case для бонусной активности."""

    def __init__(self, clock: DayClock | None = None) -> None:
        self.clock = clock or get_day_clock()

    async def execute(
        self,
        user_id: int,
        task_id: int,
        subtask_key: str,
        proof_reference: str,
        bonus_type: str = "additional_video",
        submitted_at: datetime | None = None,
        reward_currency: int | None = None,
        reward_xp: int = 0,
    ) -> BonusResult:
        """
        Записать бонусную активность и сразу выдать награду.

        Args:
            reward_currency: Сумма бонуса (по умолчанию DEFAULT_BONUS_CURRENCY)
            reward_xp: XP за бонус (по умолчанию 0)
        """
        if bonus_type not in BONUS_TYPES:
            return BonusResult(
                success=False,
                error=SubmissionError.INVALID_BONUS_TYPE,
                error_message=f"Invalid bonus type. Must be one of: {', '.join(BONUS_TYPES)}",
            )

        if submitted_at is None:
            submitted_at = self.clock.now()
        if reward_currency is None:
            reward_currency = config.DEFAULT_BONUS_CURRENCY

        user = await user_repo.get_user(user_id)
        if not user:
            return BonusResult(
                success=False,
                error=SubmissionError.USER_NOT_FOUND,
                error_message="User not found",
            )

        task = await task_repo.get_task(task_id)
        if not task:
            return BonusResult(
                success=False,
                error=SubmissionError.TASK_NOT_FOUND,
                error_message="Task not found",
            )
        if not task.is_active:
            return BonusResult(
                success=False,
                error=SubmissionError.TASK_INACTIVE,
                error_message="Task is not active",
            )

        civil_day = self.clock.day_key(submitted_at)
        await daily_accrual_repo.get_or_create_accrual(user_id, civil_day)

        # AICODE-NOTE: Бонус и его награда - одна транзакция: без награды
        # бонусная запись не сохраняется
        async with in_transaction() as conn:
            bonus = await bonus_repo.create_bonus_submission(
                user_id=user_id,
                task_id=task_id,
                subtask_key=subtask_key,
                bonus_type=bonus_type,
                civil_day=civil_day,
                submitted_at=submitted_at,
                proof_reference=proof_reference,
                reward_xp=reward_xp,
                reward_currency=reward_currency,
                using_db=conn,
            )
            reward = await write_reward(
                BonusClaim(
                    user_id=user_id,
                    task_id=task_id,
                    civil_day=civil_day,
                    bonus_submission_id=bonus.id,
                    bonus_type=bonus_type,
                    reward_xp=reward_xp,
                    reward_currency=reward_currency,
                ),
                conn,
            )

        logger.info(
            f"Bonus {bonus_type} recorded for user {user_id}, task {task_id} "
            f"on {civil_day}: +{reward_currency} currency"
        )
        return BonusResult(success=True, bonus_submission=bonus, reward=reward)
