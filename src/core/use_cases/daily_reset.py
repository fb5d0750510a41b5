"""
Daily Reset Use Case - ночная сверка, streak и очистка истории.

AICODE-NOTE: Три шага, каждый идемпотентен сам по себе:
1. Сверка: для каждого незакрытого DailyAccrual прошедшего дня
   довыдать награды, пропущенные из-за сбоев, потом закрыть день
   (settled=True последним, условным UPDATE)
2. Streak: пересчитать и сохранить User.streak_count
3. Очистка: удалить отметки и закрытые DailyAccrual старше RETENTION_DAYS.
   Награды (Reward) не удаляются никогда.

Ошибка по одному пользователю/дню логируется и попадает в failures,
остальные продолжают обрабатываться. Повторный запуск - no-op.
Блокировку от параллельного запуска держит services/scheduler.py.
"""

import logging
from dataclasses import dataclass, field
from datetime import date, timedelta

from src.config import config
from src.core.domain.day_clock import DayClock, get_day_clock
from src.core.domain.gamification import BonusClaim
from src.core.use_cases.get_stats import get_streak
from src.core.use_cases.settle_reward import issue_reward, settle_task_reward
from src.database.models import DailyAccrual, Reward
from src.storage import (
    bonus_repo,
    daily_accrual_repo,
    reward_repo,
    submission_repo,
    task_repo,
    user_repo,
)

logger = logging.getLogger(__name__)


@dataclass
class DailyResetResult:
    """Результат ночной сверки."""

    civil_day: date
    users_processed: int = 0
    accruals_settled: int = 0
    rewards_issued: int = 0
    xp_credited: int = 0
    currency_credited: int = 0
    streaks_updated: int = 0
    records_pruned: int = 0
    failures: list[str] = field(default_factory=list)
    skipped: bool = False

    @property
    def success(self) -> bool:
        return not self.failures and not self.skipped

    @property
    def totals_credited(self) -> dict[str, int]:
        """XP и валюта, довыданные сверкой в этом запуске."""
        return {"xp": self.xp_credited, "currency": self.currency_credited}


class DailyResetUseCase:
    """Use-case для ночной сверки (run_daily_reset)."""

    def __init__(
        self, clock: DayClock | None = None, retention_days: int | None = None
    ) -> None:
        self.clock = clock or get_day_clock()
        self.retention_days = retention_days or config.RETENTION_DAYS

    async def execute(self, as_of: date | None = None) -> DailyResetResult:
        """
        Выполнить сверку.

        Args:
            as_of: "Сегодня" в гражданском времени (по умолчанию текущий день).
                Закрываются все дни строго раньше as_of.
        """
        today = as_of or self.clock.today()
        result = DailyResetResult(civil_day=today)
        logger.info(f"Daily reset started for {today}")

        processed_users = await self._settle_accruals(today, result)
        await self._reconcile_streaks(today, processed_users, result)
        await self._prune_history(today, result)

        logger.info(
            f"Daily reset for {today} finished: users={result.users_processed}, "
            f"settled={result.accruals_settled}, rewards={result.rewards_issued} "
            f"(+{result.xp_credited} XP, +{result.currency_credited} currency), "
            f"streaks={result.streaks_updated}, pruned={result.records_pruned}, "
            f"failures={len(result.failures)}"
        )
        return result

    async def _settle_accruals(self, today: date, result: DailyResetResult) -> set[int]:
        accruals = await daily_accrual_repo.get_unsettled_before(today)
        logger.info(f"Settlement sweep: {len(accruals)} unsettled day(s) before {today}")

        processed: set[int] = set()
        for accrual in accruals:
            try:
                rewards = await self._settle_accrual(accrual)
                for reward in rewards:
                    result.rewards_issued += 1
                    result.xp_credited += reward.total_xp
                    result.currency_credited += reward.total_currency

                if await daily_accrual_repo.mark_settled(accrual.id, self.clock.now()):
                    result.accruals_settled += 1
                processed.add(accrual.user_id)
            except Exception:
                logger.exception(
                    f"Failed to settle day {accrual.civil_day} for user {accrual.user_id}"
                )
                result.failures.append(
                    f"settle user={accrual.user_id} day={accrual.civil_day}"
                )

        result.users_processed = len(processed)
        return processed

    async def _settle_accrual(self, accrual: DailyAccrual) -> list[Reward]:
        """Довыдать награды дня, которые не были выданы при отметке."""
        issued: list[Reward] = []

        task_ids = await submission_repo.get_task_ids_for_day(
            accrual.user_id, accrual.civil_day
        )
        for task in await task_repo.get_tasks_by_ids(task_ids):
            reward = await settle_task_reward(accrual.user_id, task, accrual.civil_day)
            if reward is not None:
                logger.warning(
                    f"Recovered missed reward for user {accrual.user_id}, "
                    f"task {task.id} on {accrual.civil_day}"
                )
                issued.append(reward)

        bonuses = await bonus_repo.get_bonus_submissions_for_day(
            accrual.user_id, accrual.civil_day
        )
        for bonus in bonuses:
            claim = BonusClaim(
                user_id=bonus.user_id,
                task_id=bonus.task_id,
                civil_day=bonus.civil_day,
                bonus_submission_id=bonus.id,
                bonus_type=bonus.bonus_type,
                reward_xp=bonus.reward_xp,
                reward_currency=bonus.reward_currency,
            )
            if await reward_repo.reward_exists(
                claim.user_id, claim.task_id, claim.civil_day, claim.source
            ):
                continue
            reward = await issue_reward(claim)
            if reward is not None:
                logger.warning(
                    f"Recovered missed bonus reward {claim.source} for user {bonus.user_id}"
                )
                issued.append(reward)

        return issued

    async def _reconcile_streaks(
        self, today: date, processed_users: set[int], result: DailyResetResult
    ) -> None:
        user_ids = processed_users | set(await user_repo.get_users_with_streak())
        for user_id in sorted(user_ids):
            try:
                user = await user_repo.get_user(user_id)
                if not user:
                    continue
                streak = await get_streak(user_id, today)
                if streak != user.streak_count:
                    await user_repo.update_streak(user_id, streak, self.clock.now())
                    result.streaks_updated += 1
            except Exception:
                logger.exception(f"Failed to reconcile streak for user {user_id}")
                result.failures.append(f"streak user={user_id}")

    async def _prune_history(self, today: date, result: DailyResetResult) -> None:
        cutoff = today - timedelta(days=self.retention_days)
        try:
            submissions = await submission_repo.delete_older_than(cutoff)
            bonuses = await bonus_repo.delete_older_than(cutoff)
            accruals = await daily_accrual_repo.delete_settled_older_than(cutoff)
        except Exception:
            logger.exception(f"Failed to prune history older than {cutoff}")
            result.failures.append(f"prune before={cutoff}")
            return

        result.records_pruned = submissions + bonuses + accruals
        logger.info(
            f"Pruned history before {cutoff}: {submissions} submissions, "
            f"{bonuses} bonus submissions, {accruals} daily accruals"
        )
