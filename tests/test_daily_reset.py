"""
Тесты для DailyResetUseCase: сверка, streak, очистка истории.
"""

from datetime import date, timedelta

import pytest

from src.core.use_cases import daily_reset
from src.core.use_cases.daily_reset import DailyResetUseCase
from src.core.use_cases.get_stats import get_reset_stats
from src.database.models import DailyAccrual, Reward, Submission, User
from src.storage import submission_repo

TODAY = date(2025, 1, 15)
YESTERDAY = TODAY - timedelta(days=1)


async def record_without_reward(user, task, keys, day, at):
    """Отметки без выдачи награды (как после сбоя посреди запроса)."""
    for key in keys:
        await submission_repo.record_submission(
            user_id=user.id,
            task_id=task.id,
            subtask_key=key,
            civil_day=day,
            submitted_at=at(day, "08:00"),
            proof_reference="proof",
            valid=True,
            validation_reason="on_time",
            validation_message="",
        )


@pytest.mark.asyncio
async def test_reset_recovers_missed_reward_and_settles_day(user, task, clock, at):
    await record_without_reward(user, task, ["brush", "water", "tablets"], YESTERDAY, at)

    result = await DailyResetUseCase(clock=clock).execute(as_of=TODAY)

    assert result.success
    assert result.users_processed == 1
    assert result.accruals_settled == 1
    assert result.rewards_issued == 1
    assert result.totals_credited == {"xp": 20, "currency": 100}

    accrual = await DailyAccrual.get(user_id=user.id, civil_day=YESTERDAY)
    assert accrual.settled
    assert accrual.settled_at is not None
    assert accrual.tasks_rewarded == 1

    user = await User.get(id=user.id)
    assert user.xp == 20
    assert user.streak_count == 1


@pytest.mark.asyncio
async def test_reset_twice_is_noop(user, task, clock, at):
    await record_without_reward(user, task, ["brush", "water", "tablets"], YESTERDAY, at)
    use_case = DailyResetUseCase(clock=clock)

    await use_case.execute(as_of=TODAY)
    second = await use_case.execute(as_of=TODAY)

    assert second.success
    assert second.accruals_settled == 0
    assert second.rewards_issued == 0
    assert second.streaks_updated == 0
    assert await Reward.filter(user_id=user.id).count() == 1
    assert (await User.get(id=user.id)).xp == 20


@pytest.mark.asyncio
async def test_reset_leaves_today_open(user, small_task, clock, at):
    await record_without_reward(user, small_task, ["feed"], TODAY, at)

    result = await DailyResetUseCase(clock=clock).execute(as_of=TODAY)

    assert result.accruals_settled == 0
    accrual = await DailyAccrual.get(user_id=user.id, civil_day=TODAY)
    assert not accrual.settled


@pytest.mark.asyncio
async def test_prune_keeps_rewards(user, small_task, clock, at):
    old_day = TODAY - timedelta(days=40)
    await record_without_reward(user, small_task, ["feed"], old_day, at)

    result = await DailyResetUseCase(clock=clock, retention_days=30).execute(as_of=TODAY)

    assert result.rewards_issued == 1
    assert result.records_pruned == 2  # отметка + закрытый DailyAccrual
    assert await Submission.filter(user_id=user.id).count() == 0
    assert await DailyAccrual.filter(user_id=user.id).count() == 0
    assert await Reward.filter(user_id=user.id, civil_day=old_day).count() == 1


@pytest.mark.asyncio
async def test_failure_for_one_user_does_not_stop_others(user, small_task, clock, at, monkeypatch):
    other = await User.create(name="Other")
    await record_without_reward(user, small_task, ["feed"], YESTERDAY, at)
    await record_without_reward(other, small_task, ["feed"], YESTERDAY, at)

    original = daily_reset.settle_task_reward

    async def flaky_settle(user_id, task, civil_day, bonus_multiplier=1.0):
        if user_id == user.id:
            raise RuntimeError("db glitch")
        return await original(user_id, task, civil_day, bonus_multiplier)

    monkeypatch.setattr(daily_reset, "settle_task_reward", flaky_settle)

    result = await DailyResetUseCase(clock=clock).execute(as_of=TODAY)

    assert not result.success
    assert len(result.failures) == 1
    assert f"user={user.id}" in result.failures[0]
    assert result.accruals_settled == 1

    assert not (await DailyAccrual.get(user_id=user.id, civil_day=YESTERDAY)).settled
    assert (await DailyAccrual.get(user_id=other.id, civil_day=YESTERDAY)).settled

    # Следующий запуск довыдаёт награду пропущенному дню
    monkeypatch.setattr(daily_reset, "settle_task_reward", original)
    retry = await DailyResetUseCase(clock=clock).execute(as_of=TODAY)
    assert retry.success
    assert retry.rewards_issued == 1
    assert await Reward.filter(user_id=user.id).count() == 1


@pytest.mark.asyncio
async def test_stale_streak_is_reset(user, clock):
    await User.filter(id=user.id).update(streak_count=5)

    result = await DailyResetUseCase(clock=clock).execute(as_of=TODAY)

    assert result.streaks_updated == 1
    assert (await User.get(id=user.id)).streak_count == 0


@pytest.mark.asyncio
async def test_reset_stats_after_settlement(user, task, small_task, clock, at):
    await record_without_reward(user, task, ["brush", "water", "tablets"], YESTERDAY, at)
    await record_without_reward(user, small_task, ["feed"], YESTERDAY, at)
    await record_without_reward(user, small_task, ["feed"], TODAY, at)

    await DailyResetUseCase(clock=clock).execute(as_of=TODAY)
    stats = await get_reset_stats(TODAY, days=7)

    assert [s.civil_day for s in stats] == [YESTERDAY]
    assert stats[0].users == 1
    assert stats[0].xp_accrued == 30
    assert stats[0].currency_accrued == 150
    assert stats[0].tasks_rewarded == 2
