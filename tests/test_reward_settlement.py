"""
Тесты для RewardSettlement: награда выдаётся ровно один раз.
"""

import asyncio
from datetime import date

import pytest

from src.core.domain.gamification import TaskCompletionClaim
from src.core.use_cases.settle_reward import issue_reward, settle_task_reward
from src.database.models import DailyAccrual, Reward, Submission, User

TODAY = date(2025, 1, 15)


async def add_submission(user, task, key, valid=True, at=None, day=TODAY):
    return await Submission.create(
        user=user,
        task=task,
        subtask_key=key,
        civil_day=day,
        submitted_at=at,
        proof_reference="proof",
        valid=valid,
        validation_reason="anytime" if valid else "late",
        validation_message="",
    )


@pytest.mark.asyncio
async def test_concurrent_settle_creates_exactly_one_reward(user, task, at):
    for key in ("brush", "water", "tablets"):
        await add_submission(user, task, key, at=at(TODAY, "08:00"))
    await DailyAccrual.create(user=user, civil_day=TODAY)

    results = await asyncio.gather(
        *(settle_task_reward(user.id, task, TODAY) for _ in range(5))
    )

    assert sum(1 for r in results if r is not None) == 1
    assert await Reward.filter(user_id=user.id, task_id=task.id, civil_day=TODAY).count() == 1

    user = await User.get(id=user.id)
    assert user.xp == 20
    assert user.currency_earned == 100

    accrual = await DailyAccrual.get(user_id=user.id, civil_day=TODAY)
    assert accrual.tasks_rewarded == 1


@pytest.mark.asyncio
async def test_second_settle_returns_none(user, task, at):
    for key in ("brush", "water", "tablets"):
        await add_submission(user, task, key, at=at(TODAY, "08:00"))

    first = await settle_task_reward(user.id, task, TODAY)
    second = await settle_task_reward(user.id, task, TODAY)

    assert first is not None
    assert second is None
    assert (await User.get(id=user.id)).xp == 20


@pytest.mark.asyncio
async def test_settle_incomplete_task_returns_none(user, task, at):
    await add_submission(user, task, "brush", at=at(TODAY, "08:00"))

    assert await settle_task_reward(user.id, task, TODAY) is None
    assert await Reward.all().count() == 0


@pytest.mark.asyncio
async def test_settle_with_late_submission_returns_none(user, task, at):
    await add_submission(user, task, "brush", valid=False, at=at(TODAY, "10:00"))
    await add_submission(user, task, "water", at=at(TODAY, "10:00"))
    await add_submission(user, task, "tablets", at=at(TODAY, "12:00"))

    assert await settle_task_reward(user.id, task, TODAY) is None


@pytest.mark.asyncio
async def test_multiplier_applied_to_totals(user, task):
    reward = await issue_reward(
        TaskCompletionClaim(
            user_id=user.id,
            task_id=task.id,
            civil_day=TODAY,
            reward_xp=20,
            reward_currency=100,
            bonus_multiplier=1.5,
        )
    )

    assert reward.total_xp == 30
    assert reward.total_currency == 150
    user = await User.get(id=user.id)
    assert user.xp == 30
    assert user.currency_earned == 150


@pytest.mark.asyncio
async def test_failed_credit_rolls_back_reward(monkeypatch, user, task):
    from src.storage import user_repo

    async def broken_credit(*args, **kwargs):
        raise RuntimeError("connection lost")

    monkeypatch.setattr(user_repo, "credit_totals", broken_credit)
    claim = TaskCompletionClaim(
        user_id=user.id, task_id=task.id, civil_day=TODAY, reward_xp=20, reward_currency=100
    )

    with pytest.raises(RuntimeError):
        await issue_reward(claim)

    # Ни награды, ни частичного начисления
    assert await Reward.all().count() == 0
    assert (await User.get(id=user.id)).xp == 0


@pytest.mark.asyncio
async def test_settled_accrual_tally_not_changed(user, task):
    await DailyAccrual.create(user=user, civil_day=TODAY, settled=True)

    await issue_reward(
        TaskCompletionClaim(
            user_id=user.id, task_id=task.id, civil_day=TODAY, reward_xp=20, reward_currency=100
        )
    )

    accrual = await DailyAccrual.get(user_id=user.id, civil_day=TODAY)
    assert accrual.xp_accrued == 0
    assert accrual.tasks_rewarded == 0
