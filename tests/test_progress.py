"""
Тесты для запросов прогресса, streak и статистики.
"""

from datetime import date, timedelta

import pytest

from src.core.domain.completion import CompletionStatus
from src.core.use_cases import get_progress, get_stats
from src.core.use_cases.record_submission import RecordSubmissionUseCase
from src.database.models import Submission, User

TODAY = date(2025, 1, 15)  # среда


@pytest.fixture
def record(clock):
    use_case = RecordSubmissionUseCase(clock=clock)

    async def _record(user, task, key, when):
        return await use_case.execute(
            user_id=user.id, task_id=task.id, subtask_key=key,
            proof_reference="proof", submitted_at=when,
        )

    return _record


async def add_valid_day(user, task, day, at):
    await Submission.create(
        user=user, task=task, subtask_key="water", civil_day=day,
        submitted_at=at(day, "10:00"), proof_reference="p", valid=True,
        validation_reason="anytime", validation_message="",
    )


@pytest.mark.asyncio
async def test_day_progress(record, user, task, small_task, at):
    await record(user, task, "brush", at(TODAY, "08:00"))
    await record(user, small_task, "feed", at(TODAY, "09:00"))

    progress = await get_progress.get_progress(user.id, TODAY)

    by_key = {t.task_key: t for t in progress.tasks}
    morning = by_key["morning"]
    assert morning.status is CompletionStatus.INCOMPLETE
    assert (morning.completed_subtasks, morning.total_subtasks) == (1, 3)
    assert morning.percentage == 33
    assert [s.key for s in morning.subtasks] == ["brush", "water", "tablets"]
    assert morning.subtasks[0].completed and morning.subtasks[0].valid
    assert not morning.subtasks[1].completed

    pets = by_key["pets"]
    assert pets.is_reward_eligible
    assert pets.reward_issued

    summary = progress.summary
    assert (summary.total_tasks, summary.completed_tasks) == (2, 1)
    assert summary.task_completion_rate == 50
    assert (summary.total_subtasks, summary.completed_subtasks) == (4, 2)
    assert summary.subtask_completion_rate == 50


@pytest.mark.asyncio
async def test_progress_unknown_user(db):
    assert await get_progress.get_progress(999, TODAY) is None


@pytest.mark.asyncio
async def test_progress_range_limits(user):
    with pytest.raises(ValueError):
        await get_progress.get_progress_range(user.id, TODAY, TODAY - timedelta(days=1))
    with pytest.raises(ValueError):
        await get_progress.get_progress_range(user.id, TODAY, TODAY + timedelta(days=31))

    days = await get_progress.get_progress_range(user.id, TODAY, TODAY + timedelta(days=30))
    assert len(days) == 31


@pytest.mark.asyncio
async def test_weekly_progress_sunday_to_saturday(record, user, small_task, at):
    monday = date(2025, 1, 13)
    await record(user, small_task, "feed", at(monday, "09:00"))
    await record(user, small_task, "feed", at(TODAY, "09:00"))

    week = await get_progress.get_weekly_progress(user.id, TODAY)

    assert week.week_start == date(2025, 1, 12)
    assert week.week_end == date(2025, 1, 18)
    assert len(week.days) == 7
    assert week.total_tasks == 7
    assert week.completed_tasks == 2
    assert week.productive_days == 2
    assert week.completion_rate == 29


def test_week_start_on_sunday_is_same_day():
    sunday = date(2025, 1, 12)
    assert get_progress.week_start(sunday) == sunday
    assert get_progress.week_start(date(2025, 1, 18)) == sunday


@pytest.mark.asyncio
async def test_streak_from_history(user, task, at):
    # Отметки в D, D-1, D-2 → 3; без D → 2 (серия до вчера)
    for offset in (1, 2):
        await add_valid_day(user, task, TODAY - timedelta(days=offset), at)
    assert await get_stats.get_streak(user.id, TODAY) == 2

    await add_valid_day(user, task, TODAY, at)
    assert await get_stats.get_streak(user.id, TODAY) == 3


@pytest.mark.asyncio
async def test_invalid_submissions_do_not_count_for_streak(user, task, at):
    await Submission.create(
        user=user, task=task, subtask_key="brush", civil_day=TODAY - timedelta(days=1),
        submitted_at=at(TODAY - timedelta(days=1), "10:00"), proof_reference="p",
        valid=False, validation_reason="late", validation_message="",
    )
    assert await get_stats.get_streak(user.id, TODAY) == 0


@pytest.mark.asyncio
async def test_user_stats_persist_recomputed_streak(user, task, at, clock, monkeypatch):
    monkeypatch.setattr(clock, "today", lambda: TODAY)
    await add_valid_day(user, task, TODAY - timedelta(days=1), at)

    stats = await get_stats.get_user_stats(user.id, clock=clock)

    assert stats.streak_count == 1
    assert stats.level == 1
    assert stats.next_level_xp == 100
    assert (await User.get(id=user.id)).streak_count == 1


@pytest.mark.asyncio
async def test_rewards_for_date(record, user, small_task, at):
    await record(user, small_task, "feed", at(TODAY, "09:00"))

    rewards = await get_stats.get_rewards_for_date(user.id, TODAY)

    assert rewards.count == 1
    assert rewards.total_xp == 10
    assert rewards.total_currency == 50

    empty = await get_stats.get_rewards_for_date(user.id, TODAY - timedelta(days=1))
    assert empty.count == 0
