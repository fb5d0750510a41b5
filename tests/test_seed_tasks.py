"""
Тесты для загрузки задач по умолчанию.
"""

import pytest

from src.database.models import Subtask, Task
from src.scripts.seed_tasks import DEFAULT_TASKS, seed_tasks


@pytest.mark.asyncio
async def test_seed_creates_default_tasks(db):
    created = await seed_tasks()

    assert created == len(DEFAULT_TASKS)
    assert await Task.all().count() == len(DEFAULT_TASKS)

    tablets = await Subtask.get(key="hair-tablets")
    assert tablets.deadline_kind == "window"
    assert (tablets.window_start_minutes, tablets.window_end_minutes) == (660, 1080)

    water = await Subtask.get(key="water-7l")
    assert water.deadline_kind == "anytime"

    brush = await Subtask.get(key="brush")
    assert (brush.deadline_kind, brush.deadline_minutes) == ("cutoff", 615)


@pytest.mark.asyncio
async def test_seed_is_idempotent(db):
    await seed_tasks()
    assert await seed_tasks() == 0
    assert await Task.all().count() == len(DEFAULT_TASKS)
