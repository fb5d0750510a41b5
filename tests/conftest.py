import os
import sys
from datetime import date, datetime, timedelta

import pytest
import pytest_asyncio
from tortoise import Tortoise

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from src.core.domain.day_clock import DayClock  # noqa: E402

IST_OFFSET_MINUTES = 330


@pytest_asyncio.fixture(scope="function")
async def db() -> None:
    """Lightweight in-memory DB per test."""
    await Tortoise.init(
        db_url="sqlite://:memory:",
        modules={"models": ["src.database.models"]},
        use_tz=True,
        timezone="UTC",
    )
    await Tortoise.generate_schemas()
    yield
    await Tortoise.close_connections()


@pytest.fixture
def clock() -> DayClock:
    return DayClock(IST_OFFSET_MINUTES)


@pytest.fixture
def at(clock):
    """at(day, "HH:MM") -> момент гражданского времени в UTC."""

    def _at(civil_day: date, hhmm: str, seconds: int = 0) -> datetime:
        hour, minute = map(int, hhmm.split(":"))
        return clock.day_start(civil_day) + timedelta(
            hours=hour, minutes=minute, seconds=seconds
        )

    return _at


@pytest_asyncio.fixture
async def user(db):
    """Create a test user."""
    from src.database.models import User

    return await User.create(name="Test User")


@pytest_asyncio.fixture
async def task(db):
    """
    Задача с тремя подзадачами:
    - brush: до 09:00
    - water: в любое время
    - tablets: окно 11:00-18:00
    """
    from src.storage import task_repo

    task = await task_repo.create_task(
        key="morning", name="Morning", reward_xp=20, reward_currency=100
    )
    await task_repo.create_subtask(
        task, key="brush", name="Brush", order=1,
        deadline_kind="cutoff", deadline_minutes=540,
    )
    await task_repo.create_subtask(task, key="water", name="Water", order=2)
    await task_repo.create_subtask(
        task, key="tablets", name="Tablets", order=3,
        deadline_kind="window", window_start_minutes=660, window_end_minutes=1080,
    )
    return task


@pytest_asyncio.fixture
async def small_task(db):
    """Задача с одной подзадачей в любое время."""
    from src.storage import task_repo

    task = await task_repo.create_task(
        key="pets", name="Pets", reward_xp=10, reward_currency=50
    )
    await task_repo.create_subtask(task, key="feed", name="Feed", order=1)
    return task
