"""
Загрузка ежедневных задач по умолчанию.

Usage:
    python -m src.scripts.seed_tasks          # добавить недостающие задачи
    python -m src.scripts.seed_tasks --user "Name"  # + создать пользователя

Идемпотентно: задачи с уже существующим key пропускаются.
"""

import asyncio
import sys

from tortoise import Tortoise

from src.database.config import TORTOISE_ORM
from src.storage import task_repo, user_repo

# deadline: None - в любое время, int - минуты от начала дня, (start, end) - окно
DEFAULT_TASKS = [
    {
        "key": "morning-ritual",
        "name": "Morning Ritual",
        "description": "Start the day with the essential morning routine",
        "reward_currency": 100,
        "reward_xp": 20,
        "subtasks": [
            ("brush", "Brush", 615),
            ("bath", "Bath", 615),
            ("clean-bed", "Clean bed", 615),
        ],
    },
    {
        "key": "glow-routine",
        "name": "Glow Routine",
        "description": "Skin and hair care",
        "reward_currency": 100,
        "reward_xp": 20,
        "subtasks": [
            ("morning-skincare", "Morning skin + hair care", 645),
            ("night-skincare", "Night skin + hair care", 1380),
            ("hair-tablets", "Hair tablets", (660, 1080)),
        ],
    },
    {
        "key": "home-keeping",
        "name": "Home Keeping",
        "description": "Cleaning duties",
        "reward_currency": 200,
        "reward_xp": 30,
        "subtasks": [
            ("cleaning", "Cleaning", 585),
            ("mopping", "Mopping", 585),
        ],
    },
    {
        "key": "wellness-path",
        "name": "Wellness Path",
        "description": "Nutrition and hydration",
        "reward_currency": 150,
        "reward_xp": 25,
        "subtasks": [
            ("breakfast", "Breakfast", 720),
            ("lunch", "Lunch", 960),
            ("dinner", "Dinner", 1320),
            ("water-7l", "7L water", None),
        ],
    },
    {
        "key": "pet-care",
        "name": "Pet Care",
        "description": "Take care of the pets",
        "reward_currency": 100,
        "reward_xp": 20,
        "subtasks": [
            ("pet-food", "3x pet food", None),
            ("pet-treats", "2x pet treats", None),
        ],
    },
    {
        "key": "knowledge-challenge",
        "name": "Knowledge Challenge",
        "description": "Watch 5 educational videos",
        "reward_currency": 100,
        "reward_xp": 20,
        "subtasks": [("watch-5-videos", "Watch 5 YouTube videos", None)],
    },
    {
        "key": "reel-task",
        "name": "Reel Task",
        "description": "Create and post a short video",
        "reward_currency": 50,
        "reward_xp": 10,
        "subtasks": [("post-video", "Post Instagram video", None)],
    },
]


def _deadline_fields(deadline: int | tuple[int, int] | None) -> dict:
    if deadline is None:
        return {"deadline_kind": "anytime"}
    if isinstance(deadline, tuple):
        start, end = deadline
        return {
            "deadline_kind": "window",
            "window_start_minutes": start,
            "window_end_minutes": end,
        }
    return {"deadline_kind": "cutoff", "deadline_minutes": deadline}


async def seed_tasks() -> int:
    """Создать недостающие задачи. Возвращает число созданных."""
    created = 0
    for data in DEFAULT_TASKS:
        if await task_repo.get_task_by_key(data["key"]):
            print(f"⏭️  {data['key']} already exists")
            continue

        task = await task_repo.create_task(
            key=data["key"],
            name=data["name"],
            description=data["description"],
            reward_xp=data["reward_xp"],
            reward_currency=data["reward_currency"],
        )
        for order, (key, name, deadline) in enumerate(data["subtasks"], start=1):
            await task_repo.create_subtask(
                task, key=key, name=name, order=order, **_deadline_fields(deadline)
            )
        created += 1
        print(f"✅ {task.key}: {len(data['subtasks'])} subtasks")
    return created


async def main(user_name: str | None = None):
    await Tortoise.init(config=TORTOISE_ORM)
    await Tortoise.generate_schemas()

    try:
        created = await seed_tasks()
        print(f"\n📋 Created {created} task(s)")

        if user_name:
            user = await user_repo.create_user(user_name)
            print(f"👤 Created user {user.name} (id={user.id})")
    finally:
        await Tortoise.close_connections()


if __name__ == "__main__":
    name = sys.argv[2] if len(sys.argv) > 2 and sys.argv[1] == "--user" else None
    asyncio.run(main(name))
