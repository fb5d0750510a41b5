"""
Task Repository - тупые CRUD операции для Task и Subtask.

AICODE-NOTE: Для движка наград задачи только читаются.
Создание задач - только через seed-скрипт.
"""

from src.core.domain.deadline_policy import DeadlineSpec
from src.database.models import Subtask, Task


async def get_task(task_id: int) -> Task | None:
    """Получить задачу по ID."""
    return await Task.get_or_none(id=task_id)


async def get_task_by_key(key: str) -> Task | None:
    return await Task.get_or_none(key=key)


async def get_active_tasks() -> list[Task]:
    """Все активные задачи с подзадачами."""
    return (
        await Task.filter(is_active=True).order_by("id").prefetch_related("subtasks")
    )


async def get_tasks_by_ids(task_ids: list[int]) -> list[Task]:
    return await Task.filter(id__in=task_ids).prefetch_related("subtasks")


async def get_subtask(task_id: int, key: str) -> Subtask | None:
    """Получить подзадачу по ключу внутри задачи."""
    return await Subtask.get_or_none(task_id=task_id, key=key)


async def get_active_subtasks(task_id: int) -> list[Subtask]:
    """Активные подзадачи задачи в порядке отображения."""
    return await Subtask.filter(task_id=task_id, is_active=True).order_by("order", "id")


async def create_task(
    key: str,
    name: str,
    reward_xp: int = 0,
    reward_currency: int = 0,
    description: str | None = None,
) -> Task:
    return await Task.create(
        key=key,
        name=name,
        description=description,
        reward_xp=reward_xp,
        reward_currency=reward_currency,
    )


async def create_subtask(
    task: Task,
    key: str,
    name: str,
    order: int = 0,
    deadline_kind: str = "anytime",
    deadline_minutes: int | None = None,
    window_start_minutes: int | None = None,
    window_end_minutes: int | None = None,
) -> Subtask:
    """
    Создать подзадачу.

    Args:
        task: Задача
        key: Ключ подзадачи (уникален внутри задачи)
        name: Название
        order: Порядок отображения
        deadline_kind: "anytime" | "cutoff" | "window"
        deadline_minutes: Минуты от начала дня (для cutoff)
        window_start_minutes: Начало окна (для window)
        window_end_minutes: Конец окна (для window)

    Raises:
        ValueError: некорректный дедлайн (отрицательные минуты, кривое окно)
    """
    DeadlineSpec.build(
        deadline_kind, deadline_minutes, window_start_minutes, window_end_minutes
    )
    return await Subtask.create(
        task=task,
        key=key,
        name=name,
        order=order,
        deadline_kind=deadline_kind,
        deadline_minutes=deadline_minutes,
        window_start_minutes=window_start_minutes,
        window_end_minutes=window_end_minutes,
    )
