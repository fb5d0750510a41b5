"""
Progress Queries - прогресс пользователя за день, диапазон и неделю.

AICODE-NOTE: Только чтение. Статус задачи считает то же правило
check_completion(), что и путь отметки, поэтому прогресс и награды
не расходятся.
"""

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta

from src.core.domain.completion import CompletionStatus, check_completion, percentage
from src.database.models import Submission, Task
from src.storage import reward_repo, submission_repo, task_repo, user_repo

MAX_RANGE_DAYS = 31


@dataclass
class SubtaskProgress:
    key: str
    name: str
    deadline_kind: str
    completed: bool
    submission_id: int | None = None
    submitted_at: datetime | None = None
    valid: bool | None = None
    validation_reason: str | None = None
    validation_message: str | None = None
    proof_reference: str | None = None


@dataclass
class TaskProgress:
    task_id: int
    task_key: str
    task_name: str
    reward_xp: int
    reward_currency: int
    status: CompletionStatus
    completed_subtasks: int
    total_subtasks: int
    percentage: int
    reward_issued: bool
    subtasks: list[SubtaskProgress] = field(default_factory=list)

    @property
    def is_completed(self) -> bool:
        return self.status is not CompletionStatus.INCOMPLETE

    @property
    def is_reward_eligible(self) -> bool:
        return self.status is CompletionStatus.REWARD_ELIGIBLE


@dataclass
class DaySummary:
    total_tasks: int = 0
    completed_tasks: int = 0
    total_subtasks: int = 0
    completed_subtasks: int = 0

    @property
    def task_completion_rate(self) -> int:
        return percentage(self.completed_tasks, self.total_tasks)

    @property
    def subtask_completion_rate(self) -> int:
        return percentage(self.completed_subtasks, self.total_subtasks)


@dataclass
class DayProgress:
    civil_day: date
    tasks: list[TaskProgress]
    summary: DaySummary


@dataclass
class WeeklyProgress:
    week_start: date
    week_end: date
    days: list[DayProgress]

    @property
    def total_tasks(self) -> int:
        return sum(d.summary.total_tasks for d in self.days)

    @property
    def completed_tasks(self) -> int:
        return sum(d.summary.completed_tasks for d in self.days)

    @property
    def completion_rate(self) -> int:
        return percentage(self.completed_tasks, self.total_tasks)

    @property
    def productive_days(self) -> int:
        """Дни, где завершена хотя бы одна задача."""
        return sum(1 for d in self.days if d.summary.completed_tasks > 0)


def week_start(civil_day: date) -> date:
    """Воскресенье недели, содержащей civil_day."""
    return civil_day - timedelta(days=(civil_day.weekday() + 1) % 7)


def _build_day(
    civil_day: date,
    tasks: list[Task],
    submissions: list[Submission],
    rewarded_task_ids: set[int],
) -> DayProgress:
    summary = DaySummary()
    task_items: list[TaskProgress] = []

    for task in tasks:
        subtasks = sorted(
            (s for s in task.subtasks if s.is_active), key=lambda s: (s.order, s.id)
        )
        by_key = {s.subtask_key: s for s in submissions if s.task_id == task.id}
        check = check_completion((s.key for s in subtasks), by_key.values())

        items = []
        for subtask in subtasks:
            submission = by_key.get(subtask.key)
            item = SubtaskProgress(
                key=subtask.key,
                name=subtask.name,
                deadline_kind=subtask.deadline_kind,
                completed=submission is not None,
            )
            if submission is not None:
                item.submission_id = submission.id
                item.submitted_at = submission.submitted_at
                item.valid = submission.valid
                item.validation_reason = submission.validation_reason
                item.validation_message = submission.validation_message
                item.proof_reference = submission.proof_reference
            items.append(item)

        done = len(check.completed_keys)
        task_items.append(
            TaskProgress(
                task_id=task.id,
                task_key=task.key,
                task_name=task.name,
                reward_xp=task.reward_xp,
                reward_currency=task.reward_currency,
                status=check.status,
                completed_subtasks=done,
                total_subtasks=len(subtasks),
                percentage=check.completion_rate,
                reward_issued=task.id in rewarded_task_ids,
                subtasks=items,
            )
        )

        summary.total_tasks += 1
        summary.total_subtasks += len(subtasks)
        summary.completed_subtasks += done
        if check.task_completed:
            summary.completed_tasks += 1

    return DayProgress(civil_day=civil_day, tasks=task_items, summary=summary)


async def get_progress(user_id: int, civil_day: date) -> DayProgress | None:
    """
    Прогресс пользователя за день по всем активным задачам.

    Returns:
        DayProgress или None если пользователь не найден
    """
    if not await user_repo.get_user(user_id):
        return None

    tasks = await task_repo.get_active_tasks()
    submissions = await submission_repo.get_user_submissions_for_day(user_id, civil_day)
    rewarded = await reward_repo.get_rewarded_task_ids(user_id, civil_day)
    return _build_day(civil_day, tasks, submissions, rewarded)


async def get_progress_range(
    user_id: int, start_day: date, end_day: date
) -> list[DayProgress] | None:
    """
    Прогресс за диапазон дней (включительно, не более 31 дня).

    Raises:
        ValueError: start_day > end_day или диапазон длиннее 31 дня
    """
    if start_day > end_day:
        raise ValueError("Start date must be before or equal to end date")
    if (end_day - start_day).days + 1 > MAX_RANGE_DAYS:
        raise ValueError(f"Date range cannot exceed {MAX_RANGE_DAYS} days")

    if not await user_repo.get_user(user_id):
        return None

    tasks = await task_repo.get_active_tasks()
    submissions = await submission_repo.get_user_submissions_in_range(
        user_id, start_day, end_day
    )

    days = []
    current = start_day
    while current <= end_day:
        day_submissions = [s for s in submissions if s.civil_day == current]
        rewarded = await reward_repo.get_rewarded_task_ids(user_id, current)
        days.append(_build_day(current, tasks, day_submissions, rewarded))
        current += timedelta(days=1)
    return days


async def get_weekly_progress(user_id: int, civil_day: date) -> WeeklyProgress | None:
    """Прогресс за неделю (воскресенье - суббота), содержащую civil_day."""
    start = week_start(civil_day)
    end = start + timedelta(days=6)
    days = await get_progress_range(user_id, start, end)
    if days is None:
        return None
    return WeeklyProgress(week_start=start, week_end=end, days=days)
