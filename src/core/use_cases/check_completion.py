"""
Check Completion Use Case - CompletionDetector.

AICODE-NOTE: Загружает активные подзадачи и отметки дня,
решение принимает домейн-правило check_completion().
"""

from datetime import date

from src.core.domain.completion import CompletionCheck, check_completion
from src.storage import submission_repo, task_repo


async def detect_completion(user_id: int, task_id: int, civil_day: date) -> CompletionCheck:
    """Статус задачи пользователя за гражданский день."""
    subtasks = await task_repo.get_active_subtasks(task_id)
    submissions = await submission_repo.get_task_submissions_for_day(
        user_id, task_id, civil_day
    )
    return check_completion((s.key for s in subtasks), submissions)
