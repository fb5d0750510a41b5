"""
Ошибки движка наград.

AICODE-NOTE: Три вида ошибок:
- SubmissionError - коды ошибок вызывающей стороны, возвращаются в результатах use-case
- DuplicateSubmissionError - конфликт уникальности в хранилище (слот уже занят)
- InfrastructureError - временные сбои, запрос можно повторить
"""

from enum import Enum

from src.database.models import Submission


class SubmissionError(str, Enum):
    USER_NOT_FOUND = "user_not_found"
    TASK_NOT_FOUND = "task_not_found"
    TASK_INACTIVE = "task_inactive"
    SUBTASK_NOT_FOUND = "subtask_not_found"
    WRONG_DAY = "wrong_day"
    DUPLICATE_SUBMISSION = "duplicate_submission"
    INVALID_BONUS_TYPE = "invalid_bonus_type"


class DuplicateSubmissionError(Exception):
    """Отметка для (user, task, subtask_key, civil_day) уже существует."""

    def __init__(self, existing: Submission) -> None:
        self.existing = existing
        super().__init__(
            f"Submission already exists for user {existing.user_id}, "
            f"task {existing.task_id}, subtask {existing.subtask_key!r} "
            f"on {existing.civil_day} (id={existing.id})"
        )


class InfrastructureError(Exception):
    """Временный сбой хранилища или таймаут. Операцию можно повторить."""


class SubmissionTimeoutError(InfrastructureError):
    pass
