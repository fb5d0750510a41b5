"""
Completion Rules - завершена ли задача за день и положена ли награда.

AICODE-NOTE: Чистые функции БЕЗ доступа к БД.
Задача "завершена" если отмечены все активные подзадачи.
"Награда положена" если завершена И все отметки валидны.
Завершена с опозданием - финальное состояние дня, награды не будет.
"""

from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum

from src.database.models import Submission


class CompletionStatus(str, Enum):
    INCOMPLETE = "incomplete"
    COMPLETED_NOT_REWARDED = "completed_not_rewarded"
    REWARD_ELIGIBLE = "reward_eligible"


@dataclass(frozen=True)
class CompletionCheck:
    status: CompletionStatus
    completed_keys: frozenset[str] = field(default_factory=frozenset)
    required_keys: frozenset[str] = field(default_factory=frozenset)
    invalid_keys: frozenset[str] = field(default_factory=frozenset)

    @property
    def task_completed(self) -> bool:
        return self.status is not CompletionStatus.INCOMPLETE

    @property
    def reward_eligible(self) -> bool:
        return self.status is CompletionStatus.REWARD_ELIGIBLE

    @property
    def completion_rate(self) -> int:
        """Процент выполнения (0-100)."""
        return percentage(len(self.completed_keys), len(self.required_keys))


def percentage(part: int, total: int) -> int:
    """Процент с округлением половины вверх (0 если total == 0)."""
    if total <= 0:
        return 0
    return (part * 200 + total) // (total * 2)


def check_completion(
    active_subtask_keys: Iterable[str], submissions: Iterable[Submission]
) -> CompletionCheck:
    """
    Проверить завершённость задачи по отметкам одного дня.

    Отметки по неактивным подзадачам не учитываются.
    Задача без активных подзадач никогда не считается завершённой.
    """
    required = frozenset(active_subtask_keys)
    relevant = [s for s in submissions if s.subtask_key in required]
    completed = frozenset(s.subtask_key for s in relevant)
    invalid = frozenset(s.subtask_key for s in relevant if not s.valid)

    if not required or completed != required:
        status = CompletionStatus.INCOMPLETE
    elif invalid:
        status = CompletionStatus.COMPLETED_NOT_REWARDED
    else:
        status = CompletionStatus.REWARD_ELIGIBLE

    return CompletionCheck(
        status=status,
        completed_keys=completed,
        required_keys=required,
        invalid_keys=invalid,
    )
