"""
Record Submission Use Case - сценарий отметки подзадачи.

AICODE-NOTE: Use-case объединяет репозитории + домейн-правила.
Роутеры вызывают use-case и получают результат.

Порядок:
1. Проверить пользователя, задачу, подзадачу (ошибки вызывающей стороны)
2. Проверить дедлайн (DeadlinePolicy) - late это валидный результат, не ошибка
3. Записать отметку (SubmissionLedger), дубликат → DUPLICATE_SUBMISSION
   (settlement для слота всё равно доводится до конца)
4. Проверить завершённость задачи (CompletionDetector)
5. Если задача заслуживает награды → выдать её (RewardSettlement)

Весь путь ограничен SUBMISSION_TIMEOUT_SECONDS, таймаут - это
SubmissionTimeoutError (повторяемая ошибка), а не невалидная отметка.
"""

import asyncio
import logging
from dataclasses import dataclass
from datetime import date, datetime

from src.config import config
from src.core.domain.completion import CompletionCheck, CompletionStatus
from src.core.domain.day_clock import DayClock, get_day_clock
from src.core.domain.deadline_policy import (
    DeadlineSpec,
    ValidationReason,
    evaluate_deadline,
)
from src.core.errors import (
    DuplicateSubmissionError,
    SubmissionError,
    SubmissionTimeoutError,
)
from src.core.use_cases.check_completion import detect_completion
from src.core.use_cases.settle_reward import settle_task_reward
from src.database.models import Reward, Submission, Task
from src.storage import reward_repo, submission_repo, task_repo, user_repo

logger = logging.getLogger(__name__)


@dataclass
class SubmissionResult:
    """Результат отметки подзадачи."""

    success: bool
    submission: Submission | None = None
    task_completed: bool = False
    reward_eligible: bool = False
    completion_status: CompletionStatus | None = None
    reward: Reward | None = None
    error: SubmissionError | None = None
    error_message: str = ""
    existing_submission_id: int | None = None


class RecordSubmissionUseCase:
    """Use-case для отметки подзадачи (validate_and_record_submission)."""

    def __init__(
        self, clock: DayClock | None = None, timeout: float | None = None
    ) -> None:
        self.clock = clock or get_day_clock()
        self.timeout = (
            timeout if timeout is not None else config.SUBMISSION_TIMEOUT_SECONDS
        )

    async def execute(
        self,
        user_id: int,
        task_id: int,
        subtask_key: str,
        proof_reference: str,
        submitted_at: datetime | None = None,
        civil_day: date | None = None,
    ) -> SubmissionResult:
        """
        Отметить подзадачу.

        Args:
            user_id: ID пользователя
            task_id: ID задачи
            subtask_key: Ключ подзадачи
            proof_reference: Ссылка на доказательство (непустая строка)
            submitted_at: Момент отметки (по умолчанию сейчас)
            civil_day: Целевой день (по умолчанию день submitted_at)

        Returns:
            SubmissionResult с результатом операции

        Raises:
            SubmissionTimeoutError: превышен таймаут, запрос можно повторить
        """
        try:
            return await asyncio.wait_for(
                self._execute(
                    user_id, task_id, subtask_key, proof_reference, submitted_at, civil_day
                ),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError as e:
            logger.error(
                f"Submission timed out for user {user_id}, task {task_id}, "
                f"subtask {subtask_key!r} after {self.timeout}s"
            )
            raise SubmissionTimeoutError(
                f"Submission not processed within {self.timeout}s, retry later"
            ) from e

    async def _execute(
        self,
        user_id: int,
        task_id: int,
        subtask_key: str,
        proof_reference: str,
        submitted_at: datetime | None,
        civil_day: date | None,
    ) -> SubmissionResult:
        if submitted_at is None:
            submitted_at = self.clock.now()
        if civil_day is None:
            civil_day = self.clock.day_key(submitted_at)

        # 1. Проверить пользователя, задачу и подзадачу
        user = await user_repo.get_user(user_id)
        if not user:
            return _failure(SubmissionError.USER_NOT_FOUND, "User not found")

        task = await task_repo.get_task(task_id)
        if not task:
            return _failure(SubmissionError.TASK_NOT_FOUND, "Task not found")
        if not task.is_active:
            return _failure(SubmissionError.TASK_INACTIVE, "Task is not active")

        # AICODE-NOTE: Неактивная подзадача для вызывающего не существует
        subtask = await task_repo.get_subtask(task_id, subtask_key)
        if not subtask or not subtask.is_active:
            return _failure(SubmissionError.SUBTASK_NOT_FOUND, "Subtask not found")

        # 2. Проверить дедлайн (домейн)
        check = evaluate_deadline(
            DeadlineSpec.from_subtask(subtask), submitted_at, civil_day, self.clock
        )
        if check.reason is ValidationReason.WRONG_DAY:
            return _failure(SubmissionError.WRONG_DAY, check.message)

        # 3. Записать отметку (репозиторий)
        try:
            submission = await submission_repo.record_submission(
                user_id=user_id,
                task_id=task_id,
                subtask_key=subtask_key,
                civil_day=civil_day,
                submitted_at=submitted_at,
                proof_reference=proof_reference,
                valid=check.valid,
                validation_reason=check.reason.value,
                validation_message=check.message,
            )
        except DuplicateSubmissionError as e:
            logger.info(
                f"Duplicate submission from user {user_id} for task {task_id}, "
                f"subtask {subtask_key!r} on {civil_day} (existing id={e.existing.id})"
            )
            # AICODE-NOTE: Повтор после таймаута попадает сюда. Запись уже есть,
            # но награда могла не успеть выдаться - доводим settlement до конца
            completion, reward = await self._settle(user_id, task, civil_day)
            return SubmissionResult(
                success=False,
                error=SubmissionError.DUPLICATE_SUBMISSION,
                error_message="Subtask already submitted for this day",
                existing_submission_id=e.existing.id,
                task_completed=completion.task_completed,
                reward_eligible=completion.reward_eligible,
                completion_status=completion.status,
                reward=reward,
            )

        logger.info(
            f"Submission {submission.id} recorded: user {user_id}, task {task_id}, "
            f"subtask {subtask_key!r}, day {civil_day}, valid={check.valid} ({check.reason.value})"
        )

        # 4-5. Завершённость задачи и награда
        completion, reward = await self._settle(user_id, task, civil_day)

        return SubmissionResult(
            success=True,
            submission=submission,
            task_completed=completion.task_completed,
            reward_eligible=completion.reward_eligible,
            completion_status=completion.status,
            reward=reward,
        )

    async def _settle(
        self, user_id: int, task: Task, civil_day: date
    ) -> tuple[CompletionCheck, Reward | None]:
        """Проверить завершённость задачи и выдать награду, если положена."""
        completion = await detect_completion(user_id, task.id, civil_day)

        reward = None
        if completion.reward_eligible:
            reward = await settle_task_reward(user_id, task, civil_day)
            if reward is None:
                # Выдана раньше (параллельный запрос или первая попытка)
                reward = await reward_repo.get_reward(user_id, task.id, civil_day)
        elif completion.status is CompletionStatus.COMPLETED_NOT_REWARDED:
            logger.info(
                f"Task {task.id} completed by user {user_id} on {civil_day} "
                f"with late submissions {sorted(completion.invalid_keys)}, no reward"
            )
        return completion, reward


def _failure(error: SubmissionError, message: str) -> SubmissionResult:
    return SubmissionResult(success=False, error=error, error_message=message)
