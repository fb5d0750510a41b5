"""
Submission Repository - журнал отметок (SubmissionLedger).

AICODE-NOTE: Уникальность слота (user, task, subtask_key, civil_day)
обеспечивает БД, а не проверка "найти, потом создать". Вставка идёт
сразу; IntegrityError означает, что слот уже занят другим запросом.
Запись отметки и обновление DailyAccrual - одна транзакция.
"""

import logging
from datetime import date, datetime

from tortoise.exceptions import IntegrityError
from tortoise.transactions import in_transaction

from src.core.errors import DuplicateSubmissionError
from src.database.models import DailyAccrual, Submission

logger = logging.getLogger(__name__)


async def record_submission(
    user_id: int,
    task_id: int,
    subtask_key: str,
    civil_day: date,
    submitted_at: datetime,
    proof_reference: str,
    valid: bool,
    validation_reason: str,
    validation_message: str,
) -> Submission:
    """
    Записать отметку и дополнить DailyAccrual дня.

    Raises:
        DuplicateSubmissionError: слот уже занят (существующая запись в .existing)
    """
    accrual, _ = await DailyAccrual.get_or_create(user_id=user_id, civil_day=civil_day)

    try:
        async with in_transaction() as conn:
            submission = await Submission.create(
                user_id=user_id,
                task_id=task_id,
                subtask_key=subtask_key,
                civil_day=civil_day,
                submitted_at=submitted_at,
                proof_reference=proof_reference,
                valid=valid,
                validation_reason=validation_reason,
                validation_message=validation_message,
                using_db=conn,
            )

            locked = (
                await DailyAccrual.filter(id=accrual.id)
                .using_db(conn)
                .select_for_update()
                .first()
            )
            if locked is None or locked.settled:
                logger.warning(
                    f"DailyAccrual for user {user_id} on {civil_day} is settled, "
                    f"submission {submission.id} not added to it"
                )
            else:
                completed = list(locked.completed_subtasks or [])
                completed.append(
                    {
                        "task_id": task_id,
                        "subtask_key": subtask_key,
                        "valid": valid,
                        "submitted_at": submitted_at.isoformat(),
                    }
                )
                locked.completed_subtasks = completed
                await locked.save(using_db=conn, update_fields=["completed_subtasks"])
    except IntegrityError:
        existing = await get_submission(user_id, task_id, subtask_key, civil_day)
        if existing is None:
            raise
        raise DuplicateSubmissionError(existing) from None

    return submission


async def get_submission(
    user_id: int, task_id: int, subtask_key: str, civil_day: date
) -> Submission | None:
    return await Submission.get_or_none(
        user_id=user_id, task_id=task_id, subtask_key=subtask_key, civil_day=civil_day
    )


async def get_task_submissions_for_day(
    user_id: int, task_id: int, civil_day: date
) -> list[Submission]:
    """Все отметки пользователя по задаче за день."""
    return await Submission.filter(
        user_id=user_id, task_id=task_id, civil_day=civil_day
    ).order_by("submitted_at")


async def get_user_submissions_for_day(user_id: int, civil_day: date) -> list[Submission]:
    return await Submission.filter(user_id=user_id, civil_day=civil_day).order_by(
        "submitted_at"
    )


async def get_user_submissions_in_range(
    user_id: int, start_day: date, end_day: date
) -> list[Submission]:
    return await Submission.filter(
        user_id=user_id, civil_day__gte=start_day, civil_day__lte=end_day
    ).order_by("civil_day", "submitted_at")


async def get_valid_days(user_id: int, up_to: date) -> list[date]:
    """Гражданские дни (<= up_to), где есть хотя бы одна валидная отметка."""
    return (
        await Submission.filter(user_id=user_id, valid=True, civil_day__lte=up_to)
        .distinct()
        .values_list("civil_day", flat=True)
    )


async def get_task_ids_for_day(user_id: int, civil_day: date) -> list[int]:
    """ID задач, по которым есть отметки за день."""
    return (
        await Submission.filter(user_id=user_id, civil_day=civil_day)
        .distinct()
        .values_list("task_id", flat=True)
    )


async def delete_older_than(cutoff_day: date) -> int:
    """Удалить отметки с civil_day < cutoff_day. Возвращает число удалённых."""
    return await Submission.filter(civil_day__lt=cutoff_day).delete()
