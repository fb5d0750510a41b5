"""
Deadline Policy - проверка отметки по дедлайну подзадачи.

AICODE-NOTE: Чистые функции БЕЗ доступа к БД, БЕЗ side-effects.
Невалидная отметка - нормальный результат, а не ошибка: функция
никогда не бросает исключений. Битое определение подзадачи
логируется и считается "в любое время".

Виды дедлайнов:
- anytime: в любое время гражданского дня
- cutoff: не позже start_of_day + deadline_minutes
- window: внутри [start_minutes, end_minutes] включительно
"""

import logging
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from enum import Enum

from src.config import MINUTES_PER_DAY
from src.core.domain.day_clock import DayClock
from src.database.models import Subtask

logger = logging.getLogger(__name__)


class DeadlineKind(str, Enum):
    ANYTIME = "anytime"
    CUTOFF = "cutoff"
    WINDOW = "window"


class ValidationReason(str, Enum):
    ANYTIME = "anytime"
    ON_TIME = "on_time"
    WITHIN_WINDOW = "within_window"
    LATE = "late"
    OUTSIDE_WINDOW = "outside_window"
    WRONG_DAY = "wrong_day"


@dataclass(frozen=True)
class DeadlineSpec:
    """Дедлайн подзадачи."""

    kind: DeadlineKind
    minutes: int | None = None
    window_start: int | None = None
    window_end: int | None = None

    @classmethod
    def anytime(cls) -> "DeadlineSpec":
        return cls(DeadlineKind.ANYTIME)

    @classmethod
    def cutoff(cls, minutes: int) -> "DeadlineSpec":
        """
        Дедлайн по минутам от начала дня.

        0 и >= 1440 - это "в любое время" (так было всегда, не меняем).
        """
        if minutes == 0 or minutes >= MINUTES_PER_DAY:
            return cls.anytime()
        if minutes < 0:
            raise ValueError("deadline minutes cannot be negative")
        return cls(DeadlineKind.CUTOFF, minutes=minutes)

    @classmethod
    def window(cls, start_minutes: int, end_minutes: int) -> "DeadlineSpec":
        if not 0 <= start_minutes <= end_minutes <= MINUTES_PER_DAY:
            raise ValueError(
                f"invalid window [{start_minutes}, {end_minutes}]"
            )
        return cls(
            DeadlineKind.WINDOW, window_start=start_minutes, window_end=end_minutes
        )

    @classmethod
    def build(
        cls,
        kind: str,
        minutes: int | None = None,
        window_start: int | None = None,
        window_end: int | None = None,
    ) -> "DeadlineSpec":
        """
        Собрать дедлайн из полей подзадачи.

        Raises:
            ValueError: неизвестный вид, отрицательные минуты или кривое окно
        """
        deadline_kind = DeadlineKind(kind)
        if deadline_kind is DeadlineKind.CUTOFF:
            return cls.cutoff(minutes or 0)
        if deadline_kind is DeadlineKind.WINDOW:
            return cls.window(window_start or 0, window_end or MINUTES_PER_DAY)
        return cls.anytime()

    @classmethod
    def from_subtask(cls, subtask: Subtask) -> "DeadlineSpec":
        """
        Дедлайн сохранённой подзадачи.

        AICODE-NOTE: Задачи приходят снаружи. Битое определение не должно
        ронять отметку: логируем и считаем подзадачу "в любое время".
        """
        try:
            return cls.build(
                subtask.deadline_kind,
                subtask.deadline_minutes,
                subtask.window_start_minutes,
                subtask.window_end_minutes,
            )
        except ValueError as e:
            logger.warning(
                f"Invalid deadline for subtask {subtask.key!r} of task "
                f"{subtask.task_id}: {e}, treating as anytime"
            )
            return cls.anytime()


@dataclass(frozen=True)
class DeadlineCheck:
    """Результат проверки отметки."""

    valid: bool
    reason: ValidationReason
    message: str


def _format_clock(minutes: int) -> str:
    """540 -> '09:00 AM'."""
    hours, mins = divmod(minutes, 60)
    suffix = "AM" if hours < 12 else "PM"
    hours12 = hours % 12 or 12
    return f"{hours12:02d}:{mins:02d} {suffix}"


def evaluate_deadline(
    spec: DeadlineSpec,
    submitted_at: datetime,
    civil_day: date,
    clock: DayClock,
) -> DeadlineCheck:
    """
    Проверить отметку submitted_at для гражданского дня civil_day.

    Порядок:
    1. Момент не попадает в civil_day → WRONG_DAY (независимо от дедлайна)
    2. anytime → валидно
    3. window → валидно внутри окна (границы включительно)
    4. cutoff → валидно если submitted_at <= начало дня + minutes
    """
    if clock.day_key(submitted_at) != civil_day:
        return DeadlineCheck(
            valid=False,
            reason=ValidationReason.WRONG_DAY,
            message="Submission must be on the target date",
        )

    if spec.kind is DeadlineKind.ANYTIME:
        return DeadlineCheck(
            valid=True,
            reason=ValidationReason.ANYTIME,
            message="Task completed within allowed time",
        )

    day_start = clock.day_start(civil_day)
    submitted_utc = clock.to_utc(submitted_at)

    if spec.kind is DeadlineKind.WINDOW:
        window_start = day_start + timedelta(minutes=spec.window_start or 0)
        window_end = day_start + timedelta(minutes=spec.window_end or 0)
        if window_start <= submitted_utc <= window_end:
            return DeadlineCheck(
                valid=True,
                reason=ValidationReason.WITHIN_WINDOW,
                message="Task completed within allowed time window",
            )
        return DeadlineCheck(
            valid=False,
            reason=ValidationReason.OUTSIDE_WINDOW,
            message=(
                f"Task must be completed between "
                f"{_format_clock(spec.window_start or 0)} and "
                f"{_format_clock(spec.window_end or 0)}"
            ),
        )

    deadline = day_start + timedelta(minutes=spec.minutes or 0)
    if submitted_utc > deadline:
        return DeadlineCheck(
            valid=False,
            reason=ValidationReason.LATE,
            message=f"Task must be completed before {_format_clock(spec.minutes or 0)}",
        )

    return DeadlineCheck(
        valid=True,
        reason=ValidationReason.ON_TIME,
        message="Task completed within time limit",
    )
