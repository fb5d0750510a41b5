"""
DayClock - границы гражданского дня в фиксированном смещении от UTC.

AICODE-NOTE: Чистые функции БЕЗ доступа к БД. Смещение передаётся явно
при создании, локальный часовой пояс процесса не используется никогда.
"""

from datetime import date, datetime, timedelta, timezone

from src.config import config


class DayClock:
    """Переводит любой момент времени в гражданский день."""

    def __init__(self, utc_offset_minutes: int) -> None:
        self.offset = timedelta(minutes=utc_offset_minutes)
        self.tz = timezone(self.offset)

    @staticmethod
    def to_utc(instant: datetime) -> datetime:
        # Naive datetime считаем UTC (как datetime.utcnow())
        if instant.tzinfo is None:
            return instant.replace(tzinfo=timezone.utc)
        return instant.astimezone(timezone.utc)

    def now(self) -> datetime:
        return datetime.now(timezone.utc)

    def day_key(self, instant: datetime) -> date:
        """Гражданская дата, которой принадлежит instant (ключ для хранения)."""
        return (self.to_utc(instant) + self.offset).date()

    def day_start(self, civil_day: date) -> datetime:
        """00:00:00.000 гражданского дня civil_day, выраженное в UTC."""
        local_midnight = datetime(
            civil_day.year, civil_day.month, civil_day.day, tzinfo=timezone.utc
        )
        return local_midnight - self.offset

    def start_of_day(self, instant: datetime) -> datetime:
        """
        Начало гражданского дня, содержащего instant (UTC).

        Идемпотентно: start_of_day(start_of_day(x)) == start_of_day(x).
        """
        return self.day_start(self.day_key(instant))

    def end_of_day(self, instant: datetime) -> datetime:
        """Последняя миллисекунда гражданского дня (23:59:59.999)."""
        return self.start_of_day(instant) + timedelta(days=1, milliseconds=-1)

    def today(self) -> date:
        return self.day_key(self.now())

    def minutes_since_day_start(self, instant: datetime) -> float:
        delta = self.to_utc(instant) - self.start_of_day(instant)
        return delta.total_seconds() / 60

    def is_same_day(self, first: datetime, second: datetime) -> bool:
        return self.day_key(first) == self.day_key(second)


def get_day_clock() -> DayClock:
    """DayClock со смещением из настроек."""
    return DayClock(config.DAY_UTC_OFFSET_MINUTES)
