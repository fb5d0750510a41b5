"""
Тесты для DayClock: границы гражданского дня при фиксированном смещении.
"""

import time
from datetime import date, datetime, timedelta, timezone

import pytest

from src.core.domain.day_clock import DayClock

IST = DayClock(330)


def test_day_key_before_and_after_civil_midnight():
    # 18:29 UTC = 23:59 IST, 18:30 UTC = 00:00 IST следующего дня
    assert IST.day_key(datetime(2025, 1, 14, 18, 29, tzinfo=timezone.utc)) == date(2025, 1, 14)
    assert IST.day_key(datetime(2025, 1, 14, 18, 30, tzinfo=timezone.utc)) == date(2025, 1, 15)


def test_start_of_day_is_civil_midnight_in_utc():
    instant = datetime(2025, 1, 15, 10, 0, tzinfo=timezone.utc)  # 15:30 IST
    assert IST.start_of_day(instant) == datetime(2025, 1, 14, 18, 30, tzinfo=timezone.utc)


def test_start_of_day_is_idempotent():
    instant = datetime(2025, 3, 1, 23, 59, 59, tzinfo=timezone.utc)
    once = IST.start_of_day(instant)
    assert IST.start_of_day(once) == once


def test_start_of_day_is_monotonic():
    base = datetime(2025, 1, 1, tzinfo=timezone.utc)
    starts = [IST.start_of_day(base + timedelta(minutes=37 * i)) for i in range(200)]
    assert starts == sorted(starts)


def test_end_of_day_is_last_millisecond():
    instant = datetime(2025, 1, 15, 10, 0, tzinfo=timezone.utc)
    end = IST.end_of_day(instant)
    assert end == datetime(2025, 1, 15, 18, 29, 59, 999000, tzinfo=timezone.utc)
    assert IST.day_key(end) == date(2025, 1, 15)


def test_naive_datetime_treated_as_utc():
    naive = datetime(2025, 1, 14, 18, 30)
    aware = naive.replace(tzinfo=timezone.utc)
    assert IST.day_key(naive) == IST.day_key(aware)


def test_other_timezones_give_same_day():
    plus_two = timezone(timedelta(hours=2))
    instant = datetime(2025, 1, 14, 20, 45, tzinfo=plus_two)  # 18:45 UTC
    assert IST.day_key(instant) == date(2025, 1, 15)


def test_negative_offset():
    clock = DayClock(-300)  # UTC-05:00
    assert clock.day_key(datetime(2025, 1, 15, 4, 59, tzinfo=timezone.utc)) == date(2025, 1, 14)
    assert clock.day_start(date(2025, 1, 15)) == datetime(2025, 1, 15, 5, 0, tzinfo=timezone.utc)


def test_minutes_since_day_start():
    instant = IST.day_start(date(2025, 1, 15)) + timedelta(hours=9, seconds=30)
    assert IST.minutes_since_day_start(instant) == 540.5


def test_is_same_day():
    first = datetime(2025, 1, 14, 18, 30, tzinfo=timezone.utc)
    assert IST.is_same_day(first, first + timedelta(hours=23, minutes=59))
    assert not IST.is_same_day(first, first - timedelta(seconds=1))


@pytest.fixture(params=["America/Los_Angeles", "Asia/Tokyo", "Pacific/Kiritimati"])
def process_tz(request, monkeypatch):
    """Подменить локальный часовой пояс процесса."""
    if not hasattr(time, "tzset"):
        pytest.skip("time.tzset is not available on this platform")
    monkeypatch.setenv("TZ", request.param)
    time.tzset()
    yield request.param
    monkeypatch.undo()
    time.tzset()


def test_process_timezone_does_not_change_civil_day(process_tz):
    naive_utc = datetime(2025, 1, 14, 18, 30)
    aware = datetime(2025, 1, 14, 18, 29, 59, tzinfo=timezone.utc)

    assert IST.day_key(naive_utc) == date(2025, 1, 15)
    assert IST.day_key(aware) == date(2025, 1, 14)
    assert IST.start_of_day(naive_utc) == datetime(2025, 1, 14, 18, 30, tzinfo=timezone.utc)
    assert IST.day_start(date(2025, 1, 15)) == datetime(2025, 1, 14, 18, 30, tzinfo=timezone.utc)
    assert IST.end_of_day(aware) == datetime(2025, 1, 14, 18, 29, 59, 999000, tzinfo=timezone.utc)

    # today() считается от UTC, а не от локальных часов
    assert IST.today() == IST.day_key(datetime.now(timezone.utc))
