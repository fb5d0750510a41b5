"""
Scheduler Service - планировщик ночной сверки.

Использует APScheduler 4.x (AsyncScheduler).
Одна задача: daily_reset в DAILY_RESET_TIME по гражданскому времени.

run_daily_reset() - единая точка входа для планировщика, ручного запуска
(API, ops-скрипт) и тестов. Параллельный запуск не выполняется, а
возвращает результат с skipped=True.
"""

import logging
from datetime import date

from apscheduler import AsyncScheduler, ConflictPolicy
from apscheduler.triggers.cron import CronTrigger
from redis.asyncio import Redis
from redis.exceptions import RedisError

from src.config import config
from src.core.domain.day_clock import get_day_clock
from src.core.use_cases.daily_reset import DailyResetResult, DailyResetUseCase
from src.services.job_lock import SingleFlightGuard

logger = logging.getLogger(__name__)

DAILY_RESET_SCHEDULE_ID = "daily_reset"

# Глобальный scheduler instance
_scheduler: AsyncScheduler | None = None

_reset_guard: SingleFlightGuard | None = None
_last_result: DailyResetResult | None = None


def get_reset_guard() -> SingleFlightGuard:
    """Guard ночной сверки. В production дополнительно держит Redis lock."""
    global _reset_guard
    if _reset_guard is None:
        redis = None
        if config.ENVIRONMENT == "production":
            redis = Redis.from_url(config.redis_url)
        _reset_guard = SingleFlightGuard(
            DAILY_RESET_SCHEDULE_ID,
            redis=redis,
            ttl_seconds=config.RESET_LOCK_TTL_SECONDS,
        )
    return _reset_guard


async def run_daily_reset(as_of: date | None = None) -> DailyResetResult:
    """Запустить ночную сверку под single-flight guard."""
    global _last_result
    try:
        async with get_reset_guard().hold() as acquired:
            if not acquired:
                logger.warning("Daily reset is already running, skipped")
                return DailyResetResult(
                    civil_day=as_of or get_day_clock().today(), skipped=True
                )

            _last_result = await DailyResetUseCase().execute(as_of)
            return _last_result
    except RedisError as e:
        logger.exception("Daily reset lock is unavailable, reset not started")
        return DailyResetResult(
            civil_day=as_of or get_day_clock().today(),
            failures=[f"lock unavailable: {e}"],
        )


# === Задачи ===


async def daily_reset_job() -> None:
    """Задача планировщика."""
    result = await run_daily_reset()
    if result.failures:
        logger.error(
            f"Daily reset for {result.civil_day} finished with "
            f"{len(result.failures)} failure(s): {result.failures}"
        )


def _reset_trigger() -> CronTrigger:
    hour, minute = map(int, config.DAILY_RESET_TIME.split(":"))
    return CronTrigger(hour=hour, minute=minute, timezone=get_day_clock().tz)


def get_job_status() -> dict:
    """Состояние ночной задачи (для админ-эндпоинта)."""
    status = {
        "scheduled": _scheduler is not None,
        "running": get_reset_guard().busy,
        "schedule": config.DAILY_RESET_TIME,
        "utc_offset_minutes": config.DAY_UTC_OFFSET_MINUTES,
        "last_run": None,
    }
    if _last_result is not None:
        status["last_run"] = {
            "civil_day": _last_result.civil_day.isoformat(),
            "users_processed": _last_result.users_processed,
            "accruals_settled": _last_result.accruals_settled,
            "records_pruned": _last_result.records_pruned,
            "failures": len(_last_result.failures),
        }
    return status


# === Lifecycle ===


async def start() -> None:
    """Запустить планировщик (вызывать на старте приложения)."""
    global _scheduler
    if not config.SCHEDULER_ENABLED:
        logger.info("Scheduler start skipped (SCHEDULER_ENABLED=false)")
        return

    _scheduler = AsyncScheduler()
    await _scheduler.__aenter__()
    await _scheduler.add_schedule(
        daily_reset_job,
        trigger=_reset_trigger(),
        id=DAILY_RESET_SCHEDULE_ID,
        conflict_policy=ConflictPolicy.replace,
    )
    await _scheduler.start_in_background()
    logger.info(
        f"Scheduler started: daily reset at {config.DAILY_RESET_TIME} "
        f"(UTC offset {config.DAY_UTC_OFFSET_MINUTES} min)"
    )


async def stop() -> None:
    """Остановить планировщик (вызывать на остановке приложения)."""
    global _scheduler, _reset_guard
    if _scheduler:
        await _scheduler.__aexit__(None, None, None)
        _scheduler = None
    if _reset_guard:
        await _reset_guard.close()
        _reset_guard = None
    logger.info("Scheduler stopped")
