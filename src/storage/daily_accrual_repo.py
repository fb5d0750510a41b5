"""
DailyAccrual Repository - тупые CRUD операции для DailyAccrual модели.

AICODE-NOTE: Репозиторий содержит только доступ к данным, БЕЗ бизнес-логики.
Все изменения идут с фильтром settled=False: закрытый день не переоткрывается.
"""

from datetime import date, datetime

from tortoise.backends.base.client import BaseDBAsyncClient
from tortoise.expressions import F

from src.database.models import DailyAccrual


async def get_or_create_accrual(user_id: int, civil_day: date) -> DailyAccrual:
    """Получить или создать DailyAccrual за указанную дату."""
    accrual, _ = await DailyAccrual.get_or_create(user_id=user_id, civil_day=civil_day)
    return accrual


async def add_accrued(
    user_id: int,
    civil_day: date,
    xp: int,
    currency: int,
    tasks_rewarded: int = 0,
    using_db: BaseDBAsyncClient | None = None,
) -> int:
    """Атомарно добавить выданную награду в итоги дня."""
    return (
        await DailyAccrual.filter(user_id=user_id, civil_day=civil_day, settled=False)
        .using_db(using_db)
        .update(
            xp_accrued=F("xp_accrued") + xp,
            currency_accrued=F("currency_accrued") + currency,
            tasks_rewarded=F("tasks_rewarded") + tasks_rewarded,
        )
    )


async def get_unsettled_before(civil_day: date) -> list[DailyAccrual]:
    """Незакрытые дни, завершившиеся до civil_day."""
    return await DailyAccrual.filter(settled=False, civil_day__lt=civil_day).order_by(
        "civil_day", "user_id"
    )


async def mark_settled(accrual_id: int, settled_at: datetime) -> bool:
    """Закрыть день. False если он уже был закрыт."""
    updated = await DailyAccrual.filter(id=accrual_id, settled=False).update(
        settled=True, settled_at=settled_at
    )
    return updated > 0


async def get_settled_between(start_day: date, end_day: date) -> list[DailyAccrual]:
    """Закрытые дни в [start_day, end_day)."""
    return await DailyAccrual.filter(
        settled=True, civil_day__gte=start_day, civil_day__lt=end_day
    ).order_by("-civil_day")


async def delete_settled_older_than(cutoff_day: date) -> int:
    """Удалить закрытые дни старше cutoff_day. Незакрытые не трогаем."""
    return await DailyAccrual.filter(settled=True, civil_day__lt=cutoff_day).delete()
