"""
User Repository - тупые CRUD операции для User модели.

AICODE-NOTE: Репозиторий содержит только доступ к данным, БЕЗ бизнес-логики.
Бизнес-логика (расчет streak, level) находится в core/domain/gamification.py.
Балансы меняются ТОЛЬКО через F-выражения (атомарный инкремент в БД),
никогда через read-modify-write.
"""

from datetime import datetime

from tortoise.backends.base.client import BaseDBAsyncClient
from tortoise.expressions import F

from src.database.models import User


async def get_user(user_id: int) -> User | None:
    """Получить пользователя по ID."""
    return await User.get_or_none(id=user_id)


async def create_user(name: str) -> User:
    return await User.create(name=name)


async def credit_totals(
    user_id: int,
    xp_delta: int,
    currency_delta: int,
    using_db: BaseDBAsyncClient | None = None,
) -> int:
    """Атомарно добавить XP и валюту. Возвращает число обновлённых строк."""
    return (
        await User.filter(id=user_id)
        .using_db(using_db)
        .update(
            xp=F("xp") + xp_delta,
            currency_earned=F("currency_earned") + currency_delta,
        )
    )


async def raise_level(
    user_id: int, new_level: int, using_db: BaseDBAsyncClient | None = None
) -> int:
    """Поднять уровень (только вверх, условным UPDATE)."""
    return (
        await User.filter(id=user_id, level__lt=new_level)
        .using_db(using_db)
        .update(level=new_level)
    )


async def get_xp(user_id: int, using_db: BaseDBAsyncClient | None = None) -> int:
    values = (
        await User.filter(id=user_id).using_db(using_db).values_list("xp", flat=True)
    )
    return values[0] if values else 0


async def update_streak(user_id: int, new_streak: int, updated_at: datetime) -> int:
    """Сохранить streak пользователя."""
    return await User.filter(id=user_id).update(
        streak_count=new_streak, streak_updated_at=updated_at
    )


async def get_users_with_streak() -> list[int]:
    """ID пользователей с ненулевым streak."""
    return await User.filter(streak_count__gt=0).values_list("id", flat=True)
