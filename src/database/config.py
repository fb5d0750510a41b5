"""
Конфигурация Tortoise ORM для Daily Rewards Engine.

SQLite в разработке и тестах, PostgreSQL (asyncpg) в production.
"""

import logging

from src.config import config

logger = logging.getLogger(__name__)

MODEL_MODULES = ["src.database.models", "aerich.models"]


def get_tortoise_db_url(url: str | None = None) -> str:
    """
    URL подключения в формате Tortoise.

    Tortoise понимает только схему postgres://, а хостинги
    отдают postgresql://, поэтому схема приводится здесь.
    """
    url = url or config.database_url
    scheme, sep, rest = url.partition("://")
    if scheme == "postgresql":
        url = f"postgres{sep}{rest}"

    logger.info(f"Database backend: {url.split('://')[0]}")
    return url


def build_tortoise_config(url: str | None = None) -> dict:
    """Словарь конфигурации для Tortoise.init() и aerich."""
    return {
        "connections": {"default": get_tortoise_db_url(url)},
        "apps": {
            "models": {
                "models": MODEL_MODULES,
                "default_connection": "default",
            },
        },
        # Все DatetimeField хранятся в UTC, гражданский день считает DayClock
        "use_tz": True,
        "timezone": "UTC",
    }


TORTOISE_ORM = build_tortoise_config()
