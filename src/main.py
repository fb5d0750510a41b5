"""
Точка входа Daily Rewards Engine.

HTTP API (uvicorn) + планировщик ночной сверки в одном процессе.
"""

import asyncio
import logging

import uvicorn
from tortoise import Tortoise

from src.config import config
from src.database.config import TORTOISE_ORM
from src.interfaces.api.main import app
from src.services import scheduler

# Настройка логов
logging.basicConfig(
    level=config.LOG_LEVEL.upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


async def on_startup() -> None:
    """Инициализация при старте."""
    await Tortoise.init(config=TORTOISE_ORM)
    await Tortoise.generate_schemas()
    logger.info("Database initialized")

    await scheduler.start()


async def on_shutdown() -> None:
    """Закрытие при остановке."""
    await scheduler.stop()
    await Tortoise.close_connections()
    logger.info("Database connections closed")


async def main():
    """Запуск API и планировщика."""
    logger.info(f"Starting Daily Rewards Engine in {config.ENVIRONMENT} mode...")
    await on_startup()

    server = uvicorn.Server(
        uvicorn.Config(
            app,
            host=config.API_HOST,
            port=config.API_PORT,
            log_level=config.LOG_LEVEL.lower(),
        )
    )
    try:
        await server.serve()
    finally:
        await on_shutdown()


if __name__ == "__main__":
    asyncio.run(main())
