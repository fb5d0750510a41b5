"""
Конфигурация Daily Rewards Engine.
Загружает переменные из .env файла.
"""

from pydantic import SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

MINUTES_PER_DAY = 24 * 60


class Settings(BaseSettings):
    # Database URL (Railway/Render format)
    # If set, overrides PostgreSQL individual vars
    DATABASE_URL: str | None = None

    # PostgreSQL (individual vars, fallback if DATABASE_URL not set)
    POSTGRES_HOST: str = "localhost"
    POSTGRES_PORT: int = 5432
    POSTGRES_DB: str = "daily_rewards"
    POSTGRES_USER: str = "daily_rewards"
    POSTGRES_PASSWORD: SecretStr | None = None

    # Redis (single-flight lock для daily reset в production)
    REDIS_HOST: str = "localhost"
    REDIS_PORT: int = 6379
    REDIS_DB: int = 0

    # Environment (development | production)
    ENVIRONMENT: str = "development"

    # Гражданский день: фиксированное смещение от UTC в минутах (IST = +330)
    DAY_UTC_OFFSET_MINUTES: int = 330

    # Сколько дней хранить Submission / DailyAccrual
    RETENTION_DAYS: int = 30

    # Время ночного reset в гражданском времени (HH:MM)
    DAILY_RESET_TIME: str = "00:00"
    SCHEDULER_ENABLED: bool = True
    RESET_LOCK_TTL_SECONDS: int = 3600

    # Таймаут для submission path (секунды)
    SUBMISSION_TIMEOUT_SECONDS: float = 5.0

    # Бонусные активности: награда по умолчанию
    DEFAULT_BONUS_CURRENCY: int = 20

    # Ручной запуск reset через API
    CRON_TOKEN: SecretStr | None = None

    # HTTP
    API_HOST: str = "0.0.0.0"
    API_PORT: int = 8000

    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    @field_validator("DAY_UTC_OFFSET_MINUTES")
    @classmethod
    def check_offset(cls, v: int) -> int:
        if abs(v) > 14 * 60:
            raise ValueError("DAY_UTC_OFFSET_MINUTES must be within ±14 hours")
        return v

    @field_validator("DAILY_RESET_TIME")
    @classmethod
    def check_reset_time(cls, v: str) -> str:
        try:
            hour, minute = map(int, v.split(":"))
        except ValueError as e:
            raise ValueError("DAILY_RESET_TIME must be HH:MM") from e
        if not (0 <= hour < 24 and 0 <= minute < 60):
            raise ValueError("DAILY_RESET_TIME must be HH:MM")
        return v

    @field_validator("RETENTION_DAYS")
    @classmethod
    def check_retention(cls, v: int) -> int:
        if v < 1:
            raise ValueError("RETENTION_DAYS must be positive")
        return v

    @property
    def database_url(self) -> str:
        """
        Get database URL based on environment.

        Priority:
        1. DATABASE_URL env var (Railway/Render format)
        2. PostgreSQL individual vars (production)
        3. SQLite (development)
        """
        # 1. Use DATABASE_URL if provided (Railway/Render)
        if self.DATABASE_URL:
            url = self.DATABASE_URL
            # Railway uses postgres://, but asyncpg needs postgresql://
            if url.startswith("postgres://"):
                url = url.replace("postgres://", "postgresql://", 1)
            return url

        # 2. Production: construct from individual vars
        if self.ENVIRONMENT == "production":
            if not self.POSTGRES_PASSWORD:
                raise ValueError("POSTGRES_PASSWORD required for production")
            return (
                f"postgresql://{self.POSTGRES_USER}:"
                f"{self.POSTGRES_PASSWORD.get_secret_value()}"
                f"@{self.POSTGRES_HOST}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"
            )

        # 3. Development: SQLite
        return "sqlite://db.sqlite3"

    @property
    def redis_url(self) -> str:
        """Get Redis URL."""
        return f"redis://{self.REDIS_HOST}:{self.REDIS_PORT}/{self.REDIS_DB}"


config = Settings()
