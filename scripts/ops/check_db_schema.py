"""
Скрипт для проверки синхронизации схемы БД с моделями в production.

Usage:
    python -m scripts.ops.check_db_schema

AICODE-NOTE: Этот скрипт помогает диагностировать проблемы с миграциями
до того, как они приведут к падению сервиса в production.
"""

import asyncio
import sys
from datetime import date, datetime, timezone
from pathlib import Path

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from tortoise import Tortoise
from tortoise.exceptions import IntegrityError

from src.database.config import TORTOISE_ORM
from src.database.models import (
    BonusSubmission,
    DailyAccrual,
    Reward,
    Subtask,
    Submission,
    Task,
    User,
)


async def check_table_exists(model, table_name: str) -> tuple[bool, str]:
    """Проверяет существование таблицы и доступность всех колонок."""
    try:
        await model.all().limit(1)
        return True, f"✅ Table '{table_name}' exists and is accessible"
    except Exception as e:
        return False, f"❌ Table '{table_name}' error: {e}"


async def check_reward_columns() -> tuple[bool, str]:
    """Проверяет колонки Reward, добавленные для бонусов (source, bonus_reason)."""
    try:
        await Reward.all().limit(1).values("id", "source", "bonus_multiplier", "bonus_reason")
        return True, "✅ Reward columns (source, bonus_multiplier, bonus_reason) exist"
    except Exception as e:
        return False, f"❌ Reward columns error: {e}"


async def check_submission_unique() -> tuple[bool, str]:
    """Проверяет, что уникальность слота отметки обеспечивает сама БД."""
    test_user = None
    test_task = None
    try:
        test_user = await User.create(name="__schema_check_test__")
        test_task = await Task.create(key="__schema_check_test__", name="__test__")
        fields = dict(
            user=test_user,
            task=test_task,
            subtask_key="__test__",
            civil_day=date(2000, 1, 1),
            submitted_at=datetime.now(timezone.utc),
            proof_reference="__test__",
            valid=True,
            validation_reason="anytime",
            validation_message="__test__",
        )
        await Submission.create(**fields)
        try:
            await Submission.create(**fields)
        except IntegrityError:
            return True, "✅ Submission unique constraint works"
        return False, "❌ Duplicate Submission was accepted: unique constraint missing"
    except Exception as e:
        return False, f"❌ Submission constraint check error: {e}"
    finally:
        # CASCADE удаляет отметки вместе с пользователем
        if test_user:
            await test_user.delete()
        if test_task:
            await test_task.delete()


async def main():
    """Основная функция проверки схемы БД."""
    print("🔍 Checking database schema synchronization...")
    print("=" * 60)

    await Tortoise.init(config=TORTOISE_ORM)

    checks = [
        ("Users table", check_table_exists(User, "users")),
        ("Tasks table", check_table_exists(Task, "tasks")),
        ("Subtasks table", check_table_exists(Subtask, "subtasks")),
        ("Submissions table", check_table_exists(Submission, "submissions")),
        ("BonusSubmissions table", check_table_exists(BonusSubmission, "bonus_submissions")),
        ("Rewards table", check_table_exists(Reward, "rewards")),
        ("DailyAccruals table", check_table_exists(DailyAccrual, "daily_accruals")),
        ("Reward columns", check_reward_columns()),
        ("Submission unique constraint", check_submission_unique()),
    ]

    all_passed = True

    for check_name, check_coro in checks:
        success, message = await check_coro
        print(f"\n{check_name}:")
        print(f"  {message}")
        if not success:
            all_passed = False

    await Tortoise.close_connections()

    print("\n" + "=" * 60)
    if all_passed:
        print("✅ All checks passed! Database schema is synchronized.")
        return 0
    else:
        print("❌ Some checks failed. Database schema is NOT synchronized.")
        print("\n💡 Possible solutions:")
        print("  1. Run migrations: aerich upgrade")
        print("  2. Check if migrations are up to date: aerich history")
        print("  3. Create missing migration: aerich migrate --name 'fix_schema'")
        return 1


if __name__ == "__main__":
    exit_code = asyncio.run(main())
    sys.exit(exit_code)
