"""
Ручной запуск ночной сверки.

Usage:
    python -m scripts.ops.run_daily_reset              # за текущий день
    python -m scripts.ops.run_daily_reset 2025-01-15   # as_of = 2025-01-15

Безопасно запускать повторно: уже закрытые дни не трогаются.
"""

import asyncio
import logging
import sys
from datetime import date
from pathlib import Path

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from tortoise import Tortoise

from src.database.config import TORTOISE_ORM
from src.services.scheduler import run_daily_reset


async def main(as_of: date | None) -> int:
    await Tortoise.init(config=TORTOISE_ORM)
    try:
        result = await run_daily_reset(as_of)
    finally:
        await Tortoise.close_connections()

    print(f"Daily reset for {result.civil_day}")
    print(f"  users processed:  {result.users_processed}")
    print(f"  days settled:     {result.accruals_settled}")
    print(f"  rewards recovered: {result.rewards_issued} {result.totals_credited}")
    print(f"  streaks updated:  {result.streaks_updated}")
    print(f"  records pruned:   {result.records_pruned}")
    if result.failures:
        print(f"❌ {len(result.failures)} failure(s):")
        for failure in result.failures:
            print(f"  - {failure}")
        return 1
    print("✅ Done")
    return 0


if __name__ == "__main__":
    logging.basicConfig(
        level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )
    as_of = date.fromisoformat(sys.argv[1]) if len(sys.argv) > 1 else None
    sys.exit(asyncio.run(main(as_of)))
