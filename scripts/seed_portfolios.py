"""
Seed the default airline portfolios into the database.

Safe to run repeatedly; existing portfolios are left untouched.

Usage:
    python scripts/seed_portfolios.py
"""

import asyncio
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from config.logging_config import setup_logging
from database.connection import close_db, get_db_context, init_db
from services.seed import DEFAULT_PORTFOLIOS, seed_portfolios


async def main():
    setup_logging(log_to_file=False)
    await init_db()

    async with get_db_context() as db:
        created = await seed_portfolios(db)

    await close_db()

    print(f"Seeded {len(created)} of {len(DEFAULT_PORTFOLIOS)} default portfolios")
    for portfolio in created:
        print(f"  + {portfolio.name}")


if __name__ == "__main__":
    asyncio.run(main())
