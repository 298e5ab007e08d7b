"""
Database initialization script.

Creates the Coffre schema from the SQLAlchemy models and verifies it.

Usage:
    ENV=development python scripts/init_database.py [--reset]
"""

import argparse
import asyncio
import sys

from sqlalchemy import inspect

from coffre.config.settings import get_settings
from coffre.infrastructure.persistence import Base, Database

EXPECTED_TABLES = ["users", "user_sessions", "transfer_simulations"]


async def create_schema(database: Database, reset: bool) -> None:
    """Create (or drop and recreate) all tables."""
    if reset:
        print("Dropping and recreating all tables...")
        await database.reset_schema(Base.metadata)
    else:
        print("Creating missing tables...")
        await database.create_tables(Base.metadata)


async def verify_tables(database: Database) -> bool:
    """Verify all tables were created."""
    print("\nVerifying tables...")

    async with database.engine.connect() as conn:
        existing = await conn.run_sync(
            lambda sync_conn: set(inspect(sync_conn).get_table_names())
        )

    missing = [table for table in EXPECTED_TABLES if table not in existing]
    for table in EXPECTED_TABLES:
        print(f"  {'ok' if table in existing else 'MISSING'}  {table}")

    return not missing


async def main(reset: bool = False) -> int:
    settings = get_settings()
    database = Database(database_url=settings.DATABASE_URL)

    print(f"Initializing database (ENV={settings.ENV})")
    await database.connect()
    try:
        await create_schema(database, reset)
        if not await verify_tables(database):
            print("\nSchema verification failed")
            return 1
    finally:
        await database.disconnect()

    print("\nDatabase initialization completed")
    return 0


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Initialize Coffre database")
    parser.add_argument(
        "--reset",
        action="store_true",
        help="Drop existing tables first (destroys data)",
    )
    args = parser.parse_args()
    sys.exit(asyncio.run(main(reset=args.reset)))
