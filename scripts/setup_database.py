#!/usr/bin/env python3
"""
Database setup script for sessionbridge.

Creates the session table for the configured DATABASE_URL.
"""

import asyncio
import sys

from sqlalchemy import inspect

from sessionbridge.core.config import settings
from sessionbridge.core.logging_config import setup_logging
from sessionbridge.db.session import create_tables, engine


async def setup() -> list:
    await create_tables(engine)
    async with engine.connect() as conn:
        tables = await conn.run_sync(lambda sync_conn: inspect(sync_conn).get_table_names())
    await engine.dispose()
    return tables


def main() -> bool:
    """Initialize database based on configuration"""
    setup_logging(log_level=settings.LOG_LEVEL, enable_json=False)

    print("sessionbridge database setup")
    print("=" * 40)
    print(f"Database URL: {settings.DATABASE_URL}")

    try:
        tables = asyncio.run(setup())
    except Exception as e:
        print(f"Database setup failed: {e}")
        return False

    print(f"Tables: {', '.join(sorted(tables))}")
    return True


if __name__ == "__main__":
    sys.exit(0 if main() else 1)
