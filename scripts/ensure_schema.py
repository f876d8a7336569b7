#!/usr/bin/env python3
"""
Bring the database schema up to date outside of a request

Usage:
    # Show the stored schema version
    python scripts/ensure_schema.py --status

    # Apply pending structural changes
    python scripts/ensure_schema.py
"""

import argparse
import asyncio
import sys

from greenlight.core.logging import setup_logging
from greenlight.core.redis_client import close_redis, get_redis
from greenlight.database.engine import close_db, engine
from greenlight.database.migrations import CURRENT_SCHEMA_VERSION, SchemaMigrationGuard


async def run(status_only: bool) -> int:
    guard = SchemaMigrationGuard(engine, await get_redis())

    try:
        before = await guard.current_version()
        print(f"Stored schema version: {before} (code expects {CURRENT_SCHEMA_VERSION})")

        if status_only:
            return 0

        if not await guard.ensure_schema():
            print("Schema initialization failed, see log for details")
            return 1

        print(f"Schema version now: {await guard.current_version()}")
        return 0
    finally:
        await close_redis()
        await close_db()


def main():
    parser = argparse.ArgumentParser(description="Greenlight schema migration guard")
    parser.add_argument("--status", action="store_true", help="only print the stored version")
    args = parser.parse_args()

    setup_logging()
    sys.exit(asyncio.run(run(args.status)))


if __name__ == "__main__":
    main()
