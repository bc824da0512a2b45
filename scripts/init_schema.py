#!/usr/bin/env python3
"""Initialize the tracker ingestion schema using the service's own configuration."""

import asyncio
import sys
from pathlib import Path

from tracker_ingest.config import load_lambda_config
from tracker_ingest.repository import get_connection

# Get script directory
SCRIPT_DIR = Path(__file__).parent
REPO_ROOT = SCRIPT_DIR.parent
SCHEMA_FILE = REPO_ROOT / "data" / "schema.sql"

EXPECTED_TABLES = ("tracker_devices", "vehicles", "vehicle_positions")


async def main():
    """Main function to initialize schema."""
    print("=" * 40)
    print("Initialize Tracker Ingest Schema")
    print("=" * 40)
    print()

    if not SCHEMA_FILE.exists():
        print(f"✗ Schema file not found: {SCHEMA_FILE}")
        sys.exit(1)

    config = load_lambda_config()
    print(f"Database: {config.db_user}@{config.db_host}:{config.db_port}/{config.db_name}")
    print()

    with open(SCHEMA_FILE, 'r') as f:
        schema_sql = f.read()

    print("Connecting...")
    try:
        conn = await get_connection(config)
    except Exception as e:
        print(f"✗ Connection failed: {e}")
        sys.exit(1)
    print("✓ Connected successfully")

    try:
        print("Applying schema...")
        await conn.execute(schema_sql)

        for table in EXPECTED_TABLES:
            exists = await conn.fetchval(
                """
                SELECT EXISTS (
                    SELECT FROM information_schema.tables
                    WHERE table_schema = current_schema()
                    AND table_name = $1
                );
                """,
                table,
            )
            print(f"{'✓' if exists else '✗'} {table}")
            if not exists:
                sys.exit(1)
    finally:
        await conn.close()

    print()
    print("✓ Schema initialized")


if __name__ == "__main__":
    asyncio.run(main())
