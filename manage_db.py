#!/usr/bin/env python3
"""
Database management script for the timekeep backend.
Creates and drops the tables of the Supabase Postgres database.
"""

import asyncio
import sys

from timekeep.config import get_settings
from timekeep.infrastructure.db.database import create_engine_from_settings
from timekeep.infrastructure.db.models import create_all_tables, drop_all_tables


def _engine():
    engine = create_engine_from_settings(get_settings())
    if engine is None:
        print("DATABASE_URL is not set.")
        sys.exit(1)
    return engine


async def _run(*steps):
    engine = _engine()
    try:
        for step in steps:
            await step(engine)
    finally:
        await engine.dispose()


def create_tables():
    """Create every table that does not exist yet."""
    print("Creating tables...")
    asyncio.run(_run(create_all_tables))
    print("Done.")


def drop_tables():
    """Drop all tables - WARNING: This will drop all data!"""
    response = input("This will drop ALL data. Type 'yes' to continue: ")
    if response.lower() != 'yes':
        print("Drop cancelled.")
        return
    print("Dropping tables...")
    asyncio.run(_run(drop_all_tables))
    print("Done.")


def reset_database():
    """Drop and recreate all tables - WARNING: This will drop all data!"""
    response = input("This will drop ALL data. Type 'yes' to continue: ")
    if response.lower() != 'yes':
        print("Database reset cancelled.")
        return
    print("Resetting database...")
    asyncio.run(_run(drop_all_tables, create_all_tables))
    print("Done.")


def main():
    """Main CLI function."""
    if len(sys.argv) < 2:
        print("Usage: python manage_db.py [command]")
        print("Commands:")
        print("  create         - Create missing tables")
        print("  drop           - Drop all tables (WARNING: drops all data)")
        print("  reset          - Drop and recreate all tables (WARNING: drops all data)")
        return

    command_name = sys.argv[1]

    if command_name == "create":
        create_tables()
    elif command_name == "drop":
        drop_tables()
    elif command_name == "reset":
        reset_database()
    else:
        print(f"Unknown command: {command_name}")


if __name__ == "__main__":
    main()
