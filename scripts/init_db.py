#!/usr/bin/env python3
"""
Database Initialization Script
==============================
One-command database setup for development.

Usage:
    python scripts/init_db.py              # Create all tables
    python scripts/init_db.py --reset      # Drop and recreate all tables
    python scripts/init_db.py --check      # Check connection only

Requirements:
    1. PostgreSQL running (or DATABASE_URL pointing at sqlite)
    2. .env file configured with database credentials
"""

import sys
import asyncio
import argparse
from pathlib import Path

# Add backend to path for imports
backend_path = Path(__file__).parent.parent / "backend"
sys.path.insert(0, str(backend_path))

from config import settings  # noqa: E402


def check_env_file():
    """Verify .env file exists"""
    env_path = Path(__file__).parent.parent / ".env"
    env_example = Path(__file__).parent.parent / ".env.example"

    if not env_path.exists():
        print("⚠️  .env file not found, using defaults and environment variables")
        print(f"   Copy {env_example} to {env_path} to configure the database.")
        return False
    return True


async def check_connection():
    """Test database connectivity"""
    from database import check_database_connection

    print("🔌 Testing database connection...")
    print(f"   URL: {settings.async_database_url.split('@')[-1]}")

    if await check_database_connection():
        print("\n✅ Connected successfully!")
        return True

    print("\n❌ Connection failed")
    print("\n💡 Troubleshooting:")
    print("   1. Is PostgreSQL running?")
    print("   2. Check your .env credentials")
    print(f"   3. Verify database '{settings.DB_NAME}' exists")
    return False


async def create_tables():
    """Create all database tables"""
    from database import Base, async_create_all_tables

    print("\n🏗️  Creating database tables...")
    try:
        await async_create_all_tables()
    except Exception as e:
        print(f"\n❌ Error creating tables: {e}")
        return False

    print("\n   Tables created:")
    for table_name in Base.metadata.tables.keys():
        print(f"   ✓ {table_name}")

    print("\n✅ All tables created successfully!")
    return True


async def drop_tables():
    """Drop all database tables"""
    from database import async_drop_all_tables

    print("\n⚠️  Dropping all tables...")
    try:
        await async_drop_all_tables()
    except Exception as e:
        print(f"\n❌ Error dropping tables: {e}")
        return False

    print("   All tables dropped ✓")
    return True


async def run(args) -> int:
    from database import async_dispose_engines

    try:
        if args.check:
            return 0 if await check_connection() else 1

        if not await check_connection():
            return 1

        if args.reset:
            confirm = input("\n⚠️  This will DELETE all reports. Continue? (yes/no): ")
            if confirm.lower() != "yes":
                print("Aborted.")
                return 0
            if not await drop_tables():
                return 1

        if not await create_tables():
            return 1
        return 0
    finally:
        await async_dispose_engines()


def main():
    parser = argparse.ArgumentParser(
        description="Database initialization script",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    python scripts/init_db.py              # Full setup
    python scripts/init_db.py --check      # Test connection only
    python scripts/init_db.py --reset      # Drop and recreate tables
        """
    )
    parser.add_argument(
        "--check",
        action="store_true",
        help="Only check database connection"
    )
    parser.add_argument(
        "--reset",
        action="store_true",
        help="Drop existing tables and recreate (DESTRUCTIVE!)"
    )

    args = parser.parse_args()

    print("=" * 50)
    print("🚀 Clinical Report Summarizer - Database Initialization")
    print("=" * 50)

    check_env_file()

    code = asyncio.run(run(args))
    if code == 0 and not args.check:
        print("\n" + "=" * 50)
        print("✅ Database initialization complete!")
        print("=" * 50)
        print("\nNext steps:")
        print("  1. Start the backend: cd backend && uvicorn main:app --reload --port 5000")
    sys.exit(code)


if __name__ == "__main__":
    main()
