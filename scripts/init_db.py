"""
Database initialization script.

This script creates all database tables defined in the ORM models and can
seed the first admin account (signup never grants the admin role).
Run this script before starting the application for the first time.

Usage:
    python scripts/init_db.py
    python scripts/init_db.py --drop
    python scripts/init_db.py --admin-email admin@example.com --admin-phone 0500000000 \
        --admin-password secret123
"""

import argparse
import asyncio
import sys
import uuid
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from sqlalchemy import select

from src.core.security import get_password_hash
from src.db.base import Base, engine
from src.db.session import AsyncSessionLocal
from src.models import Account, AccountStatus, Role
from src.utils.constants import config


async def init_db(drop: bool = False):
    """Create all database tables."""
    print("Creating database tables...")

    async with engine.begin() as conn:
        if drop:
            # Drop all tables (use with caution in production)
            await conn.run_sync(Base.metadata.drop_all)

        await conn.run_sync(Base.metadata.create_all)

    print("Database tables created successfully!")


async def seed_admin(name: str, email: str, phone: str, password: str):
    """Create the admin account unless one with this email already exists."""
    async with AsyncSessionLocal() as db:
        result = await db.execute(select(Account).where(Account.email == email.lower()))
        if result.scalar_one_or_none() is not None:
            print(f"Admin {email} already exists, skipping")
            return

        db.add(
            Account(
                id=str(uuid.uuid4()),
                name=name,
                email=email.lower(),
                phone=phone,
                password_hash=get_password_hash(password),
                profile_picture=config.DEFAULT_AVATAR,
                role=Role.ADMIN.value,
                status=AccountStatus.ACTIVE.value,
            )
        )
        await db.commit()
        print(f"Admin account created: {email}")


async def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Initialize the listings database")
    parser.add_argument("--drop", action="store_true", help="Drop existing tables first")
    parser.add_argument("--admin-name", default="Administrator")
    parser.add_argument("--admin-email")
    parser.add_argument("--admin-phone")
    parser.add_argument("--admin-password")
    args = parser.parse_args()

    try:
        await init_db(drop=args.drop)
        if args.admin_email:
            if not (args.admin_phone and args.admin_password):
                print("--admin-phone and --admin-password are required with --admin-email")
                sys.exit(1)
            await seed_admin(args.admin_name, args.admin_email, args.admin_phone, args.admin_password)
    except Exception as e:
        print(f"Error initializing database: {e}")
        sys.exit(1)
    finally:
        await engine.dispose()


if __name__ == "__main__":
    asyncio.run(main())
