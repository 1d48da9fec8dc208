"""
Create the default admin account used for the first login.
Credentials can be overridden with ADMIN_EMAIL / ADMIN_PASSWORD.
"""
import asyncio
import os

from sqlalchemy import select

from template_market.db.models import Account
from template_market.infrastructure.database import dispose_engine, init_db, session_scope
from template_market.modules.accounts import ROLE_ADMIN, AccountCreateInput, AccountService


async def create_default_admin():
    """Create the admin account unless one already exists."""
    await init_db()
    email = os.environ.get("ADMIN_EMAIL", "admin@example.com")
    password = os.environ.get("ADMIN_PASSWORD", "admin123")

    try:
        async with session_scope() as db:
            result = await db.execute(select(Account).where(Account.role == ROLE_ADMIN).limit(1))
            if result.scalar_one_or_none() is not None:
                print("An admin account already exists, nothing to do")
                return

            service = AccountService.with_session(db)
            await service.create_account(
                AccountCreateInput(
                    username="admin",
                    email=email,
                    password=password,
                    role=ROLE_ADMIN,
                    is_active=True,
                )
            )

        print("=" * 50)
        print("Default admin account created")
        print("=" * 50)
        print(f"Email: {email}")
        print(f"Password: {password}")
        print("=" * 50)
        print("Change the password after the first login!")
        print("=" * 50)
    finally:
        await dispose_engine()


if __name__ == "__main__":
    asyncio.run(create_default_admin())
