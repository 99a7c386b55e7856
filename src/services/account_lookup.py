"""
Account queries shared by the account and agent services.
"""

from typing import Optional

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.models.account import Account
from src.utils.errors import NotFoundError, ValidationError


async def get_account(db: AsyncSession, account_id: str) -> Optional[Account]:
    """Get account by ID."""
    stmt = select(Account).where(Account.id == account_id)
    result = await db.execute(stmt)
    return result.scalar_one_or_none()


async def require_account(db: AsyncSession, account_id: str) -> Account:
    """Get account by ID or raise NotFoundError."""
    account = await get_account(db, account_id)
    if account is None:
        raise NotFoundError("User not found")
    return account


async def find_by_login(db: AsyncSession, login_id: str) -> Optional[Account]:
    """Find an account whose email or phone matches the login id."""
    login_id = (login_id or "").strip()
    stmt = select(Account).where(
        or_(Account.email == login_id.lower(), Account.phone == login_id)
    )
    result = await db.execute(stmt)
    return result.scalars().first()


async def ensure_contact_available(
    db: AsyncSession,
    email: Optional[str] = None,
    phone: Optional[str] = None,
    exclude_id: Optional[str] = None,
) -> None:
    """
    Reject an email or phone that already belongs to another account.

    Raises:
        ValidationError: If either value is taken
    """
    conditions = []
    if email:
        conditions.append(Account.email == email.strip().lower())
    if phone:
        conditions.append(Account.phone == phone)
    if not conditions:
        return

    stmt = select(Account.id).where(or_(*conditions))
    if exclude_id is not None:
        stmt = stmt.where(Account.id != exclude_id)

    result = await db.execute(stmt)
    if result.first() is not None:
        raise ValidationError("User already exists with this email or phone")
