"""
API dependencies.
"""

import logging
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.authorization import check_account_access, require_role
from src.core.config import settings
from src.core.security import decode_access_token
from src.db.session import get_db
from src.integrations.cloudinary.client import cloudinary_client
from src.models.account import Account, Role
from src.services.account_lookup import get_account
from src.services.media_reconciler import MediaReconciler
from src.services.media_store import MediaStore
from src.utils.errors import AuthError

logger = logging.getLogger(__name__)

# Bearer header is a fallback for clients that cannot keep the cookie
oauth2_scheme = OAuth2PasswordBearer(
    tokenUrl=f"{settings.API_V1_PREFIX}/users/login", auto_error=False
)


def get_media_store() -> MediaStore:
    """Media host used by the reconciler."""
    return cloudinary_client


def get_reconciler(store: MediaStore = Depends(get_media_store)) -> MediaReconciler:
    return MediaReconciler(store)


async def get_current_account(
    request: Request,
    db: AsyncSession = Depends(get_db),
    bearer_token: Optional[str] = Depends(oauth2_scheme),
) -> Account:
    """
    Get the current authenticated account from the token cookie or header.
    """
    token = request.cookies.get(settings.COOKIE_NAME) or bearer_token
    if not token:
        raise AuthError("Not authorized, no token")

    account_id = decode_access_token(token)
    if account_id is None:
        raise AuthError("Not authorized, token failed")

    account = await get_account(db, account_id)
    if account is None:
        logger.warning(f"Token for unknown account {account_id}")
        raise AuthError("Not authorized, account not found")

    await check_account_access(db, account)
    return account


async def require_admin(account: Account = Depends(get_current_account)) -> Account:
    require_role(account, Role.ADMIN)
    return account


async def require_agent_or_admin(account: Account = Depends(get_current_account)) -> Account:
    require_role(account, Role.AGENT, Role.ADMIN)
    return account


async def require_agent(account: Account = Depends(get_current_account)) -> Account:
    require_role(account, Role.AGENT)
    return account
