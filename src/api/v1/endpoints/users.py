"""
Account API endpoints.

Handles signup, login/logout, the caller's own profile, dashboard counters
and admin account management.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Query, Response, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.deps import (
    get_current_account,
    get_reconciler,
    require_admin,
    require_agent_or_admin,
)
from src.core.config import settings
from src.core.security import create_access_token
from src.db.session import get_db
from src.models.account import Account
from src.schemas.account import (
    AccountListResponse,
    AccountProfileResponse,
    AccountResponse,
    AccountRoleUpdate,
    AccountStatusUpdate,
    AccountUpdate,
    DashboardStats,
    LoginRequest,
    SignupData,
)
from src.schemas.common import MessageResponse, page_count
from src.services.account_service import AccountService
from src.services.media_reconciler import MediaReconciler
from src.utils.constants import config
from src.utils.uploads import read_attachment

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["users"])


def set_auth_cookie(response: Response, account_id: str) -> None:
    """Issue a fresh token as an HTTP-only cookie."""
    response.set_cookie(
        key=settings.COOKIE_NAME,
        value=create_access_token(account_id),
        httponly=True,
        secure=settings.cookie_secure,
        samesite="strict",
        max_age=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
    )


@router.post(
    "/signup",
    response_model=AccountResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a new account",
    description="Create a user or agent account and sign it in.",
)
async def signup(
    response: Response,
    name: str = Form(...),
    email: str = Form(...),
    phone: str = Form(...),
    password: str = Form(...),
    role: Optional[str] = Form(None),
    profile_picture: Optional[str] = Form(None),
    profile_picture_file: Optional[UploadFile] = File(None),
    db: AsyncSession = Depends(get_db),
    reconciler: MediaReconciler = Depends(get_reconciler),
):
    """
    Register a new account.

    Args:
        name, email, phone, password: Identity fields
        role: Requested role; only 'agent' is honoured
        profile_picture: Picture URL, used when no file is sent
        profile_picture_file: Picture file

    Returns:
        Created account details
    """
    data = SignupData(
        name=name,
        email=email,
        phone=phone,
        password=password,
        role=role,
        profile_picture=profile_picture,
    )
    attachment = await read_attachment(profile_picture_file, "profile_picture_file")

    logger.info(f"Signup request for {email}")
    account = await AccountService.signup(db, reconciler, data, attachment)

    set_auth_cookie(response, account.id)
    return account


@router.post(
    "/login",
    response_model=AccountResponse,
    status_code=status.HTTP_200_OK,
    summary="Log in",
    description="Authenticate with email or phone and password; sets the token cookie.",
)
async def login(
    credentials: LoginRequest,
    response: Response,
    db: AsyncSession = Depends(get_db),
):
    account = await AccountService.authenticate(db, credentials.login_id, credentials.password)
    set_auth_cookie(response, account.id)
    return account


@router.post(
    "/logout",
    response_model=MessageResponse,
    status_code=status.HTTP_200_OK,
    summary="Log out",
)
async def logout(response: Response):
    """Clear the token cookie."""
    response.delete_cookie(settings.COOKIE_NAME, httponly=True, samesite="strict")
    return MessageResponse(message="Logged out successfully")


@router.get(
    "/profile",
    response_model=AccountProfileResponse,
    status_code=status.HTTP_200_OK,
    summary="Get own profile",
)
async def get_profile(
    account: Account = Depends(get_current_account),
    db: AsyncSession = Depends(get_db),
):
    return await AccountService.get_profile(db, account)


@router.put(
    "/profile",
    response_model=AccountProfileResponse,
    status_code=status.HTTP_200_OK,
    summary="Update own profile",
    description="Partial update of the caller's account; agents may also send professional fields.",
)
async def update_profile(
    response: Response,
    name: Optional[str] = Form(None),
    email: Optional[str] = Form(None),
    phone: Optional[str] = Form(None),
    password: Optional[str] = Form(None),
    profile_picture: Optional[str] = Form(None),
    location: Optional[str] = Form(None),
    bio: Optional[str] = Form(None),
    experience: Optional[str] = Form(None),
    languages: Optional[str] = Form(None),
    communities: Optional[str] = Form(None),
    specialties: Optional[str] = Form(None),
    portfolio: Optional[str] = Form(None),
    profile_picture_file: Optional[UploadFile] = File(None),
    account: Account = Depends(get_current_account),
    db: AsyncSession = Depends(get_db),
    reconciler: MediaReconciler = Depends(get_reconciler),
):
    """
    Update the caller's own profile.

    Structured fields (languages, communities, specialties, portfolio) are
    JSON strings.
    """
    data = AccountUpdate(
        name=name,
        email=email,
        phone=phone,
        password=password,
        profile_picture=profile_picture,
        location=location,
        bio=bio,
        experience=experience,
        languages=languages,
        communities=communities,
        specialties=specialties,
        portfolio=portfolio,
    )
    attachment = await read_attachment(profile_picture_file, "profile_picture_file")

    account = await AccountService.update_profile(db, reconciler, account, data, attachment)

    set_auth_cookie(response, account.id)
    return await AccountService.get_profile(db, account)


@router.get(
    "/stats",
    response_model=DashboardStats,
    status_code=status.HTTP_200_OK,
    summary="Dashboard counters",
)
async def get_dashboard_stats(
    account: Account = Depends(require_agent_or_admin),
    db: AsyncSession = Depends(get_db),
):
    return await AccountService.dashboard_stats(db, account)


@router.get(
    "",
    response_model=AccountListResponse,
    status_code=status.HTTP_200_OK,
    summary="List accounts",
    description="Admin only. Every account except the caller, newest first.",
)
async def list_accounts(
    role: Optional[str] = Query(None, description="Filter by role"),
    page: int = Query(1, ge=1, description="Page number (starts at 1)"),
    limit: int = Query(
        config.DEFAULT_PAGE_SIZE, ge=1, le=config.MAX_PAGE_SIZE, description="Items per page"
    ),
    admin: Account = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    skip = (page - 1) * limit
    accounts, total = await AccountService.list_accounts(
        db, admin, role=role, skip=skip, limit=limit
    )

    logger.info(f"Retrieved {len(accounts)} accounts (page {page})")

    return AccountListResponse(
        items=[AccountResponse.model_validate(account) for account in accounts],
        page=page,
        pages=page_count(total, limit),
        total=total,
    )


@router.delete(
    "/{account_id}",
    response_model=MessageResponse,
    status_code=status.HTTP_200_OK,
    summary="Delete an account",
    description="Admin only. Removes the account, its agent profile, its listings and their media.",
)
async def delete_account(
    account_id: str,
    admin: Account = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
    reconciler: MediaReconciler = Depends(get_reconciler),
):
    logger.info(f"Admin {admin.id} deleting account {account_id}")
    await AccountService.delete_account(db, reconciler, account_id)
    return MessageResponse(message="User removed and all associated data/media cleared")


@router.put(
    "/{account_id}/status",
    response_model=MessageResponse,
    status_code=status.HTTP_200_OK,
    summary="Block or unblock an account",
)
async def update_account_status(
    account_id: str,
    data: Optional[AccountStatusUpdate] = None,
    admin: Account = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    account = await AccountService.update_status(
        db, account_id, data.status if data else None
    )
    return MessageResponse(message=f"User status updated to {account.status}")


@router.put(
    "/{account_id}/role",
    response_model=MessageResponse,
    status_code=status.HTTP_200_OK,
    summary="Change an account's role",
)
async def update_account_role(
    account_id: str,
    data: AccountRoleUpdate,
    admin: Account = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    account = await AccountService.update_role(db, account_id, data.role)
    return MessageResponse(message=f"User role updated to {account.role}")
