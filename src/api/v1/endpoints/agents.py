"""
Agent profile API endpoints.

Public agent directory, the calling agent's own profile and admin agent
management.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.deps import get_current_account, get_reconciler, require_admin, require_agent
from src.db.session import get_db
from src.models.account import Account
from src.schemas.account import AccountResponse
from src.schemas.agent import (
    AgentCreate,
    AgentCreatedResponse,
    AgentListResponse,
    AgentProfileResponse,
    AgentProfileUpdate,
    AgentStatusResponse,
    AgentStatusUpdate,
)
from src.schemas.common import page_count
from src.services.agent_service import AgentService
from src.services.media_reconciler import MediaReconciler
from src.utils.constants import config
from src.utils.uploads import read_attachment

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/agents", tags=["agents"])


@router.get(
    "/profile",
    response_model=AgentProfileResponse,
    status_code=status.HTTP_200_OK,
    summary="Get own agent profile",
    description="Agents only. The profile is created on first access if missing.",
)
async def get_own_profile(
    account: Account = Depends(get_current_account),
    db: AsyncSession = Depends(get_db),
):
    return await AgentService.get_own_profile(db, account)


@router.put(
    "/profile",
    response_model=AgentProfileResponse,
    status_code=status.HTTP_200_OK,
    summary="Update own agent profile",
)
async def update_own_profile(
    name: Optional[str] = Form(None),
    email: Optional[str] = Form(None),
    phone: Optional[str] = Form(None),
    job_title: Optional[str] = Form(None),
    location: Optional[str] = Form(None),
    bio: Optional[str] = Form(None),
    experience: Optional[str] = Form(None),
    avatar_url: Optional[str] = Form(None),
    languages: Optional[str] = Form(None),
    communities: Optional[str] = Form(None),
    specialties: Optional[str] = Form(None),
    portfolio: Optional[str] = Form(None),
    avatar_file: Optional[UploadFile] = File(None),
    account: Account = Depends(require_agent),
    db: AsyncSession = Depends(get_db),
    reconciler: MediaReconciler = Depends(get_reconciler),
):
    """
    Update the calling agent's profile.

    Name, email, phone and avatar changes are mirrored onto the account.
    """
    data = AgentProfileUpdate(
        name=name,
        email=email,
        phone=phone,
        job_title=job_title,
        location=location,
        bio=bio,
        experience=experience,
        avatar_url=avatar_url,
        languages=languages,
        communities=communities,
        specialties=specialties,
        portfolio=portfolio,
    )
    attachment = await read_attachment(avatar_file, "avatar_file")

    return await AgentService.update_profile(db, reconciler, account.id, data, attachment)


@router.get(
    "",
    response_model=AgentListResponse,
    status_code=status.HTTP_200_OK,
    summary="List agents",
    description="Public agent directory, newest first.",
)
async def list_agents(
    page: int = Query(1, ge=1, description="Page number (starts at 1)"),
    limit: int = Query(
        config.DEFAULT_PAGE_SIZE, ge=1, le=config.MAX_PAGE_SIZE, description="Items per page"
    ),
    db: AsyncSession = Depends(get_db),
):
    skip = (page - 1) * limit
    agents, total = await AgentService.list_agents(db, skip=skip, limit=limit)

    logger.info(f"Retrieved {len(agents)} agents (page {page})")

    return AgentListResponse(
        items=agents,
        page=page,
        pages=page_count(total, limit),
        total=total,
    )


@router.post(
    "",
    response_model=AgentCreatedResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create an agent",
    description="Admin only. Creates an agent account and its profile.",
)
async def add_agent(
    data: AgentCreate,
    admin: Account = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    logger.info(f"Admin {admin.id} creating agent {data.email}")
    account, profile = await AgentService.add_agent(db, data)

    return AgentCreatedResponse(
        message="Agent created successfully",
        account=AccountResponse.model_validate(account),
        agent=AgentProfileResponse.model_validate(profile),
    )


@router.get(
    "/{slug}",
    response_model=AgentProfileResponse,
    status_code=status.HTTP_200_OK,
    summary="Get agent by slug",
)
async def get_agent(slug: str, db: AsyncSession = Depends(get_db)):
    return await AgentService.get_by_slug(db, slug)


@router.put(
    "/{agent_id}",
    response_model=AgentProfileResponse,
    status_code=status.HTTP_200_OK,
    summary="Admin update of an agent",
    description="Admin only. Only the status field may be changed here.",
)
async def admin_update_agent(
    agent_id: str,
    data: AgentProfileUpdate,
    admin: Account = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return await AgentService.admin_update(db, agent_id, data)


@router.put(
    "/{agent_id}/status",
    response_model=AgentStatusResponse,
    status_code=status.HTTP_200_OK,
    summary="Change an agent's status",
    description="Admin only. Key may be the account id, profile id or slug; no status toggles.",
)
async def update_agent_status(
    agent_id: str,
    data: Optional[AgentStatusUpdate] = None,
    admin: Account = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    profile = await AgentService.update_status(db, agent_id, data.status if data else None)

    return AgentStatusResponse(
        id=profile.id,
        slug=profile.slug,
        status=profile.status,
        message=f"Agent status updated to {profile.status}",
    )
