"""
Agent profile service for business logic and database operations.
"""

import logging
import uuid
from typing import Optional

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.security import get_password_hash
from src.models.account import Account, AccountStatus, Role
from src.models.agent_profile import AgentProfile, AgentStatus
from src.schemas.agent import AgentCreate, AgentListItem, AgentProfileUpdate
from src.services.account_lookup import ensure_contact_available, require_account
from src.services.media_reconciler import Arity, MediaReconciler, Shape, collect_urls
from src.services.media_store import Attachment
from src.utils.constants import config
from src.utils.errors import ForbiddenError, NotFoundError, ValidationError
from src.utils.json_fields import parse_json_list
from src.utils.slug import generate_unique_slug

logger = logging.getLogger(__name__)

AGENT_STATUSES = [status.value for status in AgentStatus]


def next_agent_status(current: str, requested: Optional[str]) -> str:
    """
    Resolve the status an agent profile moves to.

    A missing value toggles active and inactive, and a suspended profile
    toggles back to active. Requesting the current status is a no-op.

    Raises:
        ValidationError: On unknown values or transitions that are not allowed
    """
    if not requested:
        if current == AgentStatus.ACTIVE.value:
            return AgentStatus.INACTIVE.value
        return AgentStatus.ACTIVE.value

    if requested not in AGENT_STATUSES:
        raise ValidationError(f"Invalid status. Must be one of: {', '.join(AGENT_STATUSES)}")

    if requested == current:
        return current

    if requested not in config.AGENT_STATUS_TRANSITIONS.get(current, set()):
        raise ValidationError(f"Cannot change agent status from {current} to {requested}")

    return requested


class AgentService:
    """Service class for agent profile operations."""

    @staticmethod
    async def get_by_account(db: AsyncSession, account_id: str) -> Optional[AgentProfile]:
        """
        Get the profile owned by an account.

        Args:
            db: Database session
            account_id: Owning account identifier

        Returns:
            AgentProfile instance or None if the account has none yet
        """
        stmt = select(AgentProfile).where(AgentProfile.account_id == account_id)
        result = await db.execute(stmt)
        return result.scalars().first()

    @staticmethod
    async def resolve(db: AsyncSession, key: str) -> Optional[AgentProfile]:
        """Find a profile by owning account id, profile id or slug."""
        stmt = select(AgentProfile).where(
            or_(
                AgentProfile.account_id == key,
                AgentProfile.id == key,
                AgentProfile.slug == key,
            )
        )
        result = await db.execute(stmt)
        return result.scalars().first()

    @staticmethod
    async def build_profile(
        db: AsyncSession,
        account: Account,
        job_title: Optional[str] = None,
        avatar_url: Optional[str] = None,
    ) -> AgentProfile:
        """
        Create a profile mirroring the account's identity fields.

        The profile is added to the session but not committed; callers commit
        it together with their own changes.
        """
        slug = await generate_unique_slug(db, AgentProfile, account.name, fallback="agent")
        profile = AgentProfile(
            id=str(uuid.uuid4()),
            account_id=account.id,
            slug=slug,
            name=account.name,
            email=account.email,
            phone=account.phone,
            avatar_url=avatar_url or account.profile_picture or config.DEFAULT_AVATAR,
            job_title=job_title or config.DEFAULT_AGENT_TITLE,
            location="",
            bio="",
            experience="",
            languages=[],
            communities=[],
            specialties=[],
            portfolio=[],
            status=AgentStatus.ACTIVE.value,
        )
        db.add(profile)
        return profile

    @staticmethod
    async def ensure_profile(db: AsyncSession, account: Account) -> AgentProfile:
        """
        Get the agent's profile, creating it when it is missing.
        """
        profile = await AgentService.get_by_account(db, account.id)
        if profile is not None:
            return profile

        profile = await AgentService.build_profile(db, account)
        await db.commit()
        await db.refresh(profile)

        logger.info(f"Created missing agent profile {profile.slug} for account {account.id}")
        return profile

    @staticmethod
    async def get_own_profile(db: AsyncSession, caller: Account) -> AgentProfile:
        """Profile of the calling agent. Other roles are refused."""
        if caller.role != Role.AGENT.value:
            raise ForbiddenError("Access denied. Agents only.")
        return await AgentService.ensure_profile(db, caller)

    @staticmethod
    async def update_profile(
        db: AsyncSession,
        reconciler: MediaReconciler,
        account_id: str,
        data: AgentProfileUpdate,
        attachment: Optional[Attachment] = None,
    ) -> AgentProfile:
        """
        Partially update an agent profile and mirror identity changes onto
        the owning account.

        Args:
            db: Database session
            reconciler: Media reconciler bound to the media host
            account_id: Owning account identifier
            data: Supplied fields; unset fields are left untouched
            attachment: Optional new avatar file

        Returns:
            Updated agent profile
        """
        account = await require_account(db, account_id)
        profile = await AgentService.get_by_account(db, account.id)
        email = data.email.strip().lower() if data.email else None

        # Parse everything before any remote call
        languages = parse_json_list(data.languages, "languages")
        communities = parse_json_list(data.communities, "communities")
        specialties = parse_json_list(data.specialties, "specialties")

        current_avatar = profile.avatar_url if profile else account.profile_picture
        avatar_plan = reconciler.prepare(
            "avatar_url",
            current_avatar,
            data.avatar_url,
            [attachment] if attachment else [],
            config.PROFILE_IMAGE_FOLDER,
            arity=Arity.SINGLE,
        )
        portfolio_plan = reconciler.prepare(
            "portfolio",
            profile.portfolio if profile else [],
            data.portfolio,
            None,
            config.PROFILE_IMAGE_FOLDER,
            arity=Arity.LIST,
            shape=Shape.PORTFOLIO,
        )

        await ensure_contact_available(db, email, data.phone, exclude_id=account.id)

        avatar = await reconciler.stage(avatar_plan)
        portfolio = await reconciler.stage(portfolio_plan)

        if profile is None:
            profile = await AgentService.build_profile(db, account, job_title=data.job_title)
            logger.info(f"Creating agent profile {profile.slug} for account {account.id}")

        if data.name:
            profile.name = data.name
            account.name = data.name
        if email:
            profile.email = email
            account.email = email
        if data.phone:
            profile.phone = data.phone
            account.phone = data.phone
        if data.job_title:
            profile.job_title = data.job_title
        if data.location is not None:
            profile.location = data.location
        if data.bio is not None:
            profile.bio = data.bio
        if data.experience is not None:
            profile.experience = data.experience
        if languages is not None:
            profile.languages = languages
        if communities is not None:
            profile.communities = communities
        if specialties is not None:
            profile.specialties = specialties
        profile.portfolio = list(portfolio.value)

        removed = list(avatar.removed) + list(portfolio.removed)
        if avatar.value != current_avatar:
            profile.avatar_url = avatar.value
            if account.profile_picture not in (avatar.value, current_avatar):
                removed.append(account.profile_picture)
            account.profile_picture = avatar.value

        await db.commit()
        await db.refresh(profile)

        kept = [profile.avatar_url, account.profile_picture] + collect_urls(profile.portfolio)
        await reconciler.release(removed, exclude=kept)

        logger.info(f"Agent profile updated: {profile.slug}")
        return profile

    @staticmethod
    async def admin_update(
        db: AsyncSession, key: str, data: AgentProfileUpdate
    ) -> AgentProfile:
        """
        Admin edit of an agent profile, restricted to the status field.

        Raises:
            NotFoundError: If no profile matches key
            ValidationError: If no status was supplied
        """
        profile = await AgentService.resolve(db, key)
        if profile is None:
            raise NotFoundError("Agent not found")
        if not data.status:
            raise ValidationError("Admin can only update agent status via this endpoint")

        return await AgentService._apply_status(db, profile, data.status)

    @staticmethod
    async def update_status(
        db: AsyncSession, key: str, status: Optional[str]
    ) -> AgentProfile:
        """
        Move an agent profile through its status state machine.

        Args:
            db: Database session
            key: Owning account id, profile id or slug
            status: Target status, or None to toggle

        Returns:
            Updated agent profile
        """
        if status and status not in AGENT_STATUSES:
            raise ValidationError(f"Invalid status. Must be one of: {', '.join(AGENT_STATUSES)}")

        profile = await AgentService.resolve(db, key)
        if profile is None:
            raise NotFoundError("Agent not found")

        return await AgentService._apply_status(db, profile, status)

    @staticmethod
    async def _apply_status(
        db: AsyncSession, profile: AgentProfile, status: Optional[str]
    ) -> AgentProfile:
        new_status = next_agent_status(profile.status, status)
        if new_status == profile.status:
            return profile

        previous = profile.status
        profile.status = new_status
        await db.commit()
        await db.refresh(profile)

        logger.info(f"Agent {profile.slug} status changed: {previous} -> {new_status}")
        return profile

    @staticmethod
    async def list_agents(
        db: AsyncSession, skip: int = 0, limit: int = 10
    ) -> tuple[list[AgentListItem], int]:
        """
        Get paginated agent accounts merged with their profiles.

        Args:
            db: Database session
            skip: Number of records to skip
            limit: Maximum number of records to return

        Returns:
            Tuple of (agents list, total count)
        """
        count_stmt = select(func.count()).select_from(Account).where(
            Account.role == Role.AGENT.value
        )
        total = (await db.execute(count_stmt)).scalar()

        stmt = (
            select(Account)
            .where(Account.role == Role.AGENT.value)
            .order_by(Account.created_at.desc())
            .offset(skip)
            .limit(limit)
        )
        accounts = list((await db.execute(stmt)).scalars().all())

        profiles = {}
        if accounts:
            profile_stmt = select(AgentProfile).where(
                AgentProfile.account_id.in_([a.id for a in accounts])
            )
            for profile in (await db.execute(profile_stmt)).scalars().all():
                profiles[profile.account_id] = profile

        items = []
        for account in accounts:
            profile = profiles.get(account.id)
            items.append(
                AgentListItem(
                    id=profile.id if profile else account.id,
                    account_id=account.id,
                    name=profile.name if profile else account.name,
                    email=profile.email if profile else account.email,
                    phone=profile.phone if profile else account.phone,
                    avatar_url=profile.avatar_url if profile else account.profile_picture,
                    job_title=profile.job_title if profile else config.DEFAULT_AGENT_TITLE,
                    slug=profile.slug if profile else "",
                    status=profile.status if profile else AgentStatus.ACTIVE.value,
                )
            )

        return items, total

    @staticmethod
    async def get_by_slug(db: AsyncSession, slug: str) -> AgentProfile:
        """Public profile lookup; raises NotFoundError when missing."""
        stmt = select(AgentProfile).where(AgentProfile.slug == slug)
        result = await db.execute(stmt)
        profile = result.scalar_one_or_none()
        if profile is None:
            raise NotFoundError("Agent not found")
        return profile

    @staticmethod
    async def add_agent(db: AsyncSession, data: AgentCreate) -> tuple[Account, AgentProfile]:
        """
        Create an agent account together with its profile.

        Returns:
            Tuple of (account, profile)
        """
        if not (data.name and data.email and data.phone and data.password):
            raise ValidationError(
                "Please provide all required fields (Name, Email, Phone, Password)"
            )

        email = data.email.strip().lower()
        await ensure_contact_available(db, email, data.phone)

        account = Account(
            id=str(uuid.uuid4()),
            name=data.name,
            email=email,
            phone=data.phone,
            password_hash=get_password_hash(data.password),
            profile_picture=config.DEFAULT_AVATAR,
            role=Role.AGENT.value,
            status=AccountStatus.ACTIVE.value,
        )
        db.add(account)
        profile = await AgentService.build_profile(
            db, account, job_title=data.job_title, avatar_url=config.DEFAULT_AVATAR
        )

        await db.commit()
        await db.refresh(account)
        await db.refresh(profile)

        logger.info(f"Agent created by admin: {account.id} ({profile.slug})")
        return account, profile
