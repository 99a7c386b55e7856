"""
Account service for business logic and database operations.
"""

import logging
import uuid
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.authorization import check_account_access
from src.core.security import get_password_hash, verify_password
from src.models.account import Account, AccountStatus, Role
from src.models.agent_profile import AgentProfile
from src.models.listing import Listing
from src.schemas.account import AccountProfileResponse, AccountUpdate, DashboardStats, SignupData
from src.services.account_lookup import (
    ensure_contact_available,
    find_by_login,
    require_account,
)
from src.services.agent_service import AgentService
from src.services.media_reconciler import Arity, MediaReconciler, Shape, collect_urls
from src.services.media_store import Attachment
from src.utils.constants import config
from src.utils.errors import AuthError, ValidationError
from src.utils.json_fields import parse_json_list

logger = logging.getLogger(__name__)

ROLES = [role.value for role in Role]
ACCOUNT_STATUSES = [status.value for status in AccountStatus]


def build_profile_response(
    account: Account, profile: Optional[AgentProfile] = None
) -> AccountProfileResponse:
    """Account fields, merged with the agent profile when there is one."""
    response = AccountProfileResponse.model_validate(account)
    if profile is None:
        return response

    return response.model_copy(
        update={
            "agent_id": profile.id,
            "slug": profile.slug,
            "job_title": profile.job_title,
            "location": profile.location,
            "bio": profile.bio,
            "experience": profile.experience,
            "languages": list(profile.languages or []),
            "communities": list(profile.communities or []),
            "specialties": list(profile.specialties or []),
            "portfolio": list(profile.portfolio or []),
            "agent_status": profile.status,
        }
    )


class AccountService:
    """Service class for account-related operations."""

    @staticmethod
    async def signup(
        db: AsyncSession,
        reconciler: MediaReconciler,
        data: SignupData,
        attachment: Optional[Attachment] = None,
    ) -> Account:
        """
        Register a new account.

        Only the agent role may be requested; anything else becomes a regular
        user. Agent accounts get their profile immediately.

        Args:
            db: Database session
            reconciler: Media reconciler bound to the media host
            data: Signup data
            attachment: Optional profile picture file

        Returns:
            Created account instance
        """
        email = data.email.strip().lower()
        await ensure_contact_available(db, email, data.phone)

        plan = reconciler.prepare(
            "profile_picture",
            None,
            data.profile_picture,
            [attachment] if attachment else [],
            config.PROFILE_IMAGE_FOLDER,
            arity=Arity.SINGLE,
        )
        picture = await reconciler.stage(plan)

        role = Role.AGENT.value if data.role == Role.AGENT.value else Role.USER.value

        account = Account(
            id=str(uuid.uuid4()),
            name=data.name,
            email=email,
            phone=data.phone,
            password_hash=get_password_hash(data.password),
            profile_picture=picture.value or config.DEFAULT_AVATAR,
            role=role,
            status=AccountStatus.ACTIVE.value,
        )
        db.add(account)

        if role == Role.AGENT.value:
            await AgentService.build_profile(db, account)

        await db.commit()
        await db.refresh(account)

        logger.info(f"Account registered: {account.id} ({account.role})")
        return account

    @staticmethod
    async def authenticate(db: AsyncSession, login_id: str, password: str) -> Account:
        """
        Check credentials for an email or phone login.

        Raises:
            AuthError: On unknown login id or wrong password
            ForbiddenError: If the account is blocked or the agent inactive or suspended
        """
        account = await find_by_login(db, login_id)
        if account is None or not verify_password(password, account.password_hash):
            logger.warning(f"Failed login attempt for {login_id}")
            raise AuthError("Invalid email/phone or password")

        await check_account_access(db, account)

        logger.info(f"Account logged in: {account.id}")
        return account

    @staticmethod
    async def get_profile(db: AsyncSession, account: Account) -> AccountProfileResponse:
        """Own profile; agents get their profile merged in, created if missing."""
        if account.role != Role.AGENT.value:
            return build_profile_response(account)

        profile = await AgentService.ensure_profile(db, account)
        return build_profile_response(account, profile)

    @staticmethod
    async def update_profile(
        db: AsyncSession,
        reconciler: MediaReconciler,
        account: Account,
        data: AccountUpdate,
        attachment: Optional[Attachment] = None,
    ) -> Account:
        """
        Partially update the caller's own account.

        For agents the identity change and the professional fields are
        forwarded to the agent profile.

        Args:
            db: Database session
            reconciler: Media reconciler bound to the media host
            account: Calling account
            data: Supplied fields; unset fields are left untouched
            attachment: Optional new profile picture file

        Returns:
            Updated account instance
        """
        is_agent = account.role == Role.AGENT.value
        profile = await AgentService.get_by_account(db, account.id) if is_agent else None
        email = data.email.strip().lower() if data.email else None

        # Parse everything before any remote call
        picture_plan = reconciler.prepare(
            "profile_picture",
            account.profile_picture,
            data.profile_picture,
            [attachment] if attachment else [],
            config.PROFILE_IMAGE_FOLDER,
            arity=Arity.SINGLE,
        )
        portfolio_plan = None
        languages = communities = specialties = None
        if is_agent:
            languages = parse_json_list(data.languages, "languages")
            communities = parse_json_list(data.communities, "communities")
            specialties = parse_json_list(data.specialties, "specialties")
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

        picture = await reconciler.stage(picture_plan)
        portfolio = await reconciler.stage(portfolio_plan) if portfolio_plan else None

        if data.name:
            account.name = data.name
        if email:
            account.email = email
        if data.phone:
            account.phone = data.phone
        if data.password:
            account.password_hash = get_password_hash(data.password)

        removed = list(picture.removed)
        picture_changed = picture.value != account.profile_picture
        account.profile_picture = picture.value

        if is_agent:
            if profile is None:
                profile = await AgentService.build_profile(db, account)
                logger.info(f"Creating agent profile {profile.slug} for account {account.id}")

            if data.name:
                profile.name = account.name
            if email:
                profile.email = account.email
            if data.phone:
                profile.phone = account.phone
            if picture_changed:
                if profile.avatar_url not in removed and profile.avatar_url != picture.value:
                    removed.append(profile.avatar_url)
                profile.avatar_url = account.profile_picture
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
            removed.extend(portfolio.removed)

        await db.commit()
        await db.refresh(account)

        kept = [account.profile_picture]
        if profile is not None:
            kept += [profile.avatar_url] + collect_urls(profile.portfolio)
        await reconciler.release(removed, exclude=kept)

        logger.info(f"Account profile updated: {account.id}")
        return account

    @staticmethod
    async def delete_account(
        db: AsyncSession, reconciler: MediaReconciler, account_id: str
    ) -> None:
        """
        Delete an account with everything it owns.

        Agent profiles, listings created by the account and the account row
        are removed first; their media is released afterwards, one asset at a
        time, in the order profile, listings, profile picture.
        Rows are committed before any media delete so a failed commit never
        leaves stored records pointing at deleted assets.
        """
        account = await require_account(db, account_id)
        media = []

        profile_stmt = select(AgentProfile).where(AgentProfile.account_id == account.id)
        profiles = list((await db.execute(profile_stmt)).scalars().all())
        profile_ids = {profile.id for profile in profiles}
        for profile in profiles:
            media.append(profile.avatar_url)
            media.extend(collect_urls(profile.portfolio))
            await db.delete(profile)

        listing_stmt = select(Listing).where(Listing.created_by == account.id)
        listings = list((await db.execute(listing_stmt)).scalars().all())
        for listing in listings:
            media.extend(collect_urls(listing.hero_image))
            media.extend(collect_urls(listing.gallery))
            media.extend(collect_urls(listing.brochures))
            await db.delete(listing)

        if profile_ids:
            # Detach the removed profiles from listings owned by other accounts
            others_stmt = select(Listing).where(Listing.created_by != account.id)
            for listing in (await db.execute(others_stmt)).scalars().all():
                remaining = [i for i in (listing.agent_ids or []) if i not in profile_ids]
                if len(remaining) != len(listing.agent_ids or []):
                    listing.agent_ids = remaining

        await db.flush()
        media.append(account.profile_picture)
        await db.delete(account)
        await db.commit()

        attempts = await reconciler.release(media)
        logger.info(
            f"Account {account_id} deleted with {len(profiles)} profile(s) and "
            f"{len(listings)} listing(s); {attempts} media delete(s) attempted"
        )

    @staticmethod
    async def list_accounts(
        db: AsyncSession,
        caller: Account,
        role: Optional[str] = None,
        skip: int = 0,
        limit: int = 10,
    ) -> tuple[list[Account], int]:
        """
        Get paginated accounts other than the caller.

        Args:
            db: Database session
            caller: Calling admin, excluded from the results
            role: Optional role filter
            skip: Number of records to skip
            limit: Maximum number of records to return

        Returns:
            Tuple of (accounts list, total count)
        """
        conditions = [Account.id != caller.id]
        if role:
            conditions.append(Account.role == role)

        count_stmt = select(func.count()).select_from(Account).where(*conditions)
        total = (await db.execute(count_stmt)).scalar()

        stmt = (
            select(Account)
            .where(*conditions)
            .order_by(Account.created_at.desc())
            .offset(skip)
            .limit(limit)
        )
        accounts = (await db.execute(stmt)).scalars().all()
        return list(accounts), total

    @staticmethod
    async def update_status(
        db: AsyncSession, account_id: str, status: Optional[str] = None
    ) -> Account:
        """Set active or blocked; a missing value toggles."""
        if status and status not in ACCOUNT_STATUSES:
            raise ValidationError(
                f"Invalid status. Must be one of: {', '.join(ACCOUNT_STATUSES)}"
            )

        account = await require_account(db, account_id)
        if not status:
            status = (
                AccountStatus.BLOCKED.value
                if account.status == AccountStatus.ACTIVE.value
                else AccountStatus.ACTIVE.value
            )

        account.status = status
        await db.commit()
        await db.refresh(account)

        logger.info(f"Account {account.id} status set to {status}")
        return account

    @staticmethod
    async def update_role(db: AsyncSession, account_id: str, role: str) -> Account:
        """Change an account's role."""
        if role not in ROLES:
            raise ValidationError(f"Invalid role. Must be one of: {', '.join(ROLES)}")

        account = await require_account(db, account_id)
        account.role = role
        await db.commit()
        await db.refresh(account)

        logger.info(f"Account {account.id} role set to {role}")
        return account

    @staticmethod
    async def dashboard_stats(db: AsyncSession, caller: Account) -> DashboardStats:
        """
        Dashboard counters.

        Admins see every listing and the agent and user counts; agents see
        their own listings and the number of agents.
        """

        async def count(model, *conditions) -> int:
            stmt = select(func.count()).select_from(model).where(*conditions)
            return (await db.execute(stmt)).scalar() or 0

        agents = await count(Account, Account.role == Role.AGENT.value)

        if caller.role == Role.ADMIN.value:
            listings = await count(Listing)
            users = await count(Account, Account.role == Role.USER.value)
        else:
            listings = await count(Listing, Listing.created_by == caller.id)
            users = 0

        return DashboardStats(listings=listings, agents=agents, users=users)
