"""
Listing service for business logic and database operations.
"""

import logging
import uuid
from typing import Any, Optional

from sqlalchemy import String, cast, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.models.account import Account
from src.models.agent_profile import AgentProfile
from src.models.listing import Listing, ListingStatus
from src.schemas.listing import AgentSummary, ListingData, ListingFilters, ListingResponse
from src.services.media_reconciler import (
    Arity,
    MediaPlan,
    MediaReconciler,
    ReconcileResult,
    Shape,
    collect_urls,
)
from src.services.media_store import Attachment
from src.utils.constants import config
from src.utils.errors import NotFoundError, ValidationError
from src.utils.json_fields import parse_form_bool, parse_form_number, parse_json_list
from src.utils.slug import generate_unique_slug

logger = logging.getLogger(__name__)

TEXT_FIELDS = (
    "title",
    "headline",
    "description",
    "developer",
    "community",
    "location",
    "emirate",
    "country",
    "property_category",
    "currency",
    "handover",
)
LIST_FIELDS = ("property_types", "amenities", "units", "nearby_locations", "payment_plan")
REQUIRED_FIELDS = ("title", "description", "property_category", "country")
MEDIA_FIELDS = ("hero_image", "gallery", "brochures")
LISTING_STATUSES = [status.value for status in ListingStatus]


def listing_media(listing: Listing) -> list[str]:
    """Every media URL held by a listing, hero first."""
    return (
        collect_urls(listing.hero_image)
        + collect_urls(listing.gallery)
        + collect_urls(listing.brochures)
    )


class ListingService:
    """Service class for listing operations."""

    @staticmethod
    async def get_listing(db: AsyncSession, listing_id: str) -> Listing:
        """Get listing by ID or raise NotFoundError."""
        stmt = select(Listing).where(Listing.id == listing_id)
        result = await db.execute(stmt)
        listing = result.scalar_one_or_none()
        if listing is None:
            raise NotFoundError("Listing not found")
        return listing

    @staticmethod
    async def _agent_ids(db: AsyncSession, value: Any) -> Optional[list[str]]:
        """
        Parse and check a list of agent profile ids.

        Returns:
            De-duplicated ids in their given order, or None when not supplied

        Raises:
            ValidationError: If an id does not belong to an agent profile
        """
        parsed = parse_json_list(value, "agents")
        if parsed is None:
            return None

        ids = list(dict.fromkeys(str(item) for item in parsed if item))
        if not ids:
            return []

        stmt = select(AgentProfile.id).where(AgentProfile.id.in_(ids))
        found = set((await db.execute(stmt)).scalars().all())
        missing = [agent_id for agent_id in ids if agent_id not in found]
        if missing:
            raise ValidationError(f"Unknown agent id(s): {', '.join(missing)}")
        return ids

    @staticmethod
    def _media_plans(
        reconciler: MediaReconciler,
        listing: Optional[Listing],
        data: ListingData,
        hero_files: Optional[list[Attachment]],
        gallery_files: Optional[list[Attachment]],
        brochure_files: Optional[list[Attachment]],
    ) -> dict[str, MediaPlan]:
        return {
            "hero_image": reconciler.prepare(
                "hero_image",
                listing.hero_image if listing else None,
                data.hero_image,
                hero_files,
                config.LISTING_IMAGE_FOLDER,
                arity=Arity.SINGLE,
            ),
            "gallery": reconciler.prepare(
                "gallery",
                listing.gallery if listing else [],
                data.gallery,
                gallery_files,
                config.LISTING_IMAGE_FOLDER,
                arity=Arity.LIST,
                shape=Shape.URL,
            ),
            "brochures": reconciler.prepare(
                "brochures",
                listing.brochures if listing else [],
                data.brochures,
                brochure_files,
                config.BROCHURE_FOLDER,
                arity=Arity.LIST,
                shape=Shape.BROCHURE,
            ),
        }

    @staticmethod
    async def _stage_all(
        reconciler: MediaReconciler, plans: dict[str, MediaPlan]
    ) -> dict[str, ReconcileResult]:
        results = {}
        for name, plan in plans.items():
            results[name] = await reconciler.stage(plan)
        return results

    @staticmethod
    async def create(
        db: AsyncSession,
        reconciler: MediaReconciler,
        caller: Account,
        data: ListingData,
        hero_files: Optional[list[Attachment]] = None,
        gallery_files: Optional[list[Attachment]] = None,
        brochure_files: Optional[list[Attachment]] = None,
    ) -> Listing:
        """
        Create a listing.

        Args:
            db: Database session
            reconciler: Media reconciler bound to the media host
            caller: Creating account
            data: Listing fields
            hero_files: At most one hero image file
            gallery_files: Gallery image files, appended after kept URLs
            brochure_files: Brochure files, matched to placeholder entries in order

        Returns:
            Created listing instance
        """
        price = parse_form_number(data.starting_price, "starting_price")
        if price is None or any(not getattr(data, name) for name in REQUIRED_FIELDS):
            raise ValidationError("Please provide all required fields")

        lists = {name: parse_json_list(getattr(data, name), name) or [] for name in LIST_FIELDS}
        agent_ids = await ListingService._agent_ids(db, data.agents) or []
        plans = ListingService._media_plans(
            reconciler, None, data, hero_files, gallery_files, brochure_files
        )

        media = await ListingService._stage_all(reconciler, plans)
        slug = await generate_unique_slug(db, Listing, data.title, fallback="listing")

        listing = Listing(
            id=str(uuid.uuid4()),
            slug=slug,
            is_new=parse_form_bool(data.is_new) or False,
            status=ListingStatus.ACTIVE.value,
            title=data.title,
            headline=data.headline,
            description=data.description,
            developer=data.developer,
            community=data.community,
            location=data.location,
            emirate=data.emirate,
            country=data.country,
            property_category=data.property_category,
            starting_price=price,
            currency=data.currency or config.DEFAULT_CURRENCY,
            handover=data.handover,
            featured=parse_form_bool(data.featured) or False,
            hero_image=media["hero_image"].value,
            gallery=list(media["gallery"].value),
            brochures=list(media["brochures"].value),
            agent_ids=agent_ids,
            created_by=caller.id,
            **lists,
        )
        db.add(listing)
        await db.commit()
        await db.refresh(listing)

        logger.info(f"Listing created: {listing.slug} by {caller.id}")
        return listing

    @staticmethod
    async def list_listings(
        db: AsyncSession, filters: ListingFilters, skip: int = 0, limit: int = 10
    ) -> tuple[list[Listing], int]:
        """
        Get a filtered, paginated list of listings, newest first.

        Returns:
            Tuple of (listings list, total count)
        """
        conditions = []
        if filters.category:
            conditions.append(Listing.property_category == filters.category)
        if filters.property_type:
            # property_types is a JSON list; match the quoted element in its text form
            conditions.append(
                cast(Listing.property_types, String).like(f'%"{filters.property_type}"%')
            )
        if filters.country:
            conditions.append(
                or_(Listing.country == filters.country, Listing.emirate == filters.country)
            )
        if filters.featured is not None:
            conditions.append(Listing.featured == filters.featured)
        if filters.is_new is not None:
            conditions.append(Listing.is_new == filters.is_new)
        if filters.status:
            conditions.append(Listing.status == filters.status)
        if filters.created_by:
            conditions.append(Listing.created_by == filters.created_by)
        if filters.min_price is not None:
            conditions.append(Listing.starting_price >= filters.min_price)
        if filters.max_price is not None:
            conditions.append(Listing.starting_price <= filters.max_price)
        if filters.search:
            term = f"%{filters.search}%"
            conditions.append(
                or_(
                    Listing.title.ilike(term),
                    Listing.community.ilike(term),
                    Listing.location.ilike(term),
                )
            )

        count_stmt = select(func.count()).select_from(Listing).where(*conditions)
        total = (await db.execute(count_stmt)).scalar()

        stmt = (
            select(Listing)
            .where(*conditions)
            .order_by(Listing.created_at.desc())
            .offset(skip)
            .limit(limit)
        )
        listings = (await db.execute(stmt)).scalars().all()
        return list(listings), total

    @staticmethod
    async def to_responses(
        db: AsyncSession, listings: list[Listing], with_contact: bool = False
    ) -> list[ListingResponse]:
        """Build listing responses with their agents populated."""
        agent_ids = {agent_id for listing in listings for agent_id in (listing.agent_ids or [])}
        profiles = {}
        if agent_ids:
            stmt = select(AgentProfile).where(AgentProfile.id.in_(agent_ids))
            for profile in (await db.execute(stmt)).scalars().all():
                profiles[profile.id] = profile

        responses = []
        for listing in listings:
            agents = [
                AgentSummary(
                    id=profile.id,
                    name=profile.name,
                    avatar_url=profile.avatar_url,
                    slug=profile.slug,
                    job_title=profile.job_title,
                    phone=profile.phone if with_contact else None,
                    email=profile.email if with_contact else None,
                )
                for profile in (profiles.get(i) for i in (listing.agent_ids or []))
                if profile is not None
            ]
            response = ListingResponse.model_validate(listing)
            responses.append(response.model_copy(update={"agents": agents}))
        return responses

    @staticmethod
    async def get_by_slug(db: AsyncSession, slug: str) -> ListingResponse:
        """Public listing detail with agents and creator name."""
        stmt = select(Listing).where(Listing.slug == slug)
        result = await db.execute(stmt)
        listing = result.scalar_one_or_none()
        if listing is None:
            raise NotFoundError("Listing not found")

        creator_stmt = select(Account.name).where(Account.id == listing.created_by)
        creator_name = (await db.execute(creator_stmt)).scalar_one_or_none()

        [response] = await ListingService.to_responses(db, [listing], with_contact=True)
        return response.model_copy(update={"creator_name": creator_name})

    @staticmethod
    async def update(
        db: AsyncSession,
        reconciler: MediaReconciler,
        listing_id: str,
        data: ListingData,
        hero_files: Optional[list[Attachment]] = None,
        gallery_files: Optional[list[Attachment]] = None,
        brochure_files: Optional[list[Attachment]] = None,
    ) -> Listing:
        """
        Partially update a listing.

        Supplied scalar fields overwrite, unset ones are left alone. Media
        fields are reconciled; assets that dropped out are deleted once the
        listing is saved.
        """
        listing = await ListingService.get_listing(db, listing_id)

        # Parse everything before any remote call
        price = parse_form_number(data.starting_price, "starting_price")
        featured = parse_form_bool(data.featured)
        is_new = parse_form_bool(data.is_new)
        lists = {name: parse_json_list(getattr(data, name), name) for name in LIST_FIELDS}
        agent_ids = await ListingService._agent_ids(db, data.agents)
        plans = ListingService._media_plans(
            reconciler, listing, data, hero_files, gallery_files, brochure_files
        )

        media = await ListingService._stage_all(reconciler, plans)

        for name in TEXT_FIELDS:
            value = getattr(data, name)
            if value:
                setattr(listing, name, value)
        if price is not None:
            listing.starting_price = price
        if featured is not None:
            listing.featured = featured
        if is_new is not None:
            listing.is_new = is_new
        for name, value in lists.items():
            if value is not None:
                setattr(listing, name, value)
        if agent_ids is not None:
            listing.agent_ids = agent_ids

        removed = []
        for name in MEDIA_FIELDS:
            result = media[name]
            value = result.value
            setattr(listing, name, list(value) if isinstance(value, list) else value)
            removed.extend(result.removed)

        await db.commit()
        await db.refresh(listing)

        await reconciler.release(removed, exclude=listing_media(listing))

        logger.info(f"Listing updated: {listing.slug}")
        return listing

    @staticmethod
    async def assign_agents(db: AsyncSession, listing_id: str, agents: Any) -> Listing:
        """Replace the agent profiles attached to a listing."""
        listing = await ListingService.get_listing(db, listing_id)
        listing.agent_ids = await ListingService._agent_ids(db, agents) or []

        await db.commit()
        await db.refresh(listing)

        logger.info(f"Listing {listing.slug} agents set to {listing.agent_ids}")
        return listing

    @staticmethod
    async def update_status(db: AsyncSession, listing_id: str, status: Optional[str]) -> Listing:
        """Set a listing active or inactive."""
        listing = await ListingService.get_listing(db, listing_id)
        if status not in LISTING_STATUSES:
            raise ValidationError("Invalid status. Use active or inactive")

        listing.status = status
        await db.commit()
        await db.refresh(listing)

        logger.info(f"Listing {listing.slug} status set to {status}")
        return listing

    @staticmethod
    async def delete(db: AsyncSession, reconciler: MediaReconciler, listing_id: str) -> None:
        """Delete a listing, then release its hero, gallery and brochure media."""
        listing = await ListingService.get_listing(db, listing_id)
        media = listing_media(listing)

        await db.delete(listing)
        await db.commit()

        attempts = await reconciler.release(media)
        logger.info(f"Listing {listing_id} deleted; {attempts} media delete(s) attempted")
