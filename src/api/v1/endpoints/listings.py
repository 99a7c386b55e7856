"""
Listing API endpoints.

Public search and detail, agent/admin create and update, admin delete.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.deps import get_reconciler, require_admin, require_agent_or_admin
from src.db.session import get_db
from src.models.account import Account
from src.schemas.common import MessageResponse, page_count
from src.schemas.listing import (
    ListingAgentsUpdate,
    ListingData,
    ListingFilters,
    ListingListResponse,
    ListingResponse,
    ListingStatusResponse,
    ListingStatusUpdate,
)
from src.services.listing_service import ListingService
from src.services.media_reconciler import MediaReconciler
from src.utils.constants import config
from src.utils.uploads import read_attachments

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/listings", tags=["listings"])


def listing_form(
    title: Optional[str] = Form(None),
    headline: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    developer: Optional[str] = Form(None),
    community: Optional[str] = Form(None),
    location: Optional[str] = Form(None),
    emirate: Optional[str] = Form(None),
    country: Optional[str] = Form(None),
    property_category: Optional[str] = Form(None),
    starting_price: Optional[str] = Form(None),
    currency: Optional[str] = Form(None),
    handover: Optional[str] = Form(None),
    featured: Optional[str] = Form(None),
    is_new: Optional[str] = Form(None),
    property_types: Optional[str] = Form(None),
    amenities: Optional[str] = Form(None),
    units: Optional[str] = Form(None),
    nearby_locations: Optional[str] = Form(None),
    payment_plan: Optional[str] = Form(None),
    agents: Optional[str] = Form(None),
    hero_image: Optional[str] = Form(None),
    gallery: Optional[str] = Form(None),
    brochures: Optional[str] = Form(None),
) -> ListingData:
    """Collect the multipart listing fields; structured ones stay JSON strings."""
    return ListingData(
        title=title,
        headline=headline,
        description=description,
        developer=developer,
        community=community,
        location=location,
        emirate=emirate,
        country=country,
        property_category=property_category,
        starting_price=starting_price,
        currency=currency,
        handover=handover,
        featured=featured,
        is_new=is_new,
        property_types=property_types,
        amenities=amenities,
        units=units,
        nearby_locations=nearby_locations,
        payment_plan=payment_plan,
        agents=agents,
        hero_image=hero_image,
        gallery=gallery,
        brochures=brochures,
    )


@router.get(
    "",
    response_model=ListingListResponse,
    status_code=status.HTTP_200_OK,
    summary="Search listings",
    description="Public, filtered and paginated listing search, newest first.",
)
async def list_listings(
    category: Optional[str] = Query(None, description="Property category"),
    property_type: Optional[str] = Query(None, description="Property type"),
    country: Optional[str] = Query(None, description="Country or emirate"),
    featured: Optional[bool] = Query(None),
    is_new: Optional[bool] = Query(None),
    listing_status: Optional[str] = Query(None, alias="status"),
    created_by: Optional[str] = Query(None, description="Creating account id"),
    min_price: Optional[float] = Query(None, ge=0),
    max_price: Optional[float] = Query(None, ge=0),
    search: Optional[str] = Query(None, description="Title, community or location"),
    page: int = Query(1, ge=1, description="Page number (starts at 1)"),
    limit: int = Query(
        config.DEFAULT_PAGE_SIZE, ge=1, le=config.MAX_PAGE_SIZE, description="Items per page"
    ),
    db: AsyncSession = Depends(get_db),
):
    filters = ListingFilters(
        category=category,
        property_type=property_type,
        country=country,
        featured=featured,
        is_new=is_new,
        status=listing_status,
        created_by=created_by,
        min_price=min_price,
        max_price=max_price,
        search=search,
    )
    skip = (page - 1) * limit
    listings, total = await ListingService.list_listings(db, filters, skip=skip, limit=limit)

    logger.info(f"Retrieved {len(listings)} listings (page {page})")

    return ListingListResponse(
        items=await ListingService.to_responses(db, listings),
        page=page,
        pages=page_count(total, limit),
        total=total,
    )


@router.get(
    "/{slug}",
    response_model=ListingResponse,
    status_code=status.HTTP_200_OK,
    summary="Get listing by slug",
)
async def get_listing(slug: str, db: AsyncSession = Depends(get_db)):
    return await ListingService.get_by_slug(db, slug)


@router.post(
    "",
    response_model=ListingResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a listing",
    description="Agents and admins. Multipart: fields plus hero, gallery and brochure files.",
)
async def create_listing(
    data: ListingData = Depends(listing_form),
    hero_image_file: Optional[UploadFile] = File(None),
    gallery_files: Optional[list[UploadFile]] = File(None),
    brochure_files: Optional[list[UploadFile]] = File(None),
    account: Account = Depends(require_agent_or_admin),
    db: AsyncSession = Depends(get_db),
    reconciler: MediaReconciler = Depends(get_reconciler),
):
    hero = await read_attachments([hero_image_file] if hero_image_file else [], "hero_image_file")
    gallery = await read_attachments(gallery_files, "gallery_files")
    brochures = await read_attachments(brochure_files, "brochure_files")

    listing = await ListingService.create(
        db, reconciler, account, data, hero, gallery, brochures
    )
    [response] = await ListingService.to_responses(db, [listing])
    return response


@router.put(
    "/{listing_id}",
    response_model=ListingResponse,
    status_code=status.HTTP_200_OK,
    summary="Update a listing",
)
async def update_listing(
    listing_id: str,
    data: ListingData = Depends(listing_form),
    hero_image_file: Optional[UploadFile] = File(None),
    gallery_files: Optional[list[UploadFile]] = File(None),
    brochure_files: Optional[list[UploadFile]] = File(None),
    account: Account = Depends(require_agent_or_admin),
    db: AsyncSession = Depends(get_db),
    reconciler: MediaReconciler = Depends(get_reconciler),
):
    hero = await read_attachments([hero_image_file] if hero_image_file else [], "hero_image_file")
    gallery = await read_attachments(gallery_files, "gallery_files")
    brochures = await read_attachments(brochure_files, "brochure_files")

    logger.info(f"Account {account.id} updating listing {listing_id}")
    listing = await ListingService.update(
        db, reconciler, listing_id, data, hero, gallery, brochures
    )
    [response] = await ListingService.to_responses(db, [listing])
    return response


@router.put(
    "/{listing_id}/agents",
    response_model=ListingResponse,
    status_code=status.HTTP_200_OK,
    summary="Assign agents to a listing",
)
async def assign_agents(
    listing_id: str,
    data: ListingAgentsUpdate,
    account: Account = Depends(require_agent_or_admin),
    db: AsyncSession = Depends(get_db),
):
    listing = await ListingService.assign_agents(db, listing_id, data.agents)
    [response] = await ListingService.to_responses(db, [listing])
    return response


@router.put(
    "/{listing_id}/status",
    response_model=ListingStatusResponse,
    status_code=status.HTTP_200_OK,
    summary="Activate or deactivate a listing",
)
async def update_listing_status(
    listing_id: str,
    data: ListingStatusUpdate,
    account: Account = Depends(require_agent_or_admin),
    db: AsyncSession = Depends(get_db),
):
    listing = await ListingService.update_status(db, listing_id, data.status)
    [response] = await ListingService.to_responses(db, [listing])
    return ListingStatusResponse(
        message=f"Listing status updated to {listing.status}", listing=response
    )


@router.delete(
    "/{listing_id}",
    response_model=MessageResponse,
    status_code=status.HTTP_200_OK,
    summary="Delete a listing",
    description="Admin only. Removes the listing and its media.",
)
async def delete_listing(
    listing_id: str,
    admin: Account = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
    reconciler: MediaReconciler = Depends(get_reconciler),
):
    await ListingService.delete(db, reconciler, listing_id)
    return MessageResponse(message="Listing removed")
