"""
Listing Pydantic schemas for API requests and responses.
"""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, Field

from src.schemas.common import PageMeta


class ListingData(BaseModel):
    """
    Schema for listing create and update input.

    Every field is optional here; create enforces its required fields in the
    service so that a missing field reports a single 400 message. Structured
    fields accept either decoded values or JSON strings.
    """

    title: Optional[str] = Field(None, max_length=255)
    headline: Optional[str] = Field(None, max_length=500)
    description: Optional[str] = None
    developer: Optional[str] = None
    community: Optional[str] = None
    location: Optional[str] = None
    emirate: Optional[str] = None
    country: Optional[str] = None
    property_category: Optional[str] = None
    starting_price: Optional[Any] = Field(None, description="Starting price")
    currency: Optional[str] = None
    handover: Optional[str] = None
    featured: Optional[Any] = None
    is_new: Optional[Any] = None

    property_types: Optional[Any] = None
    amenities: Optional[Any] = None
    units: Optional[Any] = None
    nearby_locations: Optional[Any] = None
    payment_plan: Optional[Any] = None
    agents: Optional[Any] = Field(None, description="Agent profile ids")

    hero_image: Optional[str] = Field(None, description="Hero image URL")
    gallery: Optional[Any] = Field(None, description="JSON list of gallery URLs to keep")
    brochures: Optional[Any] = Field(
        None, description="JSON list of {title, language, file_url, is_file} entries"
    )


class ListingFilters(BaseModel):
    """Query filters for the public listing search."""

    category: Optional[str] = None
    property_type: Optional[str] = None
    country: Optional[str] = Field(None, description="Matches country or emirate")
    featured: Optional[bool] = None
    is_new: Optional[bool] = None
    status: Optional[str] = None
    created_by: Optional[str] = None
    min_price: Optional[float] = None
    max_price: Optional[float] = None
    search: Optional[str] = Field(None, description="Free text over title, community and location")


class ListingAgentsUpdate(BaseModel):
    """Schema for replacing the agents attached to a listing."""

    agents: Optional[Any] = Field(None, description="List (or JSON list) of agent profile ids")


class ListingStatusUpdate(BaseModel):
    """Schema for a listing status change."""

    status: Optional[str] = Field(None, description="active or inactive")


class Brochure(BaseModel):
    """One brochure entry."""

    title: Optional[str] = None
    language: Optional[str] = None
    file_url: str
    uploaded_at: Optional[str] = None


class AgentSummary(BaseModel):
    """Agent fields embedded in listing responses."""

    id: str
    name: str
    avatar_url: str
    slug: str
    job_title: str
    phone: Optional[str] = None
    email: Optional[str] = None

    class Config:
        from_attributes = True


class ListingResponse(BaseModel):
    """Schema for listing response."""

    id: str = Field(..., description="Unique listing identifier")
    slug: str
    is_new: bool
    status: str

    title: str
    headline: Optional[str] = None
    description: str
    developer: Optional[str] = None

    community: Optional[str] = None
    location: Optional[str] = None
    emirate: Optional[str] = None
    country: str

    property_category: str
    property_types: list[Any] = []
    starting_price: float
    currency: str
    handover: Optional[str] = None
    featured: bool

    hero_image: Optional[str] = None
    gallery: list[str] = []
    brochures: list[Brochure] = []

    amenities: list[Any] = []
    nearby_locations: list[Any] = []
    units: list[Any] = []
    payment_plan: list[Any] = []

    agent_ids: list[str] = []
    agents: list[AgentSummary] = []
    created_by: str
    creator_name: Optional[str] = None

    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class ListingListResponse(PageMeta):
    """Schema for paginated listing list response."""

    items: list[ListingResponse] = Field(..., description="List of listings")


class ListingStatusResponse(BaseModel):
    """Schema for listing status change response."""

    message: str
    listing: ListingResponse
