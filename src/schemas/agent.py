"""
Agent profile Pydantic schemas for API requests and responses.
"""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, Field

from src.schemas.account import AccountResponse
from src.schemas.common import PageMeta


class PortfolioItem(BaseModel):
    """One portfolio entry."""

    url: str
    kind: str = Field("image", description="image or video")


class AgentProfileUpdate(BaseModel):
    """Schema for a partial agent profile update."""

    name: Optional[str] = Field(None, max_length=255)
    email: Optional[str] = Field(None, max_length=255)
    phone: Optional[str] = Field(None, max_length=50)
    job_title: Optional[str] = Field(None, max_length=100)
    location: Optional[str] = None
    bio: Optional[str] = None
    experience: Optional[str] = None
    avatar_url: Optional[str] = Field(None, description="Avatar URL")
    languages: Optional[Any] = None
    communities: Optional[Any] = None
    specialties: Optional[Any] = None
    portfolio: Optional[Any] = Field(
        None, description="JSON list of {url, kind} items or bare URLs"
    )
    status: Optional[str] = Field(None, description="Only honoured on the admin route")


class AgentCreate(BaseModel):
    """Schema for an admin creating an agent account."""

    name: Optional[str] = Field(None, max_length=255)
    email: Optional[str] = Field(None, max_length=255)
    phone: Optional[str] = Field(None, max_length=50)
    password: Optional[str] = None
    job_title: Optional[str] = Field(None, max_length=100)


class AgentStatusUpdate(BaseModel):
    """Schema for an agent status change; a missing status toggles."""

    status: Optional[str] = Field(None, description="active, inactive or suspended")


class AgentProfileResponse(BaseModel):
    """Schema for agent profile response."""

    id: str = Field(..., description="Unique profile identifier")
    account_id: Optional[str] = Field(None, description="Owning account identifier")
    slug: str
    name: str
    email: str
    phone: str
    avatar_url: str
    job_title: str
    location: str
    bio: str
    experience: str
    languages: list[Any] = []
    communities: list[Any] = []
    specialties: list[Any] = []
    portfolio: list[PortfolioItem] = []
    status: str
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class AgentListItem(BaseModel):
    """Agent account merged with its profile for the public directory."""

    id: str = Field(..., description="Profile id, or account id when no profile exists yet")
    account_id: str
    name: str
    email: str
    phone: str
    avatar_url: str
    job_title: str
    slug: str
    status: str


class AgentListResponse(PageMeta):
    """Schema for paginated agent list response."""

    items: list[AgentListItem] = Field(..., description="List of agents")


class AgentStatusResponse(BaseModel):
    """Schema for agent status change response."""

    id: str
    slug: str
    status: str
    message: str


class AgentCreatedResponse(BaseModel):
    """Schema for the admin create-agent response."""

    message: str
    account: AccountResponse
    agent: AgentProfileResponse
