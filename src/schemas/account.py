"""
Account Pydantic schemas for API requests and responses.
"""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, Field

from src.schemas.common import PageMeta


class SignupData(BaseModel):
    """Schema for creating a new account."""

    name: str = Field(..., min_length=1, max_length=255, description="Display name")
    email: str = Field(..., min_length=3, max_length=255, description="Contact email")
    phone: str = Field(..., min_length=3, max_length=50, description="Contact phone")
    password: str = Field(..., min_length=6, description="Password")
    role: Optional[str] = Field(
        None, description="Requested role; only 'agent' is honoured, anything else becomes 'user'"
    )
    profile_picture: Optional[str] = Field(None, description="Profile picture URL")


class LoginRequest(BaseModel):
    """Schema for account login."""

    login_id: str = Field(..., description="Email or phone")
    password: str


class AccountUpdate(BaseModel):
    """
    Schema for a partial profile update.

    Unset fields keep their stored value. The professional fields only apply
    to agent accounts and are forwarded to the agent profile.
    """

    name: Optional[str] = Field(None, max_length=255)
    email: Optional[str] = Field(None, max_length=255)
    phone: Optional[str] = Field(None, max_length=50)
    password: Optional[str] = Field(None, min_length=6)
    profile_picture: Optional[str] = Field(None, description="Profile picture URL")

    location: Optional[str] = None
    bio: Optional[str] = None
    experience: Optional[str] = None
    languages: Optional[Any] = Field(None, description="JSON list or list of languages")
    communities: Optional[Any] = Field(None, description="JSON list or list of communities")
    specialties: Optional[Any] = Field(None, description="JSON list or list of specialties")
    portfolio: Optional[Any] = Field(
        None, description="JSON list of {url, kind} items or bare URLs"
    )


class AccountResponse(BaseModel):
    """Schema for account response."""

    id: str = Field(..., description="Unique account identifier")
    name: str
    email: str
    phone: str
    profile_picture: str
    role: str
    status: str
    created_at: datetime = Field(..., description="Account creation timestamp")

    class Config:
        from_attributes = True


class AccountProfileResponse(AccountResponse):
    """Account merged with its agent profile, for agent accounts."""

    agent_id: Optional[str] = None
    slug: Optional[str] = None
    job_title: Optional[str] = None
    location: Optional[str] = None
    bio: Optional[str] = None
    experience: Optional[str] = None
    languages: Optional[list[Any]] = None
    communities: Optional[list[Any]] = None
    specialties: Optional[list[Any]] = None
    portfolio: Optional[list[dict[str, Any]]] = None
    agent_status: Optional[str] = None


class AccountListResponse(PageMeta):
    """Schema for paginated account list response."""

    items: list[AccountResponse] = Field(..., description="List of accounts")


class AccountStatusUpdate(BaseModel):
    """Schema for an account status change; a missing status toggles."""

    status: Optional[str] = Field(None, description="active or blocked")


class AccountRoleUpdate(BaseModel):
    """Schema for an account role change."""

    role: str = Field(..., description="admin, agent or user")


class DashboardStats(BaseModel):
    """Schema for dashboard counters."""

    listings: int = Field(..., description="Number of listings visible to the caller")
    agents: int = Field(..., description="Number of agent accounts")
    users: int = Field(..., description="Number of regular accounts (admins only)")
