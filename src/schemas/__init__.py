"""
Pydantic schemas for API requests and responses.
"""

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
from src.schemas.agent import (
    AgentCreate,
    AgentCreatedResponse,
    AgentListItem,
    AgentListResponse,
    AgentProfileResponse,
    AgentProfileUpdate,
    AgentStatusResponse,
    AgentStatusUpdate,
    PortfolioItem,
)
from src.schemas.common import MessageResponse, PageMeta
from src.schemas.listing import (
    AgentSummary,
    Brochure,
    ListingAgentsUpdate,
    ListingData,
    ListingFilters,
    ListingListResponse,
    ListingResponse,
    ListingStatusResponse,
    ListingStatusUpdate,
)

__all__ = [
    "AccountListResponse",
    "AccountProfileResponse",
    "AccountResponse",
    "AccountRoleUpdate",
    "AccountStatusUpdate",
    "AccountUpdate",
    "AgentCreate",
    "AgentCreatedResponse",
    "AgentListItem",
    "AgentListResponse",
    "AgentProfileResponse",
    "AgentProfileUpdate",
    "AgentStatusResponse",
    "AgentStatusUpdate",
    "AgentSummary",
    "Brochure",
    "DashboardStats",
    "ListingAgentsUpdate",
    "ListingData",
    "ListingFilters",
    "ListingListResponse",
    "ListingResponse",
    "ListingStatusResponse",
    "ListingStatusUpdate",
    "LoginRequest",
    "MessageResponse",
    "PageMeta",
    "PortfolioItem",
    "SignupData",
]
