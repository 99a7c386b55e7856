"""
ORM models.
"""

from src.models.account import Account, AccountStatus, Role
from src.models.agent_profile import AgentProfile, AgentStatus
from src.models.listing import Listing, ListingStatus

__all__ = [
    "Account",
    "AccountStatus",
    "AgentProfile",
    "AgentStatus",
    "Listing",
    "ListingStatus",
    "Role",
]
