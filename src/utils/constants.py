"""
Configuration constants for the listings backend.

This module defines the media folders, upload rules, pagination defaults
and status vocabularies shared by the services and endpoints.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Set


@dataclass
class ListingsConfig:
    """Configuration dataclass for domain-level parameters."""

    # Media folders on the remote asset host
    PROFILE_IMAGE_FOLDER: str = "images/profiles"
    LISTING_IMAGE_FOLDER: str = "images/properties"
    BROCHURE_FOLDER: str = "files"

    # Placeholder used when an account has no picture of its own
    DEFAULT_AVATAR: str = "uploads/default-avatar.png"
    DEFAULT_AGENT_TITLE: str = "Agent"
    DEFAULT_BROCHURE_LANGUAGE: str = "en"
    DEFAULT_COUNTRY: str = "UAE"
    DEFAULT_CURRENCY: str = "AED"

    # Allowed Upload File Types (images and brochure PDFs)
    ALLOWED_UPLOAD_EXTENSIONS: List[str] = field(
        default_factory=lambda: [".jpeg", ".jpg", ".png", ".gif", ".webp", ".pdf"]
    )
    ALLOWED_UPLOAD_CONTENT_TYPES: List[str] = field(
        default_factory=lambda: [
            "image/jpeg",
            "image/jpg",
            "image/png",
            "image/gif",
            "image/webp",
            "application/pdf",
        ]
    )
    MAX_UPLOAD_SIZE_MB: int = 10

    # Pagination
    DEFAULT_PAGE_SIZE: int = 10
    MAX_PAGE_SIZE: int = 100

    # Agent profile status transitions (status -> statuses it may move to)
    AGENT_STATUS_TRANSITIONS: Dict[str, Set[str]] = field(
        default_factory=lambda: {
            "active": {"inactive", "suspended"},
            "inactive": {"active"},
            "suspended": {"active"},
        }
    )


def get_config():
    """
    Get the domain config populated with environment values.
    Import settings here to avoid circular imports.
    """
    from src.core.config import settings

    return ListingsConfig(MAX_UPLOAD_SIZE_MB=settings.MAX_UPLOAD_SIZE_MB)


# Global configuration instance
config = get_config()
