"""
Shared response schemas.
"""

import math

from pydantic import BaseModel, Field


class MessageResponse(BaseModel):
    """Schema for plain acknowledgement responses."""

    message: str = Field(..., description="Human readable result")


class PageMeta(BaseModel):
    """Pagination fields carried by every list response."""

    page: int = Field(..., description="Current page number")
    pages: int = Field(..., description="Total number of pages")
    total: int = Field(..., description="Total number of matching records")


def page_count(total: int, limit: int) -> int:
    """Number of pages needed to show total records, limit per page."""
    if limit <= 0:
        return 0
    return math.ceil(total / limit)
