"""
Listing ORM model.

Represents a property (project) offered through the site.
"""

import enum
import uuid
from datetime import datetime

from sqlalchemy import JSON, Boolean, Column, DateTime, Float, ForeignKey, String, Text

from src.db.base import Base
from src.utils.constants import config


class ListingStatus(str, enum.Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


class Listing(Base):
    """
    Listing model.

    Attributes:
        id: Unique identifier (UUID)
        slug: Unique URL identifier derived from the title
        hero_image: Single media reference
        gallery: Ordered list of media references
        brochures: Ordered list of {title, language, file_url, uploaded_at}
        agent_ids: Associated agent profile ids
        created_by: Id of the creating account
    """

    __tablename__ = "listings"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    slug = Column(String(255), unique=True, index=True, nullable=False)
    is_new = Column(Boolean, nullable=False, default=False, index=True)
    status = Column(String(20), nullable=False, default=ListingStatus.ACTIVE.value, index=True)

    # Basic info
    title = Column(String(255), nullable=False)
    headline = Column(String(500), nullable=True)
    description = Column(Text, nullable=False)
    developer = Column(String(255), nullable=True)

    # Location
    community = Column(String(255), nullable=True)
    location = Column(String(255), nullable=True)
    emirate = Column(String(255), nullable=True)
    country = Column(String(100), nullable=False, default=config.DEFAULT_COUNTRY, index=True)

    # Classification and pricing
    property_category = Column(String(100), nullable=False, index=True)
    property_types = Column(JSON, nullable=False, default=list)
    starting_price = Column(Float, nullable=False, index=True)
    currency = Column(String(10), nullable=False, default=config.DEFAULT_CURRENCY)
    handover = Column(String(100), nullable=True)
    featured = Column(Boolean, nullable=False, default=False, index=True)

    # Media
    hero_image = Column(String(1000), nullable=True)
    gallery = Column(JSON, nullable=False, default=list)
    brochures = Column(JSON, nullable=False, default=list)

    # Structured details
    amenities = Column(JSON, nullable=False, default=list)
    nearby_locations = Column(JSON, nullable=False, default=list)
    units = Column(JSON, nullable=False, default=list)
    payment_plan = Column(JSON, nullable=False, default=list)

    agent_ids = Column(JSON, nullable=False, default=list)
    created_by = Column(String, ForeignKey("accounts.id"), nullable=False, index=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    def __repr__(self) -> str:
        return f"<Listing(id={self.id}, slug={self.slug}, status={self.status})>"
