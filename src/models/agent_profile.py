"""
Agent profile ORM model.

Professional record of an agent. Linked to its account by id only; the
account stays the source of truth for name, email, phone and picture, which
are mirrored here.
"""

import enum
import uuid
from datetime import datetime

from sqlalchemy import JSON, Column, DateTime, String, Text

from src.db.base import Base
from src.utils.constants import config


class AgentStatus(str, enum.Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    SUSPENDED = "suspended"


class AgentProfile(Base):
    """
    Agent profile model.

    Attributes:
        id: Unique identifier (UUID)
        account_id: Owning account id, one profile per account
        slug: Unique URL identifier derived from the name
        avatar_url: Media reference mirrored from the account picture
        portfolio: Ordered list of {url, kind} entries, kind image or video
        status: active, inactive or suspended
    """

    __tablename__ = "agent_profiles"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    account_id = Column(String, unique=True, index=True, nullable=False)
    slug = Column(String(255), unique=True, index=True, nullable=False)

    name = Column(String(255), nullable=False, index=True)
    email = Column(String(255), unique=True, index=True, nullable=False)
    phone = Column(String(50), nullable=False, index=True)
    avatar_url = Column(String(1000), nullable=False, default=config.DEFAULT_AVATAR)

    job_title = Column(String(100), nullable=False, default=config.DEFAULT_AGENT_TITLE)
    location = Column(String(255), nullable=False, default="", index=True)
    bio = Column(Text, nullable=False, default="")
    experience = Column(String(255), nullable=False, default="")

    languages = Column(JSON, nullable=False, default=list)
    communities = Column(JSON, nullable=False, default=list)
    specialties = Column(JSON, nullable=False, default=list)
    portfolio = Column(JSON, nullable=False, default=list)

    status = Column(String(20), nullable=False, default=AgentStatus.ACTIVE.value, index=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    def __repr__(self) -> str:
        return f"<AgentProfile(id={self.id}, slug={self.slug}, status={self.status})>"
