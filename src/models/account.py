"""
Account ORM model.

Identity record for every person who can sign in: admins, agents and
regular users.
"""

import enum
import uuid
from datetime import datetime

from sqlalchemy import Column, DateTime, String

from src.db.base import Base
from src.utils.constants import config


class Role(str, enum.Enum):
    ADMIN = "admin"
    AGENT = "agent"
    USER = "user"


class AccountStatus(str, enum.Enum):
    ACTIVE = "active"
    BLOCKED = "blocked"


class Account(Base):
    """
    Account model.

    Attributes:
        id: Unique identifier (UUID)
        name: Display name
        email: Unique, lower-cased contact email
        phone: Unique contact phone
        password_hash: bcrypt hash
        profile_picture: Media reference (managed-host URL, external URL or placeholder)
        role: admin, agent or user
        status: active or blocked
    """

    __tablename__ = "accounts"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    phone = Column(String(50), unique=True, index=True, nullable=False)
    password_hash = Column(String(255), nullable=False)
    profile_picture = Column(String(1000), nullable=False, default=config.DEFAULT_AVATAR)
    role = Column(String(20), nullable=False, default=Role.USER.value, index=True)
    status = Column(String(20), nullable=False, default=AccountStatus.ACTIVE.value, index=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    def __repr__(self) -> str:
        return f"<Account(id={self.id}, email={self.email}, role={self.role})>"
