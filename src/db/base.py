"""
Database engine and declarative base.
"""

from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import DeclarativeBase

from src.core.config import settings

# Create async engine (each worker process builds its own pool on import)
engine = create_async_engine(
    settings.DATABASE_URL,
    echo=settings.DEBUG,
    pool_pre_ping=True,
)


class Base(DeclarativeBase):
    """Base class for all ORM models"""
    pass
