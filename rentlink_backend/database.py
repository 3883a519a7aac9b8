"""
Database configuration for the RentLink marketplace backend.

Async SQLAlchemy engine, session factory and declarative base shared by all
modules.
"""

import logging
from collections.abc import AsyncIterator
from datetime import datetime
from typing import Annotated

from fastapi import Depends
from sqlalchemy import DateTime
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import Mapped, declarative_base, mapped_column
from sqlalchemy.sql import func

from .config import settings

logger = logging.getLogger(__name__)


def engine_connect_args(database_url: str) -> dict:
    """asyncmy SSL options for MySQL URLs, nothing for other drivers."""
    if not database_url.startswith("mysql+asyncmy"):
        return {}
    return {
        "ssl": {
            "ssl_check_hostname": settings.database_ssl_check_hostname,
            "ssl_verify_cert": settings.database_ssl_verify_cert,
            "ssl_verify_identity": settings.database_ssl_verify_identity,
        },
    }


engine = create_async_engine(
    settings.database_url,
    echo=settings.database_echo,
    future=True,
    connect_args=engine_connect_args(settings.database_url),
    pool_pre_ping=True,
    pool_recycle=3600,
)

# Create async session factory
AsyncSessionLocal = async_sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False
)

# Base class
Base = declarative_base()


class TimestampMixin:
    """Mixin to add created and updated timestamps to models."""

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )


async def get_db() -> AsyncIterator[AsyncSession]:
    """Dependency to get database session.

    Uncommitted work is rolled back when the request fails, so a workflow
    that raises halfway leaves no partial writes behind.
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


# Type alias for dependency injection
DBSession = Annotated[AsyncSession, Depends(get_db)]


def import_all_models() -> None:
    """Import every model module so Base.metadata knows all tables."""
    from .modules.audit import models as audit_models  # noqa: F401
    from .modules.auth import models as auth_models  # noqa: F401
    from .modules.deposits import models as deposit_models  # noqa: F401
    from .modules.leases import models as lease_models  # noqa: F401
    from .modules.listings import models as listing_models  # noqa: F401
    from .modules.messaging import models as messaging_models  # noqa: F401
    from .modules.payments import models as payment_models  # noqa: F401
    from .modules.verification import models as verification_models  # noqa: F401


async def init_db():
    """Initialize database tables."""
    import_all_models()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables created")
