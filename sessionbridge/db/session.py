from typing import Any, Dict, Optional

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from sessionbridge.core.config import settings
from sessionbridge.db import models  # noqa: F401  registers models on the metadata
from sessionbridge.db.base import Base


def get_connect_args(database_url: str) -> Dict[str, Any]:
    """Get database-specific connection arguments"""
    if database_url.startswith("sqlite"):
        # SQLite connections are handed between the event loop and aiosqlite's thread
        return {"check_same_thread": False}
    return {}


def build_engine(database_url: Optional[str] = None, **kwargs: Any) -> AsyncEngine:
    """Create an async engine for the given URL, defaulting to settings."""
    url = database_url or settings.DATABASE_URL
    return create_async_engine(url, connect_args=get_connect_args(url), **kwargs)


def build_session_factory(bind: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Session factory whose loaded documents stay usable after commit."""
    return async_sessionmaker(bind=bind, autoflush=False, expire_on_commit=False)


# Create database engine with appropriate connection args
engine = build_engine()


async def create_tables(bind: AsyncEngine) -> None:
    """Create all document tables that do not exist yet."""
    async with bind.begin() as conn:
        await conn.run_sync(Base.metadata.create_all, checkfirst=True)
