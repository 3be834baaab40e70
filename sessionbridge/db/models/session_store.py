from datetime import datetime
from typing import Any, Optional

from sqlalchemy import JSON, DateTime, Integer, String, literal_column
from sqlalchemy.orm import Mapped, mapped_column

from sessionbridge.db.base import Base


class SessionData(Base):
    """Server-side HTTP session record."""

    # Base provides: id, created_at, updated_at
    # Prefixed storage key, e.g. "sess" + session id
    sid: Mapped[str] = mapped_column(
        "session_id", String(255), unique=True, index=True, nullable=False
    )
    data: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)
    version: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=1,
        onupdate=literal_column("version + 1"),
    )
    expires_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime, nullable=True, index=True
    )

    def __repr__(self) -> str:  # pragma: no cover - debug helper
        return f"<SessionData(sid={self.sid!r}, expires_at={self.expires_at!r})>"
