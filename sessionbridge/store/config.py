from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Optional

from sessionbridge.core.config import Settings
from sessionbridge.store.ttl import TtlPolicy, ttl_policy

DEFAULT_PREFIX = "sess"


def utcnow() -> datetime:
    """Current time as naive UTC, the form expiry timestamps are stored in."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


@dataclass(frozen=True)
class StoreConfiguration:
    """
    Immutable session store settings.

    ``has_ttl`` is derived once from the TTL policy when the configuration is
    built and is never re-evaluated afterwards.

    Attributes:
        prefix: Prepended to every session id to form its storage key
        ttl: Raw ttl option (``None``/``False``/``0``, seconds, ``timedelta``
            or ``callable(store, sid, session)``) or a ready ``TtlPolicy``
        document: Document type name of the session model
        manager: Name of the persistence manager to use
        sid_field: Model field holding the storage key
        data_field: Model field holding the session payload
        expire_field: Model field holding the expiry time; ``None`` disables
            expiry queries even when a TTL is configured
        scoped: Ask the persistence registry for a session-scoped sub-instance
        clock: Returns the current naive UTC time
    """

    prefix: Optional[str] = DEFAULT_PREFIX
    ttl: Any = None
    document: str = "SessionData"
    manager: str = "default"
    sid_field: str = "sid"
    data_field: str = "data"
    expire_field: Optional[str] = "expires_at"
    scoped: bool = False
    clock: Callable[[], datetime] = utcnow
    has_ttl: bool = field(init=False)

    def __post_init__(self) -> None:
        if self.prefix is None:
            object.__setattr__(self, "prefix", DEFAULT_PREFIX)
        policy: TtlPolicy = ttl_policy(self.ttl)
        object.__setattr__(self, "ttl", policy)
        object.__setattr__(self, "has_ttl", policy.enforced)

    @property
    def enforces_expiry(self) -> bool:
        """Whether reads filter on, and writes maintain, the expire field."""
        return bool(self.expire_field) and self.has_ttl

    @classmethod
    def from_settings(cls, settings: Settings, **overrides: Any) -> "StoreConfiguration":
        options = dict(
            prefix=settings.SESSION_PREFIX,
            ttl=settings.SESSION_TTL,
            document=settings.SESSION_DOCUMENT,
            manager=settings.SESSION_MANAGER,
            sid_field=settings.SESSION_SID_FIELD,
            data_field=settings.SESSION_DATA_FIELD,
            expire_field=settings.SESSION_EXPIRE_FIELD or None,
        )
        options.update(overrides)
        return cls(**options)
