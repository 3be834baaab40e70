"""Session lifecycle and expiry policy."""

from sessionbridge.store.callbacks import CallbackSessionStore
from sessionbridge.store.config import StoreConfiguration
from sessionbridge.store.result import StoreResult
from sessionbridge.store.session_store import SessionStore
from sessionbridge.store.ttl import ComputedTtl, DisabledTtl, FixedTtl, TtlPolicy

__all__ = [
    "CallbackSessionStore",
    "ComputedTtl",
    "DisabledTtl",
    "FixedTtl",
    "SessionStore",
    "StoreConfiguration",
    "StoreResult",
    "TtlPolicy",
]
