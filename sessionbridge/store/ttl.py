"""
Session time-to-live policies.

A store is configured with exactly one policy:

- ``DisabledTtl``: no expiry is written or enforced
- ``FixedTtl``: every session lives for the same number of seconds
- ``ComputedTtl``: a callable ``(store, sid, session) -> seconds`` decides per
  session, e.g. from the session payload or request context
"""
from __future__ import annotations

import logging
import math
import numbers
from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Callable, Optional, Union

from sessionbridge.core.errors import ConfigurationError

logger = logging.getLogger(__name__)

TtlCallback = Callable[[Any, str, Any], Any]


@dataclass(frozen=True)
class DisabledTtl:
    enforced = False

    def seconds_for(self, store: Any, sid: str, session: Any) -> float:
        return 0


@dataclass(frozen=True)
class FixedTtl:
    seconds: float
    enforced = True

    def seconds_for(self, store: Any, sid: str, session: Any) -> float:
        return self.seconds


@dataclass(frozen=True)
class ComputedTtl:
    compute: TtlCallback
    enforced = True

    def seconds_for(self, store: Any, sid: str, session: Any) -> float:
        seconds = self.compute(store, sid, session)
        if _is_number(seconds):
            return seconds
        logger.warning(
            "TTL callback returned %r for session %s; using 0 seconds", seconds, sid
        )
        return 0


TtlPolicy = Union[DisabledTtl, FixedTtl, ComputedTtl]


def _is_number(value: Any) -> bool:
    return (
        isinstance(value, numbers.Real)
        and not isinstance(value, bool)
        and not math.isnan(value)
    )


def ttl_policy(value: Optional[Any]) -> TtlPolicy:
    """
    Build a policy from a raw ``ttl`` option.

    ``None``, ``False``, ``0`` and ``NaN`` disable expiry. Numbers and
    ``timedelta`` values give a fixed TTL in seconds, callables a computed one.
    """
    if isinstance(value, (DisabledTtl, FixedTtl, ComputedTtl)):
        return value
    if value is None or value is False:
        return DisabledTtl()
    if value is True:
        raise ConfigurationError("ttl=True is ambiguous; pass a number of seconds")
    if callable(value):
        return ComputedTtl(value)
    if isinstance(value, timedelta):
        value = value.total_seconds()
    if isinstance(value, numbers.Real):
        if math.isnan(value) or value == 0:
            return DisabledTtl()
        return FixedTtl(value)
    raise ConfigurationError(f"Unsupported ttl value {value!r}")


def resolve_ttl_seconds(policy: TtlPolicy, store: Any, sid: str, session: Any) -> float:
    """Seconds a session should live from now; 0 when no TTL applies."""
    return policy.seconds_for(store, sid, session)
