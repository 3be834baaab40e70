"""
Test helper functions for common testing operations
"""

from datetime import datetime, timedelta
from typing import Any, Dict, Optional


class FrozenClock:
    """Naive-UTC clock that only moves when told to"""

    def __init__(self, start: Optional[datetime] = None):
        self.now = start or datetime(2030, 1, 1, 12, 0, 0)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> datetime:
        self.now += timedelta(seconds=seconds)
        return self.now


class CallbackRecorder:
    """Records every invocation of a completion callback"""

    def __init__(self):
        self.calls = []

    def __call__(self, *args: Any) -> None:
        self.calls.append(args)

    @property
    def called_once(self) -> bool:
        return len(self.calls) == 1

    @property
    def args(self) -> tuple:
        assert self.calls, "callback was never invoked"
        return self.calls[-1]


def assert_session_equal(actual: Optional[Dict[str, Any]], expected: Dict[str, Any]) -> None:
    """Assert that a stored payload came back unchanged"""
    assert actual is not None, "expected a session, got none"
    assert actual == expected, f"session payload changed: {actual!r} != {expected!r}"
