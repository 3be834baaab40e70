"""
Completion-callback facade over ``SessionStore``.

Session middleware written against the classic store contract calls
``get(sid, callback)`` and friends and expects ``callback(error)`` or
``callback(error, value)`` exactly once. Each call schedules the store
coroutine on the running event loop and returns the task.
"""
from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Callable, Set

from sessionbridge.store.result import StoreResult
from sessionbridge.store.session_store import SessionIds, SessionStore


Callback = Callable[..., Any]


class CallbackSessionStore:
    def __init__(self, store: SessionStore):
        self.store = store
        self._pending: Set[asyncio.Task] = set()

    @property
    def connected(self) -> bool:
        return self.store.ready.is_set()

    def get(self, sid: str, callback: Callback) -> asyncio.Task:
        return self._dispatch(self.store.get(sid), callback, with_value=True)

    def set(self, sid: str, session: Any, callback: Callback) -> asyncio.Task:
        return self._dispatch(self.store.set(sid, session), callback, with_value=True)

    def destroy(self, sids: SessionIds, callback: Callback) -> asyncio.Task:
        return self._dispatch(self.store.destroy(sids), callback)

    def touch(self, sids: SessionIds, session: Any, callback: Callback) -> asyncio.Task:
        return self._dispatch(self.store.touch(sids, session), callback)

    def all(self, callback: Callback) -> asyncio.Task:
        return self._dispatch(self.store.all(), callback, with_value=True)

    def clear(self, callback: Callback) -> asyncio.Task:
        return self._dispatch(self.store.clear(), callback)

    def length(self, callback: Callback) -> asyncio.Task:
        return self._dispatch(self.store.length(), callback, with_value=True)

    async def drain(self) -> None:
        """Wait for every scheduled operation to complete."""
        if self._pending:
            await asyncio.gather(*self._pending)

    def _dispatch(
        self,
        operation: Awaitable[StoreResult],
        callback: Callback,
        with_value: bool = False,
    ) -> asyncio.Task:
        task = asyncio.ensure_future(self._complete(operation, callback, with_value))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def _complete(self, operation: Awaitable[StoreResult], callback: Callback, with_value: bool) -> None:
        result = await operation
        if not result.ok:
            callback(result.error)
        elif with_value:
            callback(None, result.value)
        else:
            callback(None)
