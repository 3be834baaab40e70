"""
Integration tests for the completion-callback store facade
"""

from unittest.mock import AsyncMock

import pytest

from sessionbridge.store.callbacks import CallbackSessionStore
from tests.utils.helpers import CallbackRecorder

pytestmark = pytest.mark.integration


@pytest.fixture
def callback_store(store):
    return CallbackSessionStore(store)


class TestCallbackContract:

    async def test_connected(self, callback_store):
        assert callback_store.connected is True

    async def test_set_and_get(self, callback_store, sample_session):
        on_set = CallbackRecorder()
        callback_store.set("abc", sample_session, on_set)
        await callback_store.drain()

        on_get = CallbackRecorder()
        await callback_store.get("abc", on_get)

        assert on_set.called_once
        assert on_set.args == (None, sample_session)
        assert on_get.called_once
        assert on_get.args == (None, sample_session)

    async def test_get_missing(self, callback_store):
        on_get = CallbackRecorder()

        await callback_store.get("missing", on_get)

        assert on_get.calls == [(None, None)]

    async def test_destroy_touch_clear_complete_without_value(self, callback_store):
        await callback_store.set("abc", {"a": 1}, CallbackRecorder())

        on_touch, on_destroy, on_clear = CallbackRecorder(), CallbackRecorder(), CallbackRecorder()
        await callback_store.touch(["abc"], {"a": 1}, on_touch)
        await callback_store.destroy("abc", on_destroy)
        await callback_store.clear(on_clear)

        assert on_touch.calls == [(None,)]
        assert on_destroy.calls == [(None,)]
        assert on_clear.calls == [(None,)]

    async def test_all_and_length(self, callback_store):
        await callback_store.set("a", {"n": 1}, CallbackRecorder())
        await callback_store.set("b", {"n": 2}, CallbackRecorder())

        on_all, on_length = CallbackRecorder(), CallbackRecorder()
        callback_store.all(on_all)
        callback_store.length(on_length)
        await callback_store.drain()

        error, payloads = on_all.args
        assert error is None
        assert sorted(p["n"] for p in payloads) == [1, 2]
        assert on_length.calls == [(None, 2)]

    async def test_failure_is_passed_as_only_argument(self, callback_store, manager):
        manager.find_one_by = AsyncMock(side_effect=ConnectionError("gone"))
        on_get = CallbackRecorder()

        await callback_store.get("abc", on_get)

        assert on_get.called_once
        (error,) = on_get.args
        assert isinstance(error, ConnectionError)

    async def test_drain_waits_for_pending_operations(self, callback_store):
        recorders = [CallbackRecorder() for _ in range(5)]
        for index, recorder in enumerate(recorders):
            callback_store.set(f"s{index}", {"i": index}, recorder)

        await callback_store.drain()

        assert all(recorder.called_once for recorder in recorders)
        assert callback_store._pending == set()
