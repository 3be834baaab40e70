"""
Session lifecycle and expiry policy on top of a persistence manager.

Session ids are stored under ``prefix + sid`` so several stores can share one
collection. When a TTL is enforced every liveness decision goes through
``build_criteria``, so expired records are invisible to reads even before
anything removes them.
"""
from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timedelta
from typing import Any, Awaitable, Dict, Iterable, List, Optional, TypeVar, Union

from sqlalchemy.exc import IntegrityError

from sessionbridge.persistence.registry import PersistenceRegistry
from sessionbridge.store.config import StoreConfiguration
from sessionbridge.store.result import StoreResult
from sessionbridge.store.ttl import resolve_ttl_seconds

logger = logging.getLogger(__name__)

T = TypeVar("T")
SessionIds = Union[str, Iterable[str]]


def _as_id_list(sids: SessionIds) -> List[str]:
    if isinstance(sids, str):
        return [sids]
    return list(sids)


class SessionStore:
    """
    Durable session store for HTTP session middleware.

    Every operation is a coroutine returning a ``StoreResult``; persistence
    failures come back as ``StoreResult.failure`` and a missing session is a
    successful ``None``.
    """

    def __init__(self, persistence: PersistenceRegistry, config: Optional[StoreConfiguration] = None):
        self.config = config or StoreConfiguration()
        self.persistence = persistence.create_session() if self.config.scoped else persistence
        self.manager = self.persistence.get_manager(self.config.manager)

        # The engine is connected before the store exists, so it is ready now
        self.ready = asyncio.Event()
        self.ready.set()
        logger.info(
            "Session store ready",
            extra={
                "prefix": self.config.prefix,
                "document": self.config.document,
                "manager": self.config.manager,
                "ttl_enforced": self.config.enforces_expiry,
            },
        )

    @property
    def prefix(self) -> str:
        return self.config.prefix

    @property
    def has_ttl(self) -> bool:
        return self.config.has_ttl

    def storage_key(self, sid: str) -> str:
        return f"{self.config.prefix}{sid}"

    def session_id_for(self, storage_key: str) -> str:
        """Strip this store's prefix from a storage key."""
        if storage_key.startswith(self.config.prefix):
            return storage_key[len(self.config.prefix):]
        return storage_key

    def resolve_ttl_seconds(self, sid: str, session: Any) -> float:
        return resolve_ttl_seconds(self.config.ttl, self, sid, session)

    def expiry_for(self, sid: str, session: Any, now: Optional[datetime] = None) -> datetime:
        now = now or self.config.clock()
        return now + timedelta(seconds=self.resolve_ttl_seconds(sid, session))

    def build_criteria(self, base: Optional[Dict[str, Any]] = None, now: Optional[datetime] = None) -> Dict[str, Any]:
        """Add the liveness condition to ``base`` when expiry is enforced."""
        criteria = dict(base or {})
        if self.config.enforces_expiry:
            criteria[self.config.expire_field] = {"$gt": now or self.config.clock()}
        return criteria

    def keyspace_criteria(self, now: Optional[datetime] = None) -> Dict[str, Any]:
        """Liveness criteria limited to storage keys carrying this store's prefix."""
        base = {}
        if self.config.prefix:
            base[self.config.sid_field] = {"$startswith": self.config.prefix}
        return self.build_criteria(base, now)

    def create_document(self, storage_key: str) -> Any:
        return self.manager.create_document(self.config.document, {
            self.config.sid_field: storage_key,
            self.config.data_field: {},
        })

    async def _complete(self, operation: str, awaitable: Awaitable[T]) -> StoreResult[T]:
        try:
            value = await awaitable
        except Exception as e:
            logger.error("Session store %s failed: %s", operation, e)
            return StoreResult.failure(e)
        return StoreResult.success(value)

    async def get(self, sid: str) -> StoreResult[Any]:
        """Return the payload of a live session, or ``None``."""
        return await self._complete("get", self._get(sid))

    async def _get(self, sid: str) -> Any:
        document = await self.manager.find_one_by(
            self.config.document,
            self.build_criteria({self.config.sid_field: self.storage_key(sid)}),
        )
        if document is None:
            return None
        return getattr(document, self.config.data_field)

    async def set(self, sid: str, session: Any) -> StoreResult[Any]:
        """Create or overwrite a session, refreshing its expiry."""
        return await self._complete("set", self._set(sid, session))

    async def _set(self, sid: str, session: Any) -> Any:
        storage_key = self.storage_key(sid)
        document = await self.manager.find_one_by(
            self.config.document,
            self.build_criteria({self.config.sid_field: storage_key}),
        )
        if document is None and self.config.enforces_expiry:
            # An expired record still owns the storage key; revive it
            document = await self.manager.find_one_by(
                self.config.document, {self.config.sid_field: storage_key}
            )
        if document is not None:
            await self._write(document, sid, session)
            return session

        try:
            await self._write(self.create_document(storage_key), sid, session)
        except IntegrityError:
            # A concurrent set inserted the key first; overwrite its record
            document = await self.manager.find_one_by(
                self.config.document, {self.config.sid_field: storage_key}
            )
            if document is None:
                raise
            logger.debug("Concurrent insert of session %s; overwriting", sid)
            await self._write(document, sid, session)
        return session

    async def _write(self, document: Any, sid: str, session: Any) -> None:
        if self.config.enforces_expiry:
            setattr(document, self.config.expire_field, self.expiry_for(sid, session))
        setattr(document, self.config.data_field, session)

        self.manager.persist(document)
        await self.manager.flush(document)

    async def destroy(self, sids: SessionIds) -> StoreResult[None]:
        """Remove one or many sessions; missing ids are not an error."""
        return await self._complete("destroy", self._destroy(sids))

    async def _destroy(self, sids: SessionIds) -> None:
        await asyncio.gather(*(
            self.manager.remove_by(
                self.config.document, {self.config.sid_field: self.storage_key(sid)}
            )
            for sid in _as_id_list(sids)
        ))

    async def clear(self) -> StoreResult[None]:
        """
        Remove every record of the session document.

        This is not limited to this store's prefix: stores sharing the
        collection lose their sessions too.
        """
        return await self._complete("clear", self._clear())

    async def _clear(self) -> None:
        removed = await self.manager.remove_by(self.config.document, {})
        logger.info("Cleared %s session record(s)", removed)

    async def all(self) -> StoreResult[List[Any]]:
        """Payloads of every live session under this prefix, in persistence order."""
        return await self._complete("all", self._all())

    async def _all(self) -> List[Any]:
        documents = await self.manager.find_by(self.config.document, self.keyspace_criteria())
        return [getattr(document, self.config.data_field) for document in documents]

    async def length(self) -> StoreResult[int]:
        return await self._complete(
            "length", self.manager.find_count_by(self.config.document, self.keyspace_criteria())
        )

    async def touch(self, sids: SessionIds, session: Any) -> StoreResult[None]:
        """Push back the expiry of existing sessions without rewriting their data."""
        if not self.config.enforces_expiry:
            return StoreResult.success()
        return await self._complete("touch", self._touch(sids, session))

    async def _touch(self, sids: SessionIds, session: Any) -> None:
        documents = await self.manager.find_where_in(
            self.config.document,
            self.config.sid_field,
            [self.storage_key(sid) for sid in _as_id_list(sids)],
        )
        if not documents:
            return

        now = self.config.clock()
        for document in documents:
            sid = self.session_id_for(getattr(document, self.config.sid_field))
            setattr(document, self.config.expire_field, self.expiry_for(sid, session, now))
            self.manager.persist(document)

        await self.manager.flush()

    async def purge_expired(self) -> StoreResult[int]:
        """Remove records whose expiry has passed; returns how many were expired."""
        if not self.config.enforces_expiry:
            return StoreResult.success(0)
        return await self._complete("purge_expired", self._purge_expired())

    async def _purge_expired(self) -> int:
        criteria = {self.config.expire_field: {"$lte": self.config.clock()}}
        expired = await self.manager.find_count_by(self.config.document, criteria)
        if expired:
            await self.manager.remove_by(self.config.document, criteria)
            logger.info("Purged %s expired session record(s)", expired)
        return expired
