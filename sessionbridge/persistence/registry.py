"""Named persistence managers sharing one engine."""
from __future__ import annotations

import logging
from typing import Dict, Iterable, Optional

from sqlalchemy.ext.asyncio import AsyncEngine

from sessionbridge.core.errors import ConfigurationError, UnknownManagerError
from sessionbridge.db.base import Base
from sessionbridge.db.session import build_session_factory
from sessionbridge.persistence.manager import PersistenceManager

logger = logging.getLogger(__name__)


class PersistenceRegistry:
    """
    Holds the persistence managers an application talks to.

    The engine (and with it the connection pool) is assumed to be ready when
    the registry is built; managers only open sessions on demand.
    """

    def __init__(
        self,
        engine: AsyncEngine,
        managers: Iterable[str] = ("default",),
        documents: Optional[Dict[str, type[Base]]] = None,
    ):
        self.engine = engine
        self.documents = documents
        self._manager_names = tuple(managers)
        if not self._manager_names:
            raise ConfigurationError("At least one persistence manager must be configured")

        session_factory = build_session_factory(engine)
        self._managers: Dict[str, PersistenceManager] = {
            name: PersistenceManager(session_factory, documents=documents, name=name)
            for name in self._manager_names
        }

    @property
    def manager_names(self) -> tuple:
        return self._manager_names

    def get_manager(self, name: str = "default") -> PersistenceManager:
        try:
            return self._managers[name]
        except KeyError:
            raise UnknownManagerError(name) from None

    def create_session(self) -> "PersistenceRegistry":
        """
        Create a registry with fresh managers on the same engine.

        Each manager keeps its own set of staged documents, so a scoped
        registry isolates pending writes from every other user of the engine.
        """
        logger.debug("Creating scoped persistence registry for %s", self._manager_names)
        return PersistenceRegistry(self.engine, self._manager_names, self.documents)
