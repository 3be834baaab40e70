"""
Document manager over SQLAlchemy's asyncio ORM.

Every query runs in its own short-lived ``AsyncSession`` so callers can issue
queries concurrently. Writes follow a unit-of-work shape: ``persist`` stages a
document on the manager and ``flush`` merges the staged documents into the
database in a single transaction.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from sessionbridge.core.errors import UnknownDocumentError
from sessionbridge.db import models  # noqa: F401  registers the session document
from sessionbridge.db.base import Base, document_classes
from sessionbridge.persistence.criteria import Criteria, build_clauses, resolve_column

logger = logging.getLogger(__name__)


class PersistenceManager:
    """Find, count, remove and write documents of registered model types."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        documents: Optional[Dict[str, type[Base]]] = None,
        name: str = "default",
    ):
        """
        Args:
            session_factory: Factory producing sessions bound to the database
            documents: Document type name to model class; defaults to every
                model registered on ``Base``
            name: Name the manager is registered under, used in log output
        """
        self.session_factory = session_factory
        self.name = name
        self._documents = documents
        self._staged: List[Base] = []

    def get_document_class(self, document_type: str) -> type[Base]:
        """Resolve a document type name to its mapped model class."""
        documents = self._documents if self._documents is not None else document_classes()
        try:
            return documents[document_type]
        except KeyError:
            raise UnknownDocumentError(document_type) from None

    def create_document(self, document_type: str, fields: Optional[Dict[str, Any]] = None) -> Base:
        """Instantiate an unsaved document; nothing is written until flush."""
        model = self.get_document_class(document_type)
        return model(**(fields or {}))

    async def find_one_by(self, document_type: str, criteria: Optional[Criteria] = None) -> Optional[Base]:
        model = self.get_document_class(document_type)
        stmt = select(model).where(*build_clauses(model, criteria)).limit(1)
        async with self.session_factory() as session:
            return (await session.scalars(stmt)).first()

    async def find_by(self, document_type: str, criteria: Optional[Criteria] = None) -> List[Base]:
        model = self.get_document_class(document_type)
        stmt = select(model).where(*build_clauses(model, criteria))
        async with self.session_factory() as session:
            return list((await session.scalars(stmt)).all())

    async def find_where_in(self, document_type: str, field: str, values: Iterable[Any]) -> List[Base]:
        """Find documents whose ``field`` equals any of ``values``."""
        model = self.get_document_class(document_type)
        values = list(values)
        if not values:
            return []
        stmt = select(model).where(resolve_column(model, field).in_(values))
        async with self.session_factory() as session:
            return list((await session.scalars(stmt)).all())

    async def find_count_by(self, document_type: str, criteria: Optional[Criteria] = None) -> int:
        model = self.get_document_class(document_type)
        stmt = select(func.count()).select_from(model).where(*build_clauses(model, criteria))
        async with self.session_factory() as session:
            return int(await session.scalar(stmt) or 0)

    async def remove_by(self, document_type: str, criteria: Optional[Criteria] = None) -> int:
        """Delete matching documents; empty criteria removes every document."""
        model = self.get_document_class(document_type)
        stmt = delete(model).where(*build_clauses(model, criteria))
        async with self.session_factory() as session:
            try:
                result = await session.execute(stmt)
                await session.commit()
            except Exception:
                await session.rollback()
                raise
        logger.debug(
            "Removed %s %s document(s) via manager %r",
            result.rowcount, document_type, self.name,
        )
        return result.rowcount

    def persist(self, document: Base) -> None:
        """Stage a document for the next flush."""
        if not any(staged is document for staged in self._staged):
            self._staged.append(document)

    @property
    def staged(self) -> List[Base]:
        return list(self._staged)

    async def flush(self, document: Optional[Base] = None) -> None:
        """
        Commit staged documents.

        Args:
            document: Flush only this document; by default every staged
                document is flushed.
        """
        if document is not None:
            batch = [document]
            self._staged = [staged for staged in self._staged if staged is not document]
        else:
            batch, self._staged = self._staged, []

        if not batch:
            return

        async with self.session_factory() as session:
            try:
                for staged in batch:
                    await session.merge(staged)
                await session.commit()
            except Exception as e:
                await session.rollback()
                logger.error("Flush of %s document(s) failed: %s", len(batch), e)
                raise
