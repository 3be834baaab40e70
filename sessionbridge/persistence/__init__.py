"""Document persistence primitives over SQLAlchemy's asyncio ORM."""

from sessionbridge.persistence.manager import PersistenceManager
from sessionbridge.persistence.registry import PersistenceRegistry

__all__ = ["PersistenceManager", "PersistenceRegistry"]
