"""
Global test configuration and fixtures for sessionbridge

Every test gets its own temporary SQLite database, a persistence registry
bound to it and a controllable clock, so expiry can be tested by moving
time forward instead of sleeping.
"""

import os
import tempfile

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient
from sqlalchemy.pool import NullPool

from sessionbridge.db.session import build_engine, create_tables
from sessionbridge.persistence.registry import PersistenceRegistry
from sessionbridge.store.config import StoreConfiguration
from sessionbridge.store.session_store import SessionStore
from tests.utils.helpers import FrozenClock


# ============================================================================
# Database Fixtures
# ============================================================================

@pytest.fixture(scope="function")
def database_url():
    """Create a temporary database file for each test function"""
    db_fd, db_path = tempfile.mkstemp(suffix='.db')

    yield f"sqlite+aiosqlite:///{db_path}"

    os.close(db_fd)
    os.unlink(db_path)


@pytest_asyncio.fixture(scope="function")
async def engine(database_url):
    """Async engine with the session tables created"""
    # NullPool keeps connections from outliving the event loop that opened them
    engine = build_engine(database_url, poolclass=NullPool)
    await create_tables(engine)

    yield engine

    await engine.dispose()


@pytest.fixture(scope="function")
def registry(engine):
    return PersistenceRegistry(engine)


@pytest.fixture(scope="function")
def manager(registry):
    return registry.get_manager("default")


# ============================================================================
# Store Fixtures
# ============================================================================

@pytest.fixture(scope="function")
def clock():
    return FrozenClock()


@pytest.fixture(scope="function")
def make_store(registry, clock):
    """Build stores sharing the test database and clock"""
    def _make(**options):
        options.setdefault("clock", clock)
        return SessionStore(registry, StoreConfiguration(**options))
    return _make


@pytest.fixture(scope="function")
def store(make_store):
    """Store with a 10 second TTL"""
    return make_store(ttl=10)


@pytest.fixture(scope="function")
def permanent_store(make_store):
    """Store with expiry disabled"""
    return make_store(ttl=False)


# ============================================================================
# Application Client Fixtures
# ============================================================================

@pytest.fixture(scope="function")
def client(database_url, clock):
    """Create FastAPI test client backed by a fresh database"""
    from sessionbridge.main import create_app

    engine = build_engine(database_url, poolclass=NullPool)
    app_store = SessionStore(
        PersistenceRegistry(engine),
        StoreConfiguration(ttl=10, clock=clock),
    )
    app = create_app(store=app_store)

    with TestClient(app) as test_client:
        yield test_client


# ============================================================================
# Data Fixtures
# ============================================================================

@pytest.fixture(scope="function")
def sample_session():
    """Session payload as a middleware would hand it to the store"""
    return {
        "cookie": {"originalMaxAge": 10000, "httpOnly": True, "path": "/"},
        "user": {"id": 42, "name": "Ada", "roles": ["admin", "ops"]},
        "cart": [],
    }
