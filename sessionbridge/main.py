import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import PlainTextResponse
from sqlalchemy.ext.asyncio import AsyncEngine

from sessionbridge import __version__
from sessionbridge.core.config import settings
from sessionbridge.db import session as db_session
from sessionbridge.db.session import create_tables
from sessionbridge.persistence.registry import PersistenceRegistry
from sessionbridge.store.config import StoreConfiguration
from sessionbridge.store.session_store import SessionStore
from sessionbridge.web.middleware import ServerSessionMiddleware

logger = logging.getLogger("sessionbridge.main")


def build_store(engine: AsyncEngine) -> SessionStore:
    """Session store configured from application settings."""
    config = StoreConfiguration.from_settings(settings)
    registry = PersistenceRegistry(engine, managers=(config.manager,))
    return SessionStore(registry, config)


def create_app(store: Optional[SessionStore] = None, engine: Optional[AsyncEngine] = None) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        store: Session store to use; built from settings when omitted
        engine: Engine whose tables are created on startup; defaults to the
            store's engine
    """
    engine = engine or (store.persistence.engine if store else db_session.engine)
    store = store or build_store(engine)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        await create_tables(engine)
        logger.info("Session tables ready")
        yield

    app = FastAPI(
        title=settings.APP_NAME,
        description="HTTP sessions persisted through SQLAlchemy",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.session_store = store

    app.add_middleware(
        ServerSessionMiddleware,
        store=store,
        secret_key=settings.SECRET_KEY,
        session_cookie=settings.SESSION_COOKIE,
        max_age=settings.SESSION_MAX_AGE,
        https_only=settings.SESSION_HTTPS_ONLY,
    )

    @app.get("/set-session-value", response_class=PlainTextResponse)
    async def set_session_value(request: Request):
        request.session["foo"] = "go sessionbridge!!!"
        return "session data was set"

    @app.get("/get-session-value", response_class=PlainTextResponse)
    async def get_session_value(request: Request):
        return request.session.get("foo", "")

    @app.get("/clear-session-value", response_class=PlainTextResponse)
    async def clear_session_value(request: Request):
        request.session.pop("foo", None)
        return "session data was deleted"

    @app.get("/health")
    async def health(request: Request):
        count = (await request.app.state.session_store.length()).unwrap()
        return {"status": "healthy", "sessions": count}

    return app


app = create_app()
