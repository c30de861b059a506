"""
Database access: one lazily created engine per application, shared by every request.
The ConnectionCache lives on app.state (created by the app factory) and is handed to
handlers through the get_db dependency.
"""
import asyncio
import logging

from fastapi import Request
from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from videoshare.errors import ConfigurationError, UnexpectedError

logger = logging.getLogger(__name__)

Base = declarative_base()


def _redact(url: str) -> str:
    return url.split("@")[-1] if "@" in url else url


class ConnectionCache:
    """
    Memoizes a single connected Engine. Concurrent first callers await the same
    pending connect; a failed connect clears the pending marker so a later call retries.
    """

    def __init__(self, database_url: str, max_pool_size: int = 10):
        if not (database_url or "").strip():
            raise ConfigurationError("Database URL is not configured")
        self.database_url = database_url
        self.max_pool_size = max_pool_size
        self._engine: Engine | None = None
        self._pending: asyncio.Future | None = None
        self._sessionmaker: sessionmaker | None = None

    @property
    def engine(self) -> Engine | None:
        return self._engine

    def _engine_options(self) -> dict:
        options = {"pool_pre_ping": True}
        if self.database_url.startswith("sqlite"):
            # SQLite needs check_same_thread=False for FastAPI
            options["connect_args"] = {"check_same_thread": False}
        else:
            options["pool_size"] = self.max_pool_size
            options["max_overflow"] = 0
        return options

    def _connect(self) -> Engine:
        engine = create_engine(self.database_url, echo=False, **self._engine_options())
        try:
            with engine.connect() as conn:
                conn.execute(text("SELECT 1"))
        except Exception:
            engine.dispose()
            raise
        return engine

    async def ensure_connection(self) -> Engine:
        if self._engine is not None:
            return self._engine
        if self._pending is None:
            self._pending = asyncio.ensure_future(asyncio.to_thread(self._connect))
        pending = self._pending
        try:
            # shield: a cancelled caller must not cancel the connect other callers await
            engine = await asyncio.shield(pending)
        except Exception:
            if self._pending is pending:
                self._pending = None
                logger.warning("Database connect failed: %s", _redact(self.database_url))
            raise
        if self._engine is None:
            self._engine = engine
            self._sessionmaker = sessionmaker(autocommit=False, autoflush=False, bind=engine)
            logger.info("Database connected: %s", _redact(self.database_url))
        return self._engine

    def session(self) -> Session:
        if self._sessionmaker is None:
            raise RuntimeError("ensure_connection() must complete before opening a session")
        return self._sessionmaker()

    def dispose(self) -> None:
        """Graceful shutdown: release pooled connections."""
        if self._engine is not None:
            self._engine.dispose()
        self._engine = None
        self._sessionmaker = None
        self._pending = None


def get_connection_cache(request: Request) -> ConnectionCache:
    return request.app.state.connection_cache


async def get_db(request: Request):
    cache = get_connection_cache(request)
    try:
        await cache.ensure_connection()
    except Exception as e:
        logger.exception("Database unavailable")
        raise UnexpectedError("Database unavailable") from e
    db = cache.session()
    try:
        yield db
    finally:
        db.close()
