import asyncio
import threading
import time

import pytest
from fastapi.testclient import TestClient

from videoshare import database
from videoshare.config import Settings
from videoshare.database import ConnectionCache
from videoshare.errors import ConfigurationError
from videoshare.main import create_app


class CountingCreateEngine:
    """Wraps create_engine; counts connect attempts and can fail the first N."""

    def __init__(self, real, fail_first=0, delay=0.05):
        self.real = real
        self.fail_first = fail_first
        self.delay = delay
        self.calls = 0
        self._lock = threading.Lock()

    def __call__(self, *args, **kwargs):
        with self._lock:
            self.calls += 1
            call = self.calls
        time.sleep(self.delay)
        if call <= self.fail_first:
            raise RuntimeError("database unreachable")
        return self.real(*args, **kwargs)


@pytest.fixture
def counting_engine(monkeypatch):
    counter = CountingCreateEngine(database.create_engine)
    monkeypatch.setattr(database, "create_engine", counter)
    return counter


def test_missing_url_is_configuration_error():
    with pytest.raises(ConfigurationError):
        ConnectionCache("")


def test_concurrent_first_callers_share_one_connect(database_url, counting_engine):
    cache = ConnectionCache(database_url)

    async def run():
        return await asyncio.gather(cache.ensure_connection(), cache.ensure_connection())

    first, second = asyncio.run(run())
    assert counting_engine.calls == 1
    assert first is second
    assert cache.engine is first
    cache.dispose()


def test_connection_is_cached_after_success(database_url, counting_engine):
    cache = ConnectionCache(database_url)
    engine = asyncio.run(cache.ensure_connection())
    again = asyncio.run(cache.ensure_connection())
    assert again is engine
    assert counting_engine.calls == 1
    cache.dispose()


def test_failed_connect_propagates_to_all_waiters_and_allows_retry(database_url, counting_engine):
    counting_engine.fail_first = 1
    cache = ConnectionCache(database_url)

    async def run():
        return await asyncio.gather(
            cache.ensure_connection(), cache.ensure_connection(), return_exceptions=True
        )

    results = asyncio.run(run())
    assert counting_engine.calls == 1
    assert all(isinstance(r, RuntimeError) for r in results)
    assert cache.engine is None

    engine = asyncio.run(cache.ensure_connection())
    assert engine is not None
    assert counting_engine.calls == 2
    cache.dispose()


def test_session_requires_connection(database_url):
    cache = ConnectionCache(database_url)
    with pytest.raises(RuntimeError):
        cache.session()


def test_session_uses_cached_engine(database_url):
    cache = ConnectionCache(database_url)
    engine = asyncio.run(cache.ensure_connection())
    db = cache.session()
    try:
        assert db.get_bind() is engine
    finally:
        db.close()
        cache.dispose()


def test_unreachable_database_returns_500(tmp_path):
    url = f"sqlite:///{tmp_path / 'missing-dir' / 'app.db'}"
    app = create_app(Settings(database_url=url))
    with TestClient(app) as client:
        response = client.get("/api/videos")
    assert response.status_code == 500
    assert response.json() == {"error": "Database unavailable"}
