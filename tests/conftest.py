"""Pytest configuration and fixtures."""
import os
import tempfile
from datetime import datetime

import pytest

# The app module builds an application at import time and needs a database URL.
_import_dir = tempfile.mkdtemp()
os.environ.setdefault("DATABASE_URL", f"sqlite:///{_import_dir}/import.db")
os.environ.setdefault("SECRET_KEY", "test-secret")

from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402

from videoshare.auth import hash_password, issue_session_token  # noqa: E402
from videoshare.config import Settings  # noqa: E402
from videoshare.database import Base  # noqa: E402
from videoshare.main import create_app  # noqa: E402
from videoshare.models import User, Video  # noqa: E402
from videoshare.schemas.user import Identity  # noqa: E402

TEST_PASSWORD = "correct-horse"


@pytest.fixture
def database_url(tmp_path):
    return f"sqlite:///{tmp_path / 'test.db'}"


@pytest.fixture
def test_engine(database_url):
    engine = create_engine(database_url, connect_args={"check_same_thread": False})
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db_session(test_engine):
    TestSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)
    db = TestSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def app(database_url, test_engine):
    return create_app(Settings(database_url=database_url))


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c


@pytest.fixture
def user(db_session):
    u = User(email="alice@example.com", password=hash_password(TEST_PASSWORD))
    db_session.add(u)
    db_session.commit()
    db_session.refresh(u)
    return u


@pytest.fixture
def auth_headers(user):
    token = issue_session_token(Identity(id=user.id, email=user.email))
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def add_video(db_session):
    def _add(title, private=False, created_at=None):
        video = Video(
            title=title,
            description=f"{title} description",
            video_url=f"https://media.example.com/{title}.mp4",
            thumbnail_url=f"https://media.example.com/{title}.jpg",
            private=private,
            created_at=created_at or datetime.utcnow(),
        )
        db_session.add(video)
        db_session.commit()
        db_session.refresh(video)
        return video

    return _add
