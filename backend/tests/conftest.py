"""Pytest configuration and shared fixtures."""

import os

# Settings are read at import time; pin a hermetic environment first
os.environ["ENV"] = "test"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["REDIS_ENABLED"] = "false"
os.environ["TREND_SNAPSHOT_BACKEND"] = "sql"

from collections.abc import Generator  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy.engine import Engine  # noqa: E402
from sqlalchemy.orm import Session, sessionmaker  # noqa: E402

from learnhub import models  # noqa: E402,F401
from learnhub.db.base import Base  # noqa: E402
from learnhub.db.engine import create_db_engine  # noqa: E402
from learnhub.db.session import get_db  # noqa: E402
from learnhub.main import app  # noqa: E402

TENANT_ID = "tenant-acme"
USER_ID = "user-ada"


@pytest.fixture(scope="function")
def engine() -> Generator[Engine, None, None]:
    """Fresh in-memory SQLite database per test."""
    test_engine = create_db_engine("sqlite://")
    Base.metadata.create_all(bind=test_engine)
    try:
        yield test_engine
    finally:
        Base.metadata.drop_all(bind=test_engine)
        test_engine.dispose()


@pytest.fixture(scope="function")
def session_factory(engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=engine, expire_on_commit=False)


@pytest.fixture(scope="function")
def db(session_factory) -> Generator[Session, None, None]:
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(scope="function")
def client(session_factory) -> Generator[TestClient, None, None]:
    """API client whose requests share the test database."""

    def _get_test_db() -> Generator[Session, None, None]:
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _get_test_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def caller_headers() -> dict[str, str]:
    return {"X-Tenant-Id": TENANT_ID, "X-User-Id": USER_ID}
