# tests/conftest.py
import os

# Settings are read at import time, so configure the test environment first.
os.environ.setdefault("ENV", "local")
os.environ.setdefault("DATABASE_URL_LOCAL", "sqlite://")
os.environ.setdefault("JWT_SECRET", "test-secret")
os.environ.setdefault("GUEST_TOKEN_SECRET", "test-guest-secret")
os.environ.setdefault("INTERNAL_API_KEY", "test-internal-key")
os.environ.setdefault("PUBLIC_BASE_URL", "https://courtinvite.test")
os.environ.setdefault("AWS_S3_PUBLIC_URL", "https://cdn.courtinvite.test")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("SCHEDULER_ENABLED", "false")

import pytest
from unittest.mock import MagicMock
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import courtinvite.models  # noqa: F401
from courtinvite.main import app
from courtinvite.api import deps
from courtinvite.core.limiter import limiter
from courtinvite.db.base_class import Base
from courtinvite.db.session import enable_sqlite_foreign_keys


# --- Test Database Setup ---
# A fresh in-memory database per test. StaticPool keeps the single
# connection alive so the TestClient's worker threads see the same data.
@pytest.fixture(scope="function")
def db_session():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    enable_sqlite_foreign_keys(engine)
    Base.metadata.create_all(bind=engine)
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    session = TestingSessionLocal()
    yield session
    session.close()
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


# --- Mock Dependencies Setup ---
@pytest.fixture(scope="function")
def mock_storage():
    """Object storage stand-in that records calls instead of talking to S3."""
    storage = MagicMock()
    storage.upload_bytes.side_effect = (
        lambda object_name, body, content_type, **kwargs: f"https://cdn.courtinvite.test/{object_name}"
    )
    storage.generate_presigned_post.return_value = {
        "url": "https://courtinvite.s3.amazonaws.com",
        "fields": {"key": "covers/x.jpg", "policy": "p", "x-amz-signature": "s"},
    }
    return storage


# --- Test Client Fixtures ---
@pytest.fixture(scope="function")
def client(db_session, mock_storage):
    """
    Provides a TestClient bound to the per-test database with storage mocked.
    Authentication is real: use tests.utils.auth to build headers.
    """

    def override_get_db():
        yield db_session

    app.dependency_overrides[deps.get_db] = override_get_db
    app.dependency_overrides[deps.get_object_storage] = lambda: mock_storage
    limiter.enabled = False

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()
