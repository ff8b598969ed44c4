"""
Shared test fixtures.

Sets up an isolated SQLite database so tests never touch the
real audit database, and an in-memory document store so tests
never touch Elasticsearch.
"""

import os

# Must be set before audit_stash.config is imported
os.environ.setdefault("DATABASE_URL", "sqlite:///./test.db")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from audit_stash.main import app
from audit_stash.models.base import Base, get_db


TEST_DATABASE_URL = "sqlite:///./test.db"

engine = create_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
)

TestSessionLocal = sessionmaker(
    bind=engine,
    autocommit=False,
    autoflush=False,
)


class RecordingStore:
    """Document store that keeps every batch it is given."""

    def __init__(self, fail_with: Exception | None = None):
        self.batches = []
        self.fail_with = fail_with

    def add_documents(self, documents):
        if self.fail_with is not None:
            raise self.fail_with
        self.batches.append(list(documents))

    @property
    def documents(self):
        return [doc for batch in self.batches for doc in batch]


@pytest.fixture(autouse=True)
def setup_database():
    """Create all tables before each test, drop them after."""
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db_session():
    """Provide a database session for direct service testing."""
    session = TestSessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest.fixture
def store():
    return RecordingStore()


@pytest.fixture
def failing_store():
    return RecordingStore(fail_with=ConnectionError("cluster unavailable"))


@pytest.fixture
def client(db_session):
    """
    Provide a test client with the test database.

    The get_db dependency is overridden so the app uses the
    test session instead of the real database.
    """
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()
