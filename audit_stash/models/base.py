"""
Database engine, session management, and base model.

The legacy audits live in a relational database. The import
reads them through a session from SessionLocal; the HTTP API
gets one per request from get_db().
"""

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, DeclarativeBase

from audit_stash.config import get_settings

settings = get_settings()

# --- Engine ---
# pool_pre_ping=True tests connections before using them, so a
# long import does not die on a connection the server dropped
# while the previous batch was being indexed.
engine = create_engine(
    settings.DATABASE_URL,
    pool_pre_ping=True,
)

# --- Session Factory ---
SessionLocal = sessionmaker(
    bind=engine,
    autocommit=False,
    autoflush=False,
)


class Base(DeclarativeBase):
    pass


# --- Dependency for FastAPI ---
def get_db():
    """
    Provide a database session for a single request.

    The try/finally pattern ensures the session is always
    closed, even if the endpoint raises.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
