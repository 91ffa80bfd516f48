"""
Database configuration and session management.

This module sets up SQLAlchemy for the revision archive. The default URL
is an in-memory SQLite database shared through a StaticPool, so the
archive lives exactly as long as the process.
"""

import logging

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session, declarative_base
from sqlalchemy.pool import StaticPool

from mowbot.config import get_settings

logger = logging.getLogger(__name__)

settings = get_settings()

DATABASE_URL = settings.database.DATABASE_URL


def _engine_options(url: str) -> dict:
    options = {"echo": settings.database.ECHO_SQL}
    if url.startswith("sqlite"):
        options["connect_args"] = {"check_same_thread": False}  # Needed for SQLite
        if url in ("sqlite://", "sqlite:///:memory:"):
            # One shared connection, otherwise every session sees an empty database
            options["poolclass"] = StaticPool
    return options


# Create SQLAlchemy engine
engine = create_engine(DATABASE_URL, **_engine_options(DATABASE_URL))

# Create session factory
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Base class for all models (using SQLAlchemy 2.0 style)
Base = declarative_base()


def get_db() -> Session:
    """
    Dependency function to get database session.

    Yields:
        Session: Database session that will be automatically closed.

    Usage:
        @router.get("/revisions/{revision_id}")
        async def read_revision(revision_id: str, db: Session = Depends(get_db)):
            return get_revision_by_id(db, revision_id)
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db() -> None:
    """
    Initialise the database.

    Creates all tables defined in the models if they don't exist.
    This is called on application startup.
    """
    # Import models so they are registered with Base
    from mowbot.models import revision  # noqa: F401

    Base.metadata.create_all(bind=engine)
    logger.info(f"Database initialised at {DATABASE_URL}")
