"""
Database configuration and session management.

This module sets up the SQLAlchemy engine and session factory. PostgreSQL is
the production target; SQLite is accepted for local development and tests.
"""

from collections.abc import Generator
from typing import Any

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from .config import get_settings

settings = get_settings()
DATABASE_URL = settings.database_url


def _engine_options(url: str) -> dict[str, Any]:
    """Pool options for the given database URL."""
    if url.startswith("sqlite"):
        # SQLite connections are shared across FastAPI's threadpool
        return {"connect_args": {"check_same_thread": False}}
    # - pool_pre_ping: Verify connections are alive before using them
    # - pool_size: Number of connections to keep in pool
    # - max_overflow: Number of connections to allow beyond pool_size
    return {"pool_pre_ping": True, "pool_size": 5, "max_overflow": 10}


engine = create_engine(
    DATABASE_URL,
    echo=settings.sql_debug,
    **_engine_options(DATABASE_URL),
)

# Create session factory
SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
)

# Declarative base shared by users, invoices and invoice items
Base = declarative_base()


def get_db() -> Generator[Session, None, None]:
    """
    Request-scoped session dependency.

    Routers take it as ``db: Session = Depends(get_db)``; the session is
    closed once the response has been sent.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db() -> None:
    """Create the users, invoices and invoice_items tables if missing."""
    # Registers the ORM classes on Base.metadata
    from . import models_db  # noqa: F401

    Base.metadata.create_all(bind=engine)
