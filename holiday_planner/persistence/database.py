"""
Database engine and session factory.

The engine is created once per process from ``DATABASE_URL``. Repositories
receive the session factory and open one short-lived session per call.
"""

import logging
from functools import lru_cache
from pathlib import Path

from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import Session, sessionmaker

from holiday_planner.persistence.models import Base
from holiday_planner.shared.settings import get_settings


logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def get_engine() -> Engine:
    """
    Get the shared database engine (singleton).

    For SQLite URLs the parent directory of the database file is created
    if missing.
    """
    url = get_settings().database_url

    if url.startswith("sqlite") and "///" in url:
        db_path = url.split("///")[-1]
        if db_path and db_path != ":memory:":
            Path(db_path).parent.mkdir(parents=True, exist_ok=True)

    return create_engine(url, echo=False, pool_pre_ping=True)


@lru_cache(maxsize=1)
def get_session_factory() -> sessionmaker[Session]:
    """Get the shared session factory bound to the engine."""
    return sessionmaker(bind=get_engine(), expire_on_commit=False)


def create_tables(engine: Engine) -> None:
    """
    Create all database tables (idempotent).

    Uses SQLAlchemy's create_all() which only creates missing tables.
    Existing tables and their data are never modified.
    """
    logger.info("Ensuring all database tables exist...")
    Base.metadata.create_all(engine)
    logger.info("Database schema is up to date")
