"""Persistence layer: SQLAlchemy models, engine and the trip repository."""

from holiday_planner.persistence.database import (
    create_tables,
    get_engine,
    get_session_factory,
)
from holiday_planner.persistence.repository import TripRepository

__all__ = ["create_tables", "get_engine", "get_session_factory", "TripRepository"]
