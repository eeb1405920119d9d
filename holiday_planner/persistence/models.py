"""
SQLAlchemy models for trips, plan versions and the AI result cache.

The trip tables are owned by the wider application; they are mapped here
only as far as the AI endpoints read and write them.
"""

import uuid
from datetime import datetime, timezone
from typing import Any, List, Optional

from sqlalchemy import (
    JSON,
    Boolean,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    text,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def new_id() -> str:
    return str(uuid.uuid4())


class Base(DeclarativeBase):
    """Base class for all database models."""


class TimestampMixin:
    """Mixin for created_at and updated_at timestamps (utc_now)."""

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
        onupdate=utc_now,
        nullable=False,
    )


# =============================================================================
# Trips and plan versions
# =============================================================================


class TripModel(Base, TimestampMixin):
    __tablename__ = "trips"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    owner_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    destination: Mapped[Optional[str]] = mapped_column(String(200))
    start_date: Mapped[Optional[str]] = mapped_column(String(10))
    end_date: Mapped[Optional[str]] = mapped_column(String(10))
    currency: Mapped[str] = mapped_column(String(3), default="GBP", nullable=False)

    plan_versions: Mapped[List["PlanVersionModel"]] = relationship(
        back_populates="trip", cascade="all, delete-orphan"
    )


class PlanVersionModel(Base, TimestampMixin):
    __tablename__ = "plan_versions"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    trip_id: Mapped[str] = mapped_column(
        ForeignKey("trips.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text)
    total_cost: Mapped[float] = mapped_column(Float, default=0, nullable=False)
    currency: Mapped[str] = mapped_column(String(3), default="GBP", nullable=False)

    trip: Mapped[TripModel] = relationship(back_populates="plan_versions")
    costs: Mapped[List["CostModel"]] = relationship(
        cascade="all, delete-orphan", order_by="CostModel.sort_order"
    )
    accommodations: Mapped[List["AccommodationModel"]] = relationship(
        cascade="all, delete-orphan", order_by="AccommodationModel.check_in"
    )
    transport: Mapped[List["TransportModel"]] = relationship(
        cascade="all, delete-orphan", order_by="TransportModel.sort_order"
    )
    itinerary_days: Mapped[List["ItineraryDayModel"]] = relationship(
        cascade="all, delete-orphan", order_by="ItineraryDayModel.day_number"
    )


class CostModel(Base):
    __tablename__ = "costs"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    plan_version_id: Mapped[str] = mapped_column(
        ForeignKey("plan_versions.id", ondelete="CASCADE"), nullable=False, index=True
    )
    category: Mapped[str] = mapped_column(String(50), nullable=False)
    item: Mapped[str] = mapped_column(String(200), nullable=False)
    amount: Mapped[float] = mapped_column(Float, default=0, nullable=False)
    currency: Mapped[str] = mapped_column(String(3), default="GBP", nullable=False)
    is_estimated: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    notes: Mapped[Optional[str]] = mapped_column(Text)
    sort_order: Mapped[int] = mapped_column(Integer, default=0, nullable=False)


class AccommodationModel(Base):
    __tablename__ = "accommodations"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    plan_version_id: Mapped[str] = mapped_column(
        ForeignKey("plan_versions.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    type: Mapped[Optional[str]] = mapped_column(String(50))
    location: Mapped[Optional[str]] = mapped_column(String(200))
    check_in: Mapped[Optional[str]] = mapped_column(String(10))
    check_out: Mapped[Optional[str]] = mapped_column(String(10))
    nights: Mapped[Optional[int]] = mapped_column(Integer)
    cost: Mapped[Optional[float]] = mapped_column(Float)
    currency: Mapped[str] = mapped_column(String(3), default="GBP", nullable=False)
    amenities: Mapped[List[str]] = mapped_column(JSON, default=list, nullable=False)
    notes: Mapped[Optional[str]] = mapped_column(Text)


class TransportModel(Base):
    __tablename__ = "transport"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    plan_version_id: Mapped[str] = mapped_column(
        ForeignKey("plan_versions.id", ondelete="CASCADE"), nullable=False, index=True
    )
    type: Mapped[str] = mapped_column(String(50), nullable=False)
    provider: Mapped[Optional[str]] = mapped_column(String(200))
    details: Mapped[Optional[str]] = mapped_column(Text)
    pickup_location: Mapped[Optional[str]] = mapped_column(String(200))
    dropoff_location: Mapped[Optional[str]] = mapped_column(String(200))
    cost: Mapped[Optional[float]] = mapped_column(Float)
    sort_order: Mapped[int] = mapped_column(Integer, default=0, nullable=False)


class ItineraryDayModel(Base):
    __tablename__ = "itinerary_days"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    plan_version_id: Mapped[str] = mapped_column(
        ForeignKey("plan_versions.id", ondelete="CASCADE"), nullable=False, index=True
    )
    day_number: Mapped[int] = mapped_column(Integer, nullable=False)
    date: Mapped[Optional[str]] = mapped_column(String(10))
    location: Mapped[str] = mapped_column(String(200), nullable=False)
    notes: Mapped[Optional[str]] = mapped_column(Text)
    drive_time: Mapped[Optional[str]] = mapped_column(String(50))

    activities: Mapped[List["ActivityModel"]] = relationship(
        cascade="all, delete-orphan", order_by="ActivityModel.sort_order"
    )


class ActivityModel(Base):
    __tablename__ = "activities"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    day_id: Mapped[str] = mapped_column(
        ForeignKey("itinerary_days.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    time_start: Mapped[Optional[str]] = mapped_column(String(5))
    time_end: Mapped[Optional[str]] = mapped_column(String(5))
    location: Mapped[Optional[str]] = mapped_column(String(200))
    cost: Mapped[Optional[float]] = mapped_column(Float)
    currency: Mapped[str] = mapped_column(String(3), default="GBP", nullable=False)
    notes: Mapped[Optional[str]] = mapped_column(Text)
    sort_order: Mapped[int] = mapped_column(Integer, default=0, nullable=False)


class PackingItemModel(Base, TimestampMixin):
    __tablename__ = "packing_items"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    trip_id: Mapped[str] = mapped_column(
        ForeignKey("trips.id", ondelete="CASCADE"), nullable=False, index=True
    )
    category: Mapped[str] = mapped_column(String(50), nullable=False)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, default=1, nullable=False)
    packed: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    linked_to: Mapped[Optional[str]] = mapped_column(String(200))
    sort_order: Mapped[int] = mapped_column(Integer, default=0, nullable=False)


class DecisionModel(Base, TimestampMixin):
    """An open choice the family still has to make for a plan."""

    __tablename__ = "decisions"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    trip_id: Mapped[str] = mapped_column(
        ForeignKey("trips.id", ondelete="CASCADE"), nullable=False, index=True
    )
    plan_version_id: Mapped[Optional[str]] = mapped_column(
        ForeignKey("plan_versions.id", ondelete="CASCADE"), index=True
    )
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text)
    options: Mapped[List[Any]] = mapped_column(JSON, default=list, nullable=False)
    due_date: Mapped[Optional[str]] = mapped_column(String(10))
    priority: Mapped[str] = mapped_column(String(10), default="medium", nullable=False)
    status: Mapped[str] = mapped_column(String(20), default="pending", nullable=False)


# =============================================================================
# AI result cache
# =============================================================================


class AIResultCacheModel(Base, TimestampMixin):
    """One cached AI payload per (trip scope, cache key, kind)."""

    __tablename__ = "ai_research_cache"
    __table_args__ = (
        UniqueConstraint("trip_id", "cache_key", "kind", name="uq_ai_cache_scope_key_kind"),
        # NULLs are distinct in a unique constraint, so global rows need their own index
        Index(
            "uq_ai_cache_global_key_kind",
            "cache_key",
            "kind",
            unique=True,
            sqlite_where=text("trip_id IS NULL"),
            postgresql_where=text("trip_id IS NULL"),
        ),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    trip_id: Mapped[Optional[str]] = mapped_column(
        ForeignKey("trips.id", ondelete="CASCADE"), nullable=True, index=True
    )
    cache_key: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    kind: Mapped[str] = mapped_column(String(20), nullable=False)
    payload: Mapped[Any] = mapped_column(JSON, nullable=False)
    model: Mapped[Optional[str]] = mapped_column(String(100))
    tokens_used: Mapped[Optional[int]] = mapped_column(Integer)
