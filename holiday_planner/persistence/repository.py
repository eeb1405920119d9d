"""SQLAlchemy repository for the trip rows the AI endpoints read and write."""

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload, sessionmaker

from holiday_planner.persistence.models import (
    AccommodationModel,
    ActivityModel,
    Base,
    CostModel,
    DecisionModel,
    ItineraryDayModel,
    PackingItemModel,
    PlanVersionModel,
    TripModel,
)
from holiday_planner.shared.errors import UpstreamError


logger = logging.getLogger(__name__)


_PLAN_LOAD_OPTIONS = (
    selectinload(PlanVersionModel.costs),
    selectinload(PlanVersionModel.accommodations),
    selectinload(PlanVersionModel.transport),
    selectinload(PlanVersionModel.itinerary_days).selectinload(
        ItineraryDayModel.activities
    ),
)


class TripRepository:
    """Repository over trips and their plan versions.

    This repository is user-scoped: only trips owned by the user passed at
    construction time are visible, and plan versions are visible only
    through those trips. Rows are returned as plain dicts.
    """

    def __init__(self, session_factory: sessionmaker[Session], user_id: str) -> None:
        self._session_factory = session_factory
        self._user_id = user_id

    def get_trip(self, trip_id: str) -> Optional[Dict[str, Any]]:
        """Find a trip by id, returns None if absent or not owned."""
        stmt = select(TripModel).where(
            TripModel.id == trip_id,
            TripModel.owner_id == self._user_id,
        )
        try:
            with self._session_factory() as session:
                model = session.execute(stmt).scalar_one_or_none()
                return None if model is None else _trip_to_dict(model)
        except SQLAlchemyError as e:
            raise UpstreamError(f"Failed to fetch trip: {e}") from e

    def list_plan_versions(self, trip_id: str) -> List[Dict[str, Any]]:
        """All plan versions of a visible trip with their child rows."""
        stmt = (
            select(PlanVersionModel)
            .join(TripModel, PlanVersionModel.trip_id == TripModel.id)
            .where(
                PlanVersionModel.trip_id == trip_id,
                TripModel.owner_id == self._user_id,
            )
            .options(*_PLAN_LOAD_OPTIONS)
            .order_by(PlanVersionModel.created_at, PlanVersionModel.id)
        )
        try:
            with self._session_factory() as session:
                models = session.execute(stmt).scalars().all()
                return [_plan_to_dict(model) for model in models]
        except SQLAlchemyError as e:
            raise UpstreamError(f"Failed to fetch plan versions: {e}") from e

    def get_plan_version(self, plan_version_id: str) -> Optional[Dict[str, Any]]:
        """Find a plan version by id, returns None if absent or not visible."""
        stmt = (
            select(PlanVersionModel)
            .join(TripModel, PlanVersionModel.trip_id == TripModel.id)
            .where(
                PlanVersionModel.id == plan_version_id,
                TripModel.owner_id == self._user_id,
            )
            .options(*_PLAN_LOAD_OPTIONS)
        )
        try:
            with self._session_factory() as session:
                model = session.execute(stmt).scalar_one_or_none()
                return None if model is None else _plan_to_dict(model)
        except SQLAlchemyError as e:
            raise UpstreamError(f"Failed to fetch plan version: {e}") from e

    def add_packing_items(self, trip_id: str, items: List[Dict[str, Any]]) -> int:
        """
        Insert packing items for a trip in one transaction.

        Items keep their list order through ``sort_order`` and start unpacked.

        Returns:
            Number of rows inserted.
        """
        models = [
            PackingItemModel(
                trip_id=trip_id,
                category=item["category"],
                name=item["name"],
                quantity=item.get("quantity", 1),
                linked_to=item.get("linked_to"),
                packed=False,
                sort_order=index,
            )
            for index, item in enumerate(items)
        ]
        try:
            with self._session_factory() as session, session.begin():
                session.add_all(models)
        except SQLAlchemyError as e:
            raise UpstreamError(f"Failed to save packing items: {e}") from e

        logger.info(f"Saved {len(models)} packing items | trip={trip_id}")
        return len(models)

    # -------------------------------------------------------------------------
    # Plan items added from accepted suggestions. Callers check that the plan
    # version is visible before inserting.
    # -------------------------------------------------------------------------

    def add_accommodation(self, plan_version_id: str, values: Dict[str, Any]) -> Dict[str, Any]:
        model = AccommodationModel(
            plan_version_id=plan_version_id,
            **_column_values(AccommodationModel, values),
        )
        return self._insert(model, "accommodation")

    def add_activity(
        self, plan_version_id: str, day_id: str, values: Dict[str, Any]
    ) -> Optional[Dict[str, Any]]:
        """
        Append an activity to one itinerary day of a plan version.

        Returns:
            The inserted row, or None if the day does not belong to the plan
        """
        stmt = select(ItineraryDayModel).where(
            ItineraryDayModel.id == day_id,
            ItineraryDayModel.plan_version_id == plan_version_id,
        )
        try:
            with self._session_factory() as session, session.begin():
                day = session.execute(stmt).scalar_one_or_none()
                if day is None:
                    return None
                fields = {"sort_order": len(day.activities), **_column_values(ActivityModel, values)}
                model = ActivityModel(day_id=day.id, **fields)
                session.add(model)
                session.flush()
                row = _row_to_dict(model)
        except SQLAlchemyError as e:
            raise UpstreamError(f"Failed to add activity: {e}") from e

        logger.info(f"Added activity | id={row['id']}, day={day_id}")
        return row

    def add_cost(self, plan_version_id: str, values: Dict[str, Any]) -> Dict[str, Any]:
        """Append a cost line after the plan's existing costs."""
        count_stmt = select(func.count()).select_from(CostModel).where(
            CostModel.plan_version_id == plan_version_id
        )
        try:
            with self._session_factory() as session, session.begin():
                fields = {
                    "sort_order": session.execute(count_stmt).scalar_one(),
                    **_column_values(CostModel, values),
                }
                model = CostModel(plan_version_id=plan_version_id, **fields)
                session.add(model)
                session.flush()
                row = _row_to_dict(model)
        except SQLAlchemyError as e:
            raise UpstreamError(f"Failed to add cost: {e}") from e

        logger.info(f"Added cost | id={row['id']}, plan={plan_version_id}")
        return row

    def add_decision(
        self, trip_id: str, plan_version_id: Optional[str], values: Dict[str, Any]
    ) -> Dict[str, Any]:
        model = DecisionModel(
            trip_id=trip_id,
            plan_version_id=plan_version_id,
            **_column_values(DecisionModel, values),
        )
        return self._insert(model, "decision")

    def _insert(self, model: Base, label: str) -> Dict[str, Any]:
        try:
            with self._session_factory() as session, session.begin():
                session.add(model)
                session.flush()
                row = _row_to_dict(model)
        except SQLAlchemyError as e:
            raise UpstreamError(f"Failed to add {label}: {e}") from e

        logger.info(f"Added {label} | id={row['id']}")
        return row


# =============================================================================
# Row mapping
# =============================================================================


def _trip_to_dict(model: TripModel) -> Dict[str, Any]:
    return {
        "id": model.id,
        "name": model.name,
        "destination": model.destination,
        "start_date": model.start_date,
        "end_date": model.end_date,
        "currency": model.currency,
    }


def _plan_to_dict(model: PlanVersionModel) -> Dict[str, Any]:
    return {
        "id": model.id,
        "trip_id": model.trip_id,
        "name": model.name,
        "description": model.description,
        "total_cost": model.total_cost,
        "currency": model.currency,
        "costs": [
            {
                "id": cost.id,
                "category": cost.category,
                "item": cost.item,
                "amount": cost.amount,
                "is_estimated": cost.is_estimated,
                "notes": cost.notes,
            }
            for cost in model.costs
        ],
        "accommodations": [
            {
                "id": accommodation.id,
                "name": accommodation.name,
                "type": accommodation.type,
                "location": accommodation.location,
                "check_in": accommodation.check_in,
                "check_out": accommodation.check_out,
                "nights": accommodation.nights,
                "cost": accommodation.cost,
            }
            for accommodation in model.accommodations
        ],
        "transport": [
            {
                "id": transport.id,
                "type": transport.type,
                "provider": transport.provider,
                "details": transport.details,
                "pickup_location": transport.pickup_location,
                "dropoff_location": transport.dropoff_location,
                "cost": transport.cost,
            }
            for transport in model.transport
        ],
        "itinerary_days": [
            {
                "id": day.id,
                "day_number": day.day_number,
                "date": day.date,
                "location": day.location,
                "notes": day.notes,
                "drive_time": day.drive_time,
                "activities": [
                    {
                        "id": activity.id,
                        "name": activity.name,
                        "time_start": activity.time_start,
                        "time_end": activity.time_end,
                        "location": activity.location,
                        "cost": activity.cost,
                    }
                    for activity in day.activities
                ],
            }
            for day in model.itinerary_days
        ],
    }


# Keys a caller may never set on an inserted row
_PROTECTED_COLUMNS = frozenset(
    {"id", "trip_id", "plan_version_id", "day_id", "created_at", "updated_at"}
)


def _column_values(model_cls: type, values: Dict[str, Any]) -> Dict[str, Any]:
    """Keep the values that name a writable column of the model."""
    columns = {column.key for column in model_cls.__table__.columns}
    return {
        key: value
        for key, value in values.items()
        if key in columns and key not in _PROTECTED_COLUMNS
    }


def _row_to_dict(model: Base) -> Dict[str, Any]:
    return {
        column.key: getattr(model, column.key)
        for column in model.__table__.columns
        if column.key not in ("created_at", "updated_at")
    }
