"""
Adding an accepted suggestion to a plan.

The user picks one suggestion from a research, suggestions or plan change
answer and it is written to the plan as an accommodation, activity, cost
or decision. No provider call is made and nothing is cached.
"""

import logging
from typing import Any, Dict, List, Optional

from holiday_planner.operations.base import AIOperation, AIServices, require_trip_plan
from holiday_planner.shared.errors import NotFoundError, ValidationError


logger = logging.getLogger(__name__)


SUGGESTION_TYPES = ("accommodation", "activity", "cost", "decision")


class AddToPlanOperation(AIOperation):
    """
    Insert one suggestion into a plan version.

    The insert runs in the ``generate`` step, after the trip and plan have
    been checked by ``fetch_context``. Suggestion fields are mapped to the
    row first and ``applyData`` is laid over them, except for costs and
    decisions which only read from it.
    """

    name = "add_to_plan"
    kind = None
    failure_message = "Failed to add suggestion to plan"
    required_fields = ("plan_version_id", "trip_id", "suggestion_type", "data")

    def validate(self, body: Dict[str, Any]) -> None:
        super().validate(body)
        suggestion_type = body["suggestion_type"]
        if suggestion_type not in SUGGESTION_TYPES:
            raise ValidationError(
                f"Unknown suggestion_type: {suggestion_type}. "
                f"Must be one of: {', '.join(SUGGESTION_TYPES)}"
            )
        if suggestion_type == "activity" and not body["data"].get("itinerary_day_id"):
            raise ValidationError("itinerary_day_id is required for activities")

    def error_message(self, body: Dict[str, Any]) -> str:
        suggestion_type = body.get("suggestion_type")
        if suggestion_type in SUGGESTION_TYPES:
            return f"Failed to add {suggestion_type}"
        return self.failure_message

    def fetch_context(self, body: Dict[str, Any], services: AIServices) -> Dict[str, Any]:
        return require_trip_plan(services, body)

    def generate(
        self, body: Dict[str, Any], context: Dict[str, Any], services: AIServices
    ) -> Dict[str, Any]:
        data = body["data"]
        plan_id = context["plan"]["id"]
        repository = services.repository
        suggestion_type = body["suggestion_type"]
        logger.info(f"Adding {suggestion_type} to plan | plan={plan_id}")

        if suggestion_type == "accommodation":
            return repository.add_accommodation(plan_id, accommodation_values(data))

        if suggestion_type == "activity":
            item = repository.add_activity(plan_id, data["itinerary_day_id"], activity_values(data))
            if item is None:
                raise NotFoundError("Itinerary day not found")
            return item

        if suggestion_type == "cost":
            return repository.add_cost(plan_id, cost_values(data))

        return repository.add_decision(context["trip"]["id"], plan_id, decision_values(data))

    def build_response(
        self, body: Dict[str, Any], result: Any, cached: bool, extras: Dict[str, Any]
    ) -> Dict[str, Any]:
        return {"success": True, "type": body["suggestion_type"], "item": result}


# =============================================================================
# Row values
# =============================================================================


def _apply_data(data: Dict[str, Any]) -> Dict[str, Any]:
    apply_data = data.get("applyData")
    return apply_data if isinstance(apply_data, dict) else {}


def _listed(label: str, values: Optional[List[Any]]) -> str:
    if not values:
        return ""
    return f"{label}: {', '.join(str(value) for value in values)}"


def accommodation_notes(data: Dict[str, Any]) -> Optional[str]:
    """Description followed by the pros and cons, or None without a description."""
    description = data.get("description")
    if not description:
        return None

    notes = description
    pros = _listed("Pros", data.get("pros"))
    cons = _listed("Cons", data.get("cons"))
    if pros:
        notes += f"\n\n{pros}"
    if cons:
        notes += f"\n{cons}"
    return notes


def accommodation_values(data: Dict[str, Any]) -> Dict[str, Any]:
    apply_data = _apply_data(data)
    values = {
        "name": data.get("name"),
        "type": data.get("type") or "hotel",
        "location": data.get("location"),
        "cost": data.get("cost"),
        "currency": data.get("currency") or "GBP",
        "check_in": data.get("check_in") or apply_data.get("check_in"),
        "check_out": data.get("check_out") or apply_data.get("check_out"),
        "amenities": data.get("amenities") or [],
        "notes": accommodation_notes(data),
    }
    return {**values, **apply_data}


def activity_values(data: Dict[str, Any]) -> Dict[str, Any]:
    values = {
        "name": data.get("name"),
        "location": data.get("location"),
        "cost": data.get("cost"),
        "currency": data.get("currency") or "GBP",
        "time_start": data.get("time_start"),
        "time_end": data.get("time_end"),
        "notes": data.get("description"),
    }
    return {**values, **_apply_data(data)}


def cost_values(data: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "category": _apply_data(data).get("category") or "misc",
        "item": data.get("name"),
        "amount": data.get("cost") or 0,
        "currency": data.get("currency") or "GBP",
        "is_estimated": True,
        "notes": data.get("description"),
    }


def decision_values(data: Dict[str, Any]) -> Dict[str, Any]:
    options = data.get("options")
    if options is None and data.get("pros") and data.get("cons"):
        # a single pros/cons suggestion becomes the first option
        options = [{"name": "Option A", "pros": data["pros"], "cons": data["cons"]}]

    return {
        "title": data.get("name"),
        "description": data.get("description"),
        "options": options or [],
        "due_date": data.get("due_date"),
        "priority": data.get("priority") or "medium",
        "status": "pending",
    }
