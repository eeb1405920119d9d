"""Side-by-side comparison of a trip's plan versions."""

import logging
from typing import Any, Dict

from holiday_planner.operations.base import AIOperation, AIServices, require_trip
from holiday_planner.operations.prompts.builders import build_comparison_data
from holiday_planner.operations.prompts.templates import COMPARE_SYSTEM_PROMPT
from holiday_planner.shared.errors import NotFoundError, ValidationError


logger = logging.getLogger(__name__)


class ComparisonOperation(AIOperation):
    """
    Compare two or more plan versions of one trip.

    The cache key folds in the sorted ids of the compared plans, so adding
    a plan to the trip, or narrowing the selection, derives a new key.
    """

    name = "comparison"
    kind = "comparison"
    failure_message = "Comparison failed"
    required_fields = ("trip_id",)

    def fetch_context(self, body: Dict[str, Any], services: AIServices) -> Dict[str, Any]:
        trip = require_trip(services, body["trip_id"])
        plans = services.repository.list_plan_versions(trip["id"])

        selected_ids = body.get("plan_version_ids")
        if selected_ids:
            known = {plan["id"] for plan in plans}
            unknown = [plan_id for plan_id in selected_ids if plan_id not in known]
            if unknown:
                raise NotFoundError(f"Plan versions not found: {', '.join(unknown)}")
            wanted = set(selected_ids)
            plans = [plan for plan in plans if plan["id"] in wanted]

        if len(plans) < 2:
            raise ValidationError("Need at least 2 plans to compare")

        logger.debug(f"Comparing {len(plans)} plans | trip={trip['id']}")
        return {"trip": trip, "plans": plans}

    def cache_fields(self, body: Dict[str, Any], context: Dict[str, Any]) -> Dict[str, Any]:
        return {
            "trip_id": body["trip_id"],
            "plan_ids": [plan["id"] for plan in context["plans"]],
        }

    def generate(self, body: Dict[str, Any], context: Dict[str, Any], services: AIServices) -> str:
        prompt = "Compare these holiday plan options:\n\n" + build_comparison_data(context["plans"])
        return services.provider.complete(
            COMPARE_SYSTEM_PROMPT,
            [{"role": "user", "content": prompt}],
            max_tokens=services.config.comparison_max_tokens,
        )
