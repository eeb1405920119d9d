"""Itinerary suggestions for one plan version."""

from typing import Any, Dict

from holiday_planner.operations.base import AIOperation, AIServices, require_trip_plan
from holiday_planner.operations.prompts.builders import (
    build_itinerary_context,
    build_suggestions_prompt,
)
from holiday_planner.operations.prompts.templates import SUGGESTIONS_SYSTEM_PROMPT


class SuggestionsOperation(AIOperation):
    name = "suggestions"
    kind = "suggestions"
    failure_message = "Failed to get suggestions"
    required_fields = ("trip_id", "plan_version_id", "request")

    def fetch_context(self, body: Dict[str, Any], services: AIServices) -> Dict[str, Any]:
        return require_trip_plan(services, body)

    def cache_fields(self, body: Dict[str, Any], context: Dict[str, Any]) -> Dict[str, Any]:
        return {
            "trip_id": body["trip_id"],
            "plan_version_id": body["plan_version_id"],
            "request": body["request"],
        }

    def generate(self, body: Dict[str, Any], context: Dict[str, Any], services: AIServices) -> str:
        prompt = build_suggestions_prompt(build_itinerary_context(context["plan"]), body["request"])
        return services.provider.complete(
            SUGGESTIONS_SYSTEM_PROMPT,
            [{"role": "user", "content": prompt}],
            max_tokens=services.config.suggestions_max_tokens,
        )
