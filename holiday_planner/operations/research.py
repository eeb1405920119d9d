"""Destination research: recommendations for a query, optionally tied to a trip."""

from typing import Any, Dict

from holiday_planner.operations.base import AIOperation, AIServices, require_trip
from holiday_planner.operations.prompts.builders import build_research_prompt
from holiday_planner.operations.prompts.templates import RESEARCH_SYSTEM_PROMPT
from holiday_planner.operations.response_parser import parse_structured_suggestions
from holiday_planner.shared.contracts import ResearchResult
from holiday_planner.shared.errors import ValidationError


RESEARCH_TYPES = ("hotel", "activity", "restaurant", "transport", "general")


class ResearchOperation(AIOperation):
    name = "research"
    kind = "research"
    failure_message = "Research failed"
    required_fields = ("query", "type")

    def validate(self, body: Dict[str, Any]) -> None:
        super().validate(body)
        if body["type"] not in RESEARCH_TYPES:
            raise ValidationError(f"type must be one of: {', '.join(RESEARCH_TYPES)}")

    def fetch_context(self, body: Dict[str, Any], services: AIServices) -> Dict[str, Any]:
        if not body.get("trip_id"):
            return {}
        return {"trip": require_trip(services, body["trip_id"])}

    def cache_scope(self, body: Dict[str, Any], context: Dict[str, Any]):
        return body.get("trip_id") or None

    def cache_fields(self, body: Dict[str, Any], context: Dict[str, Any]) -> Dict[str, Any]:
        date_range = body.get("date_range") or {}
        budget = body.get("budget") or {}
        return {
            "query": body["query"],
            "type": body["type"],
            "location": body.get("location"),
            "date_start": date_range.get("start"),
            "date_end": date_range.get("end"),
            "budget_min": budget.get("min"),
            "budget_max": budget.get("max"),
            "budget_currency": budget.get("currency"),
            "preferences": body.get("preferences"),
        }

    def generate(
        self, body: Dict[str, Any], context: Dict[str, Any], services: AIServices
    ) -> Dict[str, Any]:
        text = services.provider.complete(
            RESEARCH_SYSTEM_PROMPT,
            [{"role": "user", "content": build_research_prompt(body)}],
            max_tokens=services.config.research_max_tokens,
        )
        suggestions = parse_structured_suggestions(text, limit=services.config.max_suggestions)
        result = ResearchResult(text=text, suggestions=suggestions)
        return result.model_dump(by_alias=True, exclude_none=True)
