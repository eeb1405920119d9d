"""
Plan change negotiation.

The user asks to change one plan item and may follow up over several
turns. Only the opening turn is cacheable: the key is built from the item
and the change request, never from the conversation history, and any
follow-up turn skips the cache entirely.
"""

from typing import Any, Dict

from holiday_planner.cache.policy import should_use_cache
from holiday_planner.operations.base import AIOperation, AIServices, require_trip_plan
from holiday_planner.operations.prompts.builders import build_plan_change_messages
from holiday_planner.operations.prompts.templates import PLAN_CHANGE_SYSTEM_PROMPT
from holiday_planner.operations.response_parser import parse_plan_change_response
from holiday_planner.shared.errors import ValidationError


class PlanChangeOperation(AIOperation):
    name = "plan_change"
    kind = "plan_change"
    failure_message = "Plan change request failed"
    required_fields = ("trip_id", "plan_version_id", "item_type", "current_item", "change_request")

    def validate(self, body: Dict[str, Any]) -> None:
        super().validate(body)
        if not isinstance(body["current_item"], dict):
            raise ValidationError("current_item must be an object")

    def fetch_context(self, body: Dict[str, Any], services: AIServices) -> Dict[str, Any]:
        context = require_trip_plan(services, body)
        context["destination"] = (
            body.get("destination") or context["trip"].get("destination") or "Unknown"
        )
        return context

    def use_cache(self, body: Dict[str, Any]) -> bool:
        return should_use_cache(body.get("conversation_history"))

    def cache_fields(self, body: Dict[str, Any], context: Dict[str, Any]) -> Dict[str, Any]:
        return {
            "item_type": body["item_type"],
            "change_request": body["change_request"],
            "current_item_id": body["current_item"].get("id"),
        }

    def generate(
        self, body: Dict[str, Any], context: Dict[str, Any], services: AIServices
    ) -> Dict[str, Any]:
        messages = build_plan_change_messages(
            item_type=body["item_type"],
            current_item=body["current_item"],
            change_request=body["change_request"],
            destination=context["destination"],
            conversation_history=body.get("conversation_history") or [],
        )
        text = services.provider.complete(
            PLAN_CHANGE_SYSTEM_PROMPT,
            messages,
            max_tokens=services.config.plan_change_max_tokens,
        )
        return parse_plan_change_response(text).model_dump(by_alias=True)
