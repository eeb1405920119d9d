"""
Packing list generation.

Generated lists are never cached. When the caller asks for the list to be
saved to the trip, a failed save is reported next to the generated items
instead of failing the request.
"""

import logging
from typing import Any, Dict, List

from holiday_planner.operations.base import AIOperation, AIServices, require_trip
from holiday_planner.operations.prompts.builders import build_packing_prompt
from holiday_planner.operations.prompts.templates import GENERATE_PACKING_SYSTEM_PROMPT
from holiday_planner.operations.response_parser import parse_packing_items
from holiday_planner.shared.errors import UpstreamError, ValidationError


logger = logging.getLogger(__name__)


class PackingOperation(AIOperation):
    name = "packing"
    kind = None
    failure_message = "Packing list generation failed"
    required_fields = ("destination", "start_date", "end_date")

    def validate(self, body: Dict[str, Any]) -> None:
        super().validate(body)
        if body.get("save_to_trip") and not body.get("trip_id"):
            raise ValidationError("trip_id is required when save_to_trip is set")

    def fetch_context(self, body: Dict[str, Any], services: AIServices) -> Dict[str, Any]:
        if not body.get("save_to_trip"):
            return {}
        return {"trip": require_trip(services, body["trip_id"])}

    def generate(
        self, body: Dict[str, Any], context: Dict[str, Any], services: AIServices
    ) -> List[Dict[str, Any]]:
        prompt = build_packing_prompt(
            destination=body["destination"],
            start_date=body["start_date"],
            end_date=body["end_date"],
            traveller_count=body.get("traveller_count") or services.config.default_traveller_count,
            activities=body.get("activities") or [],
            itinerary=body.get("itinerary"),
        )
        text = services.provider.complete(
            GENERATE_PACKING_SYSTEM_PROMPT,
            [{"role": "user", "content": prompt}],
            max_tokens=services.config.packing_max_tokens,
        )
        items = parse_packing_items(text)
        return [item.model_dump(by_alias=True, exclude_none=True) for item in items]

    def persist(
        self, body: Dict[str, Any], result: List[Dict[str, Any]], services: AIServices
    ) -> Dict[str, Any]:
        if not body.get("save_to_trip") or not result:
            return {"saved": False}

        rows = [
            {
                "category": item["category"],
                "name": item["name"],
                "quantity": item.get("quantity", 1),
                "linked_to": item.get("linkedTo"),
            }
            for item in result
        ]
        try:
            count = services.repository.add_packing_items(body["trip_id"], rows)
        except UpstreamError as e:
            logger.warning(f"Packing items not saved, returning generated list | error={e}")
            return {"saved": False, "save_error": "Failed to save items to trip"}

        return {"saved": True, "items_count": count}
