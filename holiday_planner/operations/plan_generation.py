"""Full plan generation from a destination, dates and preferences."""

import logging
from datetime import date
from typing import Any, Dict

from pydantic import ValidationError as PydanticValidationError

from holiday_planner.operations.base import AIOperation, AIServices
from holiday_planner.operations.prompts.builders import build_plan_generation_prompt
from holiday_planner.operations.prompts.templates import GENERATE_PLAN_SYSTEM_PROMPT
from holiday_planner.operations.response_parser import parse_json_object
from holiday_planner.shared.contracts import GeneratedPlan
from holiday_planner.shared.errors import ValidationError


logger = logging.getLogger(__name__)


class PlanGenerationOperation(AIOperation):
    name = "plan_generation"
    kind = None
    failure_message = "Plan generation failed"
    required_fields = ("destination", "start_date", "end_date")

    def validate(self, body: Dict[str, Any]) -> None:
        super().validate(body)
        try:
            start = date.fromisoformat(body["start_date"])
            end = date.fromisoformat(body["end_date"])
        except ValueError as e:
            raise ValidationError("Invalid date format") from e
        if end <= start:
            raise ValidationError("End date must be after start date")

    def generate(
        self, body: Dict[str, Any], context: Dict[str, Any], services: AIServices
    ) -> Dict[str, Any]:
        prompt = build_plan_generation_prompt(
            destination=body["destination"],
            start_date=body["start_date"],
            end_date=body["end_date"],
            traveller_count=body.get("traveller_count") or services.config.default_traveller_count,
            preferences=body.get("preferences") or "Family-friendly, mix of activities",
        )
        text = services.provider.complete(
            GENERATE_PLAN_SYSTEM_PROMPT,
            [{"role": "user", "content": prompt}],
            max_tokens=services.config.plan_generation_max_tokens,
        )

        try:
            plan = GeneratedPlan.model_validate(parse_json_object(text))
        except PydanticValidationError as e:
            logger.warning(f"Generated plan did not match the expected structure: {e}")
            plan = GeneratedPlan()
        return plan.model_dump()
