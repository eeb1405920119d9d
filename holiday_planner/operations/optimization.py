"""Cost optimisation tips for one plan version."""

from typing import Any, Dict

from holiday_planner.operations.base import AIOperation, AIServices, require_trip_plan
from holiday_planner.operations.prompts.builders import build_cost_breakdown
from holiday_planner.operations.prompts.templates import OPTIMISE_SYSTEM_PROMPT_TEMPLATE


class OptimizationOperation(AIOperation):
    name = "optimization"
    kind = "optimization"
    failure_message = "Optimisation failed"
    required_fields = ("trip_id", "plan_version_id")

    def fetch_context(self, body: Dict[str, Any], services: AIServices) -> Dict[str, Any]:
        return require_trip_plan(services, body)

    def cache_fields(self, body: Dict[str, Any], context: Dict[str, Any]) -> Dict[str, Any]:
        return {"trip_id": body["trip_id"], "plan_version_id": body["plan_version_id"]}

    def generate(self, body: Dict[str, Any], context: Dict[str, Any], services: AIServices) -> str:
        plan = context["plan"]
        currency = plan.get("currency") or context["trip"].get("currency") or "GBP"
        prompt = (
            "Please analyse this holiday budget and suggest ways to save money:\n\n"
            + build_cost_breakdown(plan)
        )
        return services.provider.complete(
            OPTIMISE_SYSTEM_PROMPT_TEMPLATE.format(currency=currency),
            [{"role": "user", "content": prompt}],
            max_tokens=services.config.optimization_max_tokens,
        )
