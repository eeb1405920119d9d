"""Structured results returned by the AI operations."""

from holiday_planner.shared.contracts.research_output import (
    CostRange,
    ResearchResult,
    Suggestion,
)
from holiday_planner.shared.contracts.plan_change_output import (
    PlanChangeOption,
    PlanChangeResult,
)
from holiday_planner.shared.contracts.packing_output import PackingItem
from holiday_planner.shared.contracts.generated_plan import GeneratedPlan

__all__ = [
    "CostRange",
    "ResearchResult",
    "Suggestion",
    "PlanChangeOption",
    "PlanChangeResult",
    "PackingItem",
    "GeneratedPlan",
]
