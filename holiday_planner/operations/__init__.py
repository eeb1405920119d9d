"""
AI operations.

Each operation is a stateless definition run by the request graph. The
registry maps the operation name to its singleton instance.
"""

from holiday_planner.operations.add_to_plan import AddToPlanOperation
from holiday_planner.operations.base import AIOperation, AIServices
from holiday_planner.operations.comparison import ComparisonOperation
from holiday_planner.operations.config import DEFAULT_CONFIG, OperationConfig
from holiday_planner.operations.link_extraction import LinkExtractionOperation, PageFetcher
from holiday_planner.operations.optimization import OptimizationOperation
from holiday_planner.operations.packing import PackingOperation
from holiday_planner.operations.plan_change import PlanChangeOperation
from holiday_planner.operations.plan_generation import PlanGenerationOperation
from holiday_planner.operations.research import ResearchOperation
from holiday_planner.operations.suggestions import SuggestionsOperation


OPERATIONS = {
    operation.name: operation
    for operation in (
        ResearchOperation(),
        ComparisonOperation(),
        OptimizationOperation(),
        SuggestionsOperation(),
        PlanChangeOperation(),
        PackingOperation(),
        LinkExtractionOperation(),
        PlanGenerationOperation(),
        AddToPlanOperation(),
    )
}

__all__ = [
    "AIOperation",
    "AIServices",
    "DEFAULT_CONFIG",
    "OPERATIONS",
    "OperationConfig",
    "PageFetcher",
]
