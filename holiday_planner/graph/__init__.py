"""AI request graph: validate, fetch context, consult the cache, generate, respond."""

from holiday_planner.graph.build import create_ai_request_graph, run_ai_request
from holiday_planner.graph.state import AIRequestState

__all__ = ["AIRequestState", "create_ai_request_graph", "run_ai_request"]
