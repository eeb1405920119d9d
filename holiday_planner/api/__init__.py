"""HTTP surface of the AI operations."""

from holiday_planner.api.ai_api import router

__all__ = ["router"]
