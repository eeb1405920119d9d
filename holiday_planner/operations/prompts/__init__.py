"""Prompt templates and builders for the AI operations."""

from holiday_planner.operations.prompts.builders import (
    build_comparison_data,
    build_cost_breakdown,
    build_itinerary_context,
    build_packing_prompt,
    build_plan_change_messages,
    build_research_prompt,
)

__all__ = [
    "build_comparison_data",
    "build_cost_breakdown",
    "build_itinerary_context",
    "build_packing_prompt",
    "build_plan_change_messages",
    "build_research_prompt",
]
