"""
Configuration for the AI operations.

Centralizes token budgets and extraction limits so they can be tuned
without touching the operation definitions.
"""

from dataclasses import dataclass


@dataclass
class OperationConfig:
    """
    Configuration shared by the AI operations.

    Attributes:
        research_max_tokens: Token budget for destination research
        comparison_max_tokens: Token budget for plan comparison
        suggestions_max_tokens: Token budget for itinerary suggestions
        optimization_max_tokens: Token budget for cost optimisation tips
        plan_change_max_tokens: Token budget for plan change alternatives
        extraction_max_tokens: Token budget for link extraction
        plan_generation_max_tokens: Token budget for full plan generation
        packing_max_tokens: Token budget for packing list generation
        max_suggestions: Maximum suggestions parsed from a research answer
        default_traveller_count: Traveller count used when none is given
        max_page_chars: Page text is truncated to this many characters
        min_page_chars: Pages with less text than this are rejected
        fetch_user_agent: User agent sent when fetching pages
    """

    research_max_tokens: int = 2000
    comparison_max_tokens: int = 1500
    suggestions_max_tokens: int = 1000
    optimization_max_tokens: int = 1500
    plan_change_max_tokens: int = 3000
    extraction_max_tokens: int = 1500
    plan_generation_max_tokens: int = 4000
    packing_max_tokens: int = 3000

    max_suggestions: int = 8
    default_traveller_count: int = 2

    max_page_chars: int = 15000
    min_page_chars: int = 50
    fetch_user_agent: str = "Mozilla/5.0 (compatible; HolidayPlannerBot/1.0)"


# Default configuration instance
DEFAULT_CONFIG = OperationConfig()
