"""LLM provider utilities."""

from holiday_planner.shared.llm.client import (
    get_cached_client,
    call_llm_with_usage,
    LLMProvider,
    OpenAIProvider,
)

__all__ = ["get_cached_client", "call_llm_with_usage", "LLMProvider", "OpenAIProvider"]
