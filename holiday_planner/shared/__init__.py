"""
Shared infrastructure for all AI operations.

Modules:
- settings: Environment-driven configuration
- errors: Error taxonomy with HTTP status mapping
- llm: OpenAI provider
- logging: Log formats and request transition logging
- contracts: Structured operation results
"""

from holiday_planner.shared.llm.client import OpenAIProvider, call_llm_with_usage
from holiday_planner.shared.logging.config import setup_logging, log_request_transition

__all__ = [
    "OpenAIProvider",
    "call_llm_with_usage",
    "setup_logging",
    "log_request_transition",
]
