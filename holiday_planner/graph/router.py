"""
Routing logic for the AI request graph.

Decides whether a request can be answered from the cache.
"""

import logging
from typing import Literal

from holiday_planner.graph.state import AIRequestState


logger = logging.getLogger(__name__)


def route_after_lookup(state: AIRequestState) -> Literal["respond", "generate"]:
    """
    Route after the cache lookup.

    Routing logic:
    1. Cache hit -> respond with the stored payload
    2. Otherwise -> generate a fresh result

    Args:
        state: Current request state

    Returns:
        Name of the next node to execute
    """
    request_id = state.get("request_id", "unknown")
    _log = f"[request={request_id}] [op={state.get('operation')}] [router=route_after_lookup] "

    if state.get("cached"):
        logger.info(f"{_log}Routing to 'respond' | cache hit")
        return "respond"

    logger.info(f"{_log}Routing to 'generate' | use_cache={state.get('use_cache')}")
    return "generate"
