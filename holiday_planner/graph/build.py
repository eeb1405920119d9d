"""
AI request graph construction.

Builds the graph that runs one AI operation call:

    validate -> fetch_context -> lookup_cache -> (hit)  respond -> END
                                              -> (miss) generate -> store_result -> respond

Errors raised by validate, fetch_context or generate end the run and
propagate to the caller unchanged.
"""

import logging
import uuid
from functools import partial
from typing import Any, Dict, Optional

from langgraph.graph import StateGraph, END

from holiday_planner.graph.nodes import (
    fetch_context_node,
    generate_node,
    lookup_cache_node,
    respond_node,
    store_result_node,
    validate_node,
)
from holiday_planner.graph.router import route_after_lookup
from holiday_planner.graph.state import AIRequestState
from holiday_planner.operations.base import AIOperation, AIServices


logger = logging.getLogger(__name__)


def create_ai_request_graph(operation: AIOperation, services: AIServices):
    """
    Create and compile the request graph for one operation.

    Args:
        operation: Operation definition
        services: Collaborators for this request

    Returns:
        Compiled graph ready for invocation
    """
    graph = StateGraph(AIRequestState)

    graph.add_node("validate", partial(validate_node, operation, services))
    graph.add_node("fetch_context", partial(fetch_context_node, operation, services))
    graph.add_node("lookup_cache", partial(lookup_cache_node, operation, services))
    graph.add_node("generate", partial(generate_node, operation, services))
    graph.add_node("store_result", partial(store_result_node, operation, services))
    graph.add_node("respond", partial(respond_node, operation, services))

    graph.set_entry_point("validate")
    graph.add_edge("validate", "fetch_context")
    graph.add_edge("fetch_context", "lookup_cache")
    graph.add_conditional_edges(
        "lookup_cache",
        route_after_lookup,
        {"respond": "respond", "generate": "generate"},
    )
    graph.add_edge("generate", "store_result")
    graph.add_edge("store_result", "respond")
    graph.add_edge("respond", END)

    return graph.compile()


def run_ai_request(
    operation: AIOperation,
    body: Dict[str, Any],
    services: AIServices,
    request_id: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Run one operation call to completion.

    Args:
        operation: Operation definition
        body: Request body as a plain dict
        services: Collaborators for this request
        request_id: Id used in log lines, generated when omitted

    Returns:
        Response body: {"result": ..., "cached": bool, ...extras}
    """
    request_id = request_id or uuid.uuid4().hex[:8]
    logger.info(f"[request={request_id}] [op={operation.name}] Starting AI request")

    app = create_ai_request_graph(operation, services)
    initial_state: AIRequestState = {
        "request_id": request_id,
        "operation": operation.name,
        "body": body,
        "context": None,
        "use_cache": False,
        "cache_scope": None,
        "cache_key": None,
        "cached": False,
        "result": None,
        "extras": None,
        "response": None,
        "messages": [],
    }
    final_state = app.invoke(initial_state)
    return final_state["response"]
