"""
AI request state schema.

Defines the state that flows through the request graph for one AI
operation call, from the validated request body to the response body.
"""

from typing import Any, TypedDict, List, Optional, Annotated
import operator


class AIRequestState(TypedDict):
    """
    State schema for the AI request graph.

    The operation definition and its collaborators are bound to the nodes
    when the graph is built, so the state only carries request data.
    """

    # Request
    request_id: str
    operation: str
    body: dict

    # Populated by fetch_context
    context: Optional[dict]

    # Cache decision and address (scope is a trip id or None)
    use_cache: bool
    cache_scope: Optional[str]
    cache_key: Optional[str]
    cached: bool

    # Outcome
    result: Any
    extras: Optional[dict]
    response: Optional[dict]

    # Transition trail
    messages: Annotated[List[dict], operator.add]
