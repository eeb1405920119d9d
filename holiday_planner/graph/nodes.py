"""
Node functions for the AI request graph.

Every node takes the operation definition and its collaborators as
leading arguments; ``build.py`` binds them with ``functools.partial``.

Cache failures never fail a request: a failed read counts as a miss and
a failed write is ignored, so a fresh result is always returned.
"""

import logging
from typing import Any, Dict

from holiday_planner.cache.keys import derive_cache_key
from holiday_planner.graph.state import AIRequestState
from holiday_planner.operations.base import AIOperation, AIServices
from holiday_planner.shared.errors import StoreError
from holiday_planner.shared.logging import log_request_transition


logger = logging.getLogger(__name__)


def _prefix(state: AIRequestState, node: str) -> str:
    return f"[request={state.get('request_id', 'unknown')}] [op={state.get('operation')}] [node={node}] "


def _trail(node: str, content: str) -> list:
    return [{"role": "system", "node": node, "content": content}]


def validate_node(
    operation: AIOperation, services: AIServices, state: AIRequestState
) -> Dict[str, Any]:
    """Check the request body and decide whether the cache may be used."""
    _log = _prefix(state, "validate")
    body = state["body"]

    operation.validate(body)
    use_cache = operation.kind is not None and operation.use_cache(body)

    logger.info(f"{_log}Request validated | use_cache={use_cache}")
    log_request_transition("validated", {**state, "use_cache": use_cache}, logger=logger)
    return {
        "use_cache": use_cache,
        "cached": False,
        "messages": _trail("validate", "validated"),
    }


def fetch_context_node(
    operation: AIOperation, services: AIServices, state: AIRequestState
) -> Dict[str, Any]:
    """Load the trip rows the operation builds its prompt from."""
    _log = _prefix(state, "fetch_context")

    context = operation.fetch_context(state["body"], services)

    logger.info(f"{_log}Context fetched | keys={sorted(context)}")
    return {"context": context, "messages": _trail("fetch_context", "context fetched")}


def lookup_cache_node(
    operation: AIOperation, services: AIServices, state: AIRequestState
) -> Dict[str, Any]:
    """
    Derive the cache key and look up a stored result.

    Skipped entirely when the request may not use the cache.
    """
    _log = _prefix(state, "lookup_cache")

    if not state.get("use_cache"):
        logger.info(f"{_log}Cache bypassed")
        return {"cached": False, "messages": _trail("lookup_cache", "bypassed")}

    body = state["body"]
    context = state.get("context") or {}
    scope = operation.cache_scope(body, context)
    key = derive_cache_key(operation.cache_fields(body, context))
    updates: Dict[str, Any] = {"cache_scope": scope, "cache_key": key}

    try:
        hit = services.cache_store.get(scope, key, operation.kind)
    except StoreError as e:
        logger.warning(f"{_log}Cache read failed, treating as miss | error={e}")
        hit = None

    if hit is None:
        logger.info(f"{_log}Cache miss | scope={scope}, key={key[:12]}")
        return {**updates, "cached": False, "messages": _trail("lookup_cache", "miss")}

    logger.info(f"{_log}Cache hit | scope={scope}, key={key[:12]}")
    log_request_transition("cache_hit", {**state, "cached": True}, logger=logger)
    return {
        **updates,
        "cached": True,
        "result": hit.payload,
        "messages": _trail("lookup_cache", "hit"),
    }


def generate_node(
    operation: AIOperation, services: AIServices, state: AIRequestState
) -> Dict[str, Any]:
    """Call the provider. ProviderError propagates to the caller."""
    _log = _prefix(state, "generate")
    logger.info(f"{_log}Invoking provider")

    result = operation.generate(state["body"], state.get("context") or {}, services)

    logger.info(f"{_log}Provider result received")
    return {"result": result, "messages": _trail("generate", "generated")}


def store_result_node(
    operation: AIOperation, services: AIServices, state: AIRequestState
) -> Dict[str, Any]:
    """Write the fresh result to the cache, then run operation side effects."""
    _log = _prefix(state, "store_result")
    result = state.get("result")

    if state.get("use_cache") and state.get("cache_key"):
        try:
            services.cache_store.put(
                state.get("cache_scope"),
                state["cache_key"],
                operation.kind,
                result,
                model=getattr(services.provider, "model", None),
                tokens_used=getattr(services.provider, "last_tokens_used", None),
            )
            logger.info(f"{_log}Result cached")
        except StoreError as e:
            logger.warning(f"{_log}Cache write failed, result not cached | error={e}")

    extras = operation.persist(state["body"], result, services)
    return {"extras": extras, "messages": _trail("store_result", "stored")}


def respond_node(
    operation: AIOperation, services: AIServices, state: AIRequestState
) -> Dict[str, Any]:
    """Assemble the response body."""
    _log = _prefix(state, "respond")
    cached = bool(state.get("cached"))

    response = operation.build_response(
        state["body"], state.get("result"), cached, state.get("extras") or {}
    )

    logger.info(f"{_log}Responding | cached={cached} -> END")
    log_request_transition("responded", {**state, "cached": cached}, logger=logger)
    return {"response": response, "messages": _trail("respond", "responded")}
