"""
Base definitions for the AI operations.

An operation describes one AI endpoint: how its input is validated, which
trip rows it needs, which request fields identify a cacheable result and
how the provider is asked. The request graph drives every operation
through the same pipeline, so an operation never touches the cache.
"""

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Dict, Optional, Tuple

from holiday_planner.operations.config import DEFAULT_CONFIG, OperationConfig
from holiday_planner.shared.errors import NotFoundError, ValidationError

if TYPE_CHECKING:
    from holiday_planner.cache.store import ResultCacheStore
    from holiday_planner.operations.link_extraction import PageFetcher
    from holiday_planner.persistence.repository import TripRepository
    from holiday_planner.shared.llm import LLMProvider


@dataclass
class AIServices:
    """
    Collaborators available to an operation for one request.

    Attributes:
        provider: Text generation provider
        repository: User-scoped trip repository
        cache_store: Persistent AI result cache
        page_fetcher: Web page fetcher, only needed for link extraction
        config: Token budgets and extraction limits
    """

    provider: "LLMProvider"
    repository: "TripRepository"
    cache_store: "ResultCacheStore"
    page_fetcher: Optional["PageFetcher"] = None
    config: OperationConfig = field(default_factory=lambda: DEFAULT_CONFIG)


class AIOperation:
    """
    One AI endpoint.

    Subclasses set ``name``, ``kind`` (None for uncached operations),
    ``failure_message`` and ``required_fields`` and implement
    ``generate``. Cached operations also implement ``cache_fields``.
    """

    name: str = "ai"
    kind: Optional[str] = None
    failure_message: str = "AI request failed"
    required_fields: Tuple[str, ...] = ()

    def validate(self, body: Dict[str, Any]) -> None:
        """Raise ValidationError when a required field is missing or empty."""
        missing = [name for name in self.required_fields if _is_blank(body.get(name))]
        if missing:
            raise ValidationError(f"{', '.join(missing)} required")

    def fetch_context(self, body: Dict[str, Any], services: AIServices) -> Dict[str, Any]:
        """Load the rows the prompt is built from."""
        return {}

    def use_cache(self, body: Dict[str, Any]) -> bool:
        return self.kind is not None

    def cache_scope(self, body: Dict[str, Any], context: Dict[str, Any]) -> Optional[str]:
        return body.get("trip_id")

    def cache_fields(self, body: Dict[str, Any], context: Dict[str, Any]) -> Dict[str, Any]:
        """Ordered request fields that identify a cacheable result."""
        raise NotImplementedError(f"{self.name} does not define cache fields")

    def generate(
        self, body: Dict[str, Any], context: Dict[str, Any], services: AIServices
    ) -> Any:
        """Call the provider and return the JSON-ready result."""
        raise NotImplementedError

    def persist(self, body: Dict[str, Any], result: Any, services: AIServices) -> Dict[str, Any]:
        """
        Run side effects after a fresh result was generated.

        Returns:
            Extra fields merged into the response body
        """
        return {}

    def error_message(self, body: Dict[str, Any]) -> str:
        """Message returned when the provider or the database fails."""
        return self.failure_message

    def build_response(
        self, body: Dict[str, Any], result: Any, cached: bool, extras: Dict[str, Any]
    ) -> Dict[str, Any]:
        return {"result": result, "cached": cached, **extras}


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    return False


# =============================================================================
# Context helpers
# =============================================================================


def require_trip(services: AIServices, trip_id: str) -> Dict[str, Any]:
    """Fetch a visible trip or raise NotFoundError."""
    trip = services.repository.get_trip(trip_id)
    if trip is None:
        raise NotFoundError("Trip not found")
    return trip


def require_trip_plan(services: AIServices, body: Dict[str, Any]) -> Dict[str, Any]:
    """
    Fetch the trip and one of its plan versions.

    Returns:
        Context with 'trip' and 'plan'

    Raises:
        NotFoundError: If the trip is not visible or the plan version does
            not belong to it
    """
    trip = require_trip(services, body["trip_id"])
    plan = services.repository.get_plan_version(body["plan_version_id"])
    if plan is None or plan["trip_id"] != trip["id"]:
        raise NotFoundError("Plan version not found")
    return {"trip": trip, "plan": plan}
