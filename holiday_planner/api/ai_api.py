"""
FastAPI endpoints for the AI operations.

Every endpoint takes a JSON body and answers with
``{"result": ..., "cached": bool}`` plus operation-specific fields, or
``{"error": str}`` with the status of the failure. Adding a suggestion to
a plan answers with ``{"success": true, "type": ..., "item": ...}``.
"""

import logging
import uuid
from typing import Any, Dict, List, Literal, Optional

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from pydantic import AliasChoices, BaseModel, Field

from holiday_planner.api.dependencies import get_services
from holiday_planner.graph.build import run_ai_request
from holiday_planner.operations import OPERATIONS, AIServices
from holiday_planner.shared.errors import HolidayPlannerError, ProviderError, UpstreamError


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/ai", tags=["ai"])


# ============================================================================
# Request Models
# ============================================================================
# Presence of required fields is checked by the operation, so missing
# fields produce the same error body on every endpoint.


class DateRange(BaseModel):
    start: str = Field(description="Start date (YYYY-MM-DD)")
    end: str = Field(description="End date (YYYY-MM-DD)")


class Budget(BaseModel):
    min: float = Field(description="Lower bound")
    max: float = Field(description="Upper bound")
    currency: str = Field(default="GBP", description="Budget currency")


class ResearchRequest(BaseModel):
    """Destination research request."""

    query: Optional[str] = Field(default=None, description="What to research")
    type: Optional[str] = Field(
        default=None, description="hotel, activity, restaurant, transport or general"
    )
    trip_id: Optional[str] = Field(default=None, description="Trip the research belongs to")
    location: Optional[str] = Field(default=None)
    date_range: Optional[DateRange] = Field(default=None)
    budget: Optional[Budget] = Field(default=None)
    preferences: Optional[List[str]] = Field(default=None)


class CompareRequest(BaseModel):
    """Plan comparison request."""

    trip_id: Optional[str] = Field(default=None)
    plan_version_ids: Optional[List[str]] = Field(
        default=None, description="Plans to compare; all plans of the trip when omitted"
    )


class OptimiseRequest(BaseModel):
    trip_id: Optional[str] = Field(default=None)
    plan_version_id: Optional[str] = Field(default=None)


class SuggestionsRequest(BaseModel):
    trip_id: Optional[str] = Field(default=None)
    plan_version_id: Optional[str] = Field(default=None)
    request: Optional[str] = Field(default=None, description="What the user wants help with")


class ConversationMessage(BaseModel):
    role: Literal["user", "assistant"]
    content: str


class PlanChangeRequest(BaseModel):
    """Plan change turn. An empty history marks the opening turn."""

    trip_id: Optional[str] = Field(default=None)
    plan_version_id: Optional[str] = Field(default=None)
    item_type: Optional[str] = Field(default=None, description="Type of the item to change")
    current_item: Optional[Dict[str, Any]] = Field(default=None, description="Item being changed")
    change_request: Optional[str] = Field(default=None)
    destination: Optional[str] = Field(default=None, description="Overrides the trip destination")
    conversation_history: List[ConversationMessage] = Field(default_factory=list)


class GeneratePackingRequest(BaseModel):
    """Packing list request. Accepts camelCase aliases for the trip fields."""

    destination: Optional[str] = Field(default=None)
    start_date: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("start_date", "startDate")
    )
    end_date: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("end_date", "endDate")
    )
    traveller_count: Optional[int] = Field(
        default=None, ge=1, validation_alias=AliasChoices("traveller_count", "travellerCount")
    )
    activities: List[str] = Field(default_factory=list)
    itinerary: Optional[Dict[str, Any]] = Field(
        default=None, description="Optional days, transport and accommodations context"
    )
    trip_id: Optional[str] = Field(default=None)
    save_to_trip: bool = Field(default=False)


class ExtractLinkRequest(BaseModel):
    url: Optional[str] = Field(default=None)
    item_type: Optional[str] = Field(
        default=None, description="accommodation, transport, cost or itinerary_day"
    )


class GeneratePlanRequest(BaseModel):
    destination: Optional[str] = Field(default=None)
    start_date: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("start_date", "startDate")
    )
    end_date: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("end_date", "endDate")
    )
    traveller_count: Optional[int] = Field(
        default=None, ge=1, validation_alias=AliasChoices("traveller_count", "travellerCount")
    )
    preferences: Optional[str] = Field(default=None)


class AddToPlanRequest(BaseModel):
    """Accepted suggestion to write into a plan version."""

    trip_id: Optional[str] = Field(default=None)
    plan_version_id: Optional[str] = Field(default=None)
    suggestion_type: Optional[str] = Field(
        default=None, description="accommodation, activity, cost or decision"
    )
    data: Optional[Dict[str, Any]] = Field(
        default=None, description="The suggestion, with itinerary_day_id for activities"
    )


# ============================================================================
# Execution
# ============================================================================


def _execute(operation_name: str, request: BaseModel, services: AIServices):
    """
    Run one operation and map failures to error responses.

    Provider and upstream failures return the operation's generic message;
    the detail is only logged.
    """
    operation = OPERATIONS[operation_name]
    body = request.model_dump()
    request_id = uuid.uuid4().hex[:8]
    _log = f"[request={request_id}] [op={operation_name}] [api] "

    try:
        return run_ai_request(operation, body, services, request_id=request_id)
    except (ProviderError, UpstreamError) as e:
        logger.error(f"{_log}{type(e).__name__}: {e}")
        return JSONResponse(status_code=e.status_code, content={"error": operation.error_message(body)})
    except HolidayPlannerError as e:
        logger.info(f"{_log}Request rejected | status={e.status_code}, error={e}")
        return JSONResponse(status_code=e.status_code, content={"error": str(e)})
    except Exception as e:
        logger.exception(f"{_log}Unexpected failure: {e}")
        return JSONResponse(status_code=500, content={"error": operation.failure_message})


# ============================================================================
# Endpoints
# ============================================================================


@router.post("/research")
def research(request: ResearchRequest, services: AIServices = Depends(get_services)):
    """Research places and services, optionally within a trip."""
    return _execute("research", request, services)


@router.post("/compare")
def compare(request: CompareRequest, services: AIServices = Depends(get_services)):
    """Compare the plan versions of a trip."""
    return _execute("comparison", request, services)


@router.post("/optimise")
def optimise(request: OptimiseRequest, services: AIServices = Depends(get_services)):
    """Suggest savings for one plan version."""
    return _execute("optimization", request, services)


@router.post("/suggestions")
def suggestions(request: SuggestionsRequest, services: AIServices = Depends(get_services)):
    """Suggest itinerary improvements for one plan version."""
    return _execute("suggestions", request, services)


@router.post("/plan-change")
def plan_change(request: PlanChangeRequest, services: AIServices = Depends(get_services)):
    """
    Propose alternatives for one plan item.

    Follow-up turns carry the conversation history and are never cached.
    """
    return _execute("plan_change", request, services)


@router.post("/generate-packing")
def generate_packing(
    request: GeneratePackingRequest, services: AIServices = Depends(get_services)
):
    """Generate a packing list and optionally save it to the trip."""
    return _execute("packing", request, services)


@router.post("/extract-link")
def extract_link(request: ExtractLinkRequest, services: AIServices = Depends(get_services)):
    """Extract booking details from a web page."""
    return _execute("link_extraction", request, services)


@router.post("/generate-plan")
def generate_plan(request: GeneratePlanRequest, services: AIServices = Depends(get_services)):
    """Generate a complete plan from scratch."""
    return _execute("plan_generation", request, services)


@router.post("/add-to-plan")
def add_to_plan(request: AddToPlanRequest, services: AIServices = Depends(get_services)):
    """Write an accepted suggestion into a plan version."""
    return _execute("add_to_plan", request, services)
