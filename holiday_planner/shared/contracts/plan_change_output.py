"""
Plan change output contract.

Alternatives proposed for a single plan item, each with the data needed
to apply it to the plan.
"""

from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field


class PlanChangeOption(BaseModel):
    """One alternative for the item being changed."""

    name: str = Field(description="Option name")
    type: Optional[str] = Field(default=None, description="Item type, e.g. 'accommodation'")
    cost: Optional[float] = Field(default=None, description="Estimated cost")
    currency: str = Field(default="GBP", description="Cost currency")
    location: Optional[str] = Field(default=None, description="Location")
    description: Optional[str] = Field(default=None, description="Description")
    pros: List[str] = Field(default_factory=list, description="Advantages")
    cons: List[str] = Field(default_factory=list, description="Disadvantages")
    apply_data: Dict[str, Any] = Field(
        default_factory=dict,
        alias="applyData",
        description="Row data to write when the option is applied",
    )

    model_config = {"populate_by_name": True}


class PlanChangeResult(BaseModel):
    """Provider answer to a plan change request."""

    text: str = Field(description="Explanation shown to the user")
    options: List[PlanChangeOption] = Field(
        default_factory=list, description="Proposed alternatives"
    )
