"""
Research output contract.

Structured form of a research answer: the provider's text plus the
suggestions that could be recognised in it.
"""

from typing import List, Optional
from pydantic import BaseModel, Field


class CostRange(BaseModel):
    """A price range quoted for a suggestion."""

    min: float = Field(description="Lower bound")
    max: float = Field(description="Upper bound")


class Suggestion(BaseModel):
    """A single place or service recommended by the research answer."""

    name: str = Field(description="Name of the place or business")
    cost: Optional[float] = Field(default=None, description="Quoted cost in GBP")
    cost_range: Optional[CostRange] = Field(
        default=None, alias="costRange", description="Quoted price range in GBP"
    )
    location: Optional[str] = Field(default=None, description="Location or area")
    description: Optional[str] = Field(default=None, description="Short description")
    pros: Optional[List[str]] = Field(default=None, description="Advantages")
    cons: Optional[List[str]] = Field(default=None, description="Disadvantages")

    model_config = {"populate_by_name": True}


class ResearchResult(BaseModel):
    """Full research answer."""

    text: str = Field(description="Provider response text")
    suggestions: List[Suggestion] = Field(
        default_factory=list, description="Suggestions parsed from the text"
    )
