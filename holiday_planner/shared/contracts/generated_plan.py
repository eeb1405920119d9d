"""
Generated plan contract.

Defines the structure of a complete holiday plan produced from scratch
by the provider.
"""

from typing import List, Optional
from pydantic import BaseModel, Field


class Coordinates(BaseModel):
    lat: float
    lng: float


class GeneratedActivity(BaseModel):
    name: str
    time: Optional[str] = None
    cost: Optional[float] = None


class GeneratedDay(BaseModel):
    """A single itinerary day."""

    day_number: int = Field(ge=1, description="Day number (1-indexed)")
    date: Optional[str] = Field(default=None, description="Date in YYYY-MM-DD format")
    location: str = Field(description="City or area")
    location_coordinates: Optional[Coordinates] = Field(default=None)
    icon: Optional[str] = Field(default=None, description="Emoji shown on the day card")
    color: Optional[str] = Field(default=None, description="Hex colour of the day card")
    activities: List[GeneratedActivity] = Field(default_factory=list)
    notes: Optional[str] = Field(default=None)
    drive_time: Optional[str] = Field(default=None, description="e.g. '~2 hrs'")


class GeneratedAccommodation(BaseModel):
    name: str
    type: str
    location: str
    check_in: str
    check_out: str
    cost: float
    notes: Optional[str] = None


class GeneratedTransport(BaseModel):
    type: str
    provider: str
    details: str
    cost: float
    date: str


class GeneratedCost(BaseModel):
    category: str
    item: str
    amount: float


class GeneratedPlan(BaseModel):
    """Complete generated plan."""

    days: List[GeneratedDay] = Field(default_factory=list)
    accommodations: List[GeneratedAccommodation] = Field(default_factory=list)
    transport: List[GeneratedTransport] = Field(default_factory=list)
    estimated_costs: List[GeneratedCost] = Field(default_factory=list)
