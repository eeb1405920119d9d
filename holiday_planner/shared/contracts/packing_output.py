"""Packing list output contract."""

from typing import Optional
from pydantic import BaseModel, Field


PACKING_CATEGORIES = [
    "Clothes",
    "Toiletries",
    "Electronics",
    "Documents",
    "Kids",
    "Beach/Pool",
    "Medications",
    "Misc",
]


class PackingItem(BaseModel):
    """A single item on a generated packing list."""

    category: str = Field(description="One of PACKING_CATEGORIES")
    name: str = Field(description="Item name")
    quantity: int = Field(default=1, ge=1, description="How many to pack")
    linked_to: Optional[str] = Field(
        default=None,
        alias="linkedTo",
        description="Activity or day the item is for, e.g. 'Day 5: Boat trip'",
    )

    model_config = {"populate_by_name": True}
