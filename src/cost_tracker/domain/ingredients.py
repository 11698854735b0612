"""Domain models for purchased ingredients."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from uuid import UUID

from cost_tracker.services.costing import unit_price


class Genre(str, Enum):
    """Category tags for ingredients."""

    MEAT = "meat"
    VEGETABLE = "vegetable"
    SEASONING = "seasoning"
    SAUCE = "sauce"
    FROZEN = "frozen"
    DRINK = "drink"


@dataclass(frozen=True)
class Ingredient:
    """An ingredient bought at a store for a price per quantity of a unit."""

    id: UUID
    name: str
    store: str
    quantity: float
    unit: str
    price: float
    genre: str
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def unit_price(self) -> float:
        """Price of one unit, 0 when the purchased quantity is not positive."""
        return unit_price(self.price, self.quantity)
