"""Domain models for completed foods assembled from dishes."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from uuid import UUID

from cost_tracker.domain.dishes import Dish


class UsageUnit(str, Enum):
    """How a dish usage quantity is meant.

    ``ratio`` is a fraction of one dish batch, ``serving`` a whole multiple.
    Both multiply the dish total cost the same way.
    """

    RATIO = "ratio"
    SERVING = "serving"


@dataclass(frozen=True)
class FoodComponent:
    """A dish usage with the cost captured when it was added."""

    dish_id: UUID
    usage_quantity: float
    usage_unit: UsageUnit
    usage_cost: float
    note: str | None = None
    dish: Dish | None = None
    id: UUID | None = None

    @property
    def cost(self) -> float:
        return self.usage_cost


@dataclass(frozen=True)
class CompletedFood:
    """A sellable product, optionally priced."""

    id: UUID
    name: str
    description: str | None
    price: float | None
    total_cost: float
    components: tuple[FoodComponent, ...] = ()
    created_at: datetime | None = None
    updated_at: datetime | None = None
