"""Domain models for dishes assembled from ingredients."""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from cost_tracker.domain.ingredients import Ingredient


@dataclass(frozen=True)
class DishComponent:
    """An ingredient usage with the cost captured when it was added."""

    ingredient_id: UUID
    used_quantity: float
    used_cost: float
    ingredient: Ingredient | None = None
    id: UUID | None = None

    @property
    def cost(self) -> float:
        return self.used_cost


@dataclass(frozen=True)
class Dish:
    """An intermediate product.

    ``total_cost`` is the snapshot stored at the last commit or rebuild; it is
    not refreshed when ingredient prices change afterwards.
    """

    id: UUID
    name: str
    genre: str | None
    description: str | None
    total_cost: float
    components: tuple[DishComponent, ...] = ()
    created_at: datetime | None = None
    updated_at: datetime | None = None
