"""Services for completed foods assembled from dishes."""

import logging
from dataclasses import dataclass, replace
from typing import Protocol
from uuid import UUID

from cost_tracker.domain.errors import NotFoundError
from cost_tracker.domain.events import ChangeAction, EntityKind, StoreEvent
from cost_tracker.domain.foods import CompletedFood, FoodComponent
from cost_tracker.domain.payloads import (
    CompletedFoodPayload,
    CompletedFoodUpdatePayload,
    FoodComponentPayload,
    validate_payload,
)
from cost_tracker.domain.profitability import ProfitSummary
from cost_tracker.domain.queries import ListParams
from cost_tracker.services.costing import component_cost, total_cost
from cost_tracker.services.dishes import DishRepository, ensure_unique
from cost_tracker.services.events import EventHub
from cost_tracker.services.profitability import classify

SORT_KEYS = frozenset({"name", "price", "total_cost", "created_at"})

_logger = logging.getLogger(__name__)


class CompletedFoodRepository(Protocol):
    """Persistence interface for completed foods and their dish usages."""

    def list_foods(self, params: ListParams) -> list[CompletedFood]:
        """Return completed foods matching the filters, without components."""

    def get_food(self, food_id: UUID) -> CompletedFood | None:
        """Return a completed food with its components, if present."""

    def create_food(
        self, row: dict[str, object], components: list[FoodComponent]
    ) -> CompletedFood:
        """Create a completed food with its components and return it."""

    def update_food(
        self,
        food_id: UUID,
        row: dict[str, object],
        components: list[FoodComponent] | None,
    ) -> CompletedFood:
        """Update a completed food, replacing components when given."""

    def delete_food(self, food_id: UUID) -> None:
        """Delete a completed food and its components."""


@dataclass
class CompletedFoodService:
    """Application service for completed food operations."""

    repository: CompletedFoodRepository
    dish_repository: DishRepository
    events: EventHub

    def list_foods(self, params: ListParams | None = None) -> list[CompletedFood]:
        """List completed foods."""
        resolved = params or ListParams()
        if resolved.sort_by not in SORT_KEYS:
            resolved = replace(resolved, sort_by="created_at")
        return self.repository.list_foods(resolved)

    def get_food(self, food_id: UUID) -> CompletedFood | None:
        """Return a completed food with its components."""
        return self.repository.get_food(food_id)

    def create_food(self, payload: dict[str, object]) -> CompletedFood:
        """Validate a completed food request, price its dishes and persist it."""
        request = validate_payload(CompletedFoodPayload, payload)
        components = self._price_components(request.dishes)
        row = {
            "name": request.name,
            "price": request.price,
            "description": request.description,
            "total_cost": total_cost(components),
        }
        food = self.repository.create_food(row, components)
        _logger.info(
            "Created completed food %s with total cost %.2f", food.id, food.total_cost
        )
        self.events.publish(
            StoreEvent(EntityKind.COMPLETED_FOOD, ChangeAction.CREATED, food.id, food)
        )
        return food

    def update_food(self, food_id: UUID, payload: dict[str, object]) -> CompletedFood:
        """Apply a partial update; a new dish list re-snapshots the cost."""
        request = validate_payload(CompletedFoodUpdatePayload, payload)
        row: dict[str, object] = request.model_dump(
            mode="json", exclude_none=True, exclude={"dishes"}
        )
        components = None
        if request.dishes is not None:
            components = self._price_components(request.dishes)
            row["total_cost"] = total_cost(components)
        food = self.repository.update_food(food_id, row, components)
        self.events.publish(
            StoreEvent(EntityKind.COMPLETED_FOOD, ChangeAction.UPDATED, food.id, food)
        )
        return food

    def rebuild_food(self, food_id: UUID) -> CompletedFood:
        """Re-snapshot usage costs from the dishes' current stored totals."""
        food = self.repository.get_food(food_id)
        if food is None:
            raise NotFoundError("completed food", food_id)
        dishes = {
            dish.id: dish
            for dish in self.dish_repository.get_dishes(
                [component.dish_id for component in food.components]
            )
        }
        components = []
        for component in food.components:
            dish = dishes.get(component.dish_id)
            if dish is None:
                components.append(component)
                continue
            components.append(
                replace(
                    component,
                    dish=dish,
                    usage_cost=component_cost(
                        dish.total_cost, component.usage_quantity
                    ),
                )
            )
        rebuilt = self.repository.update_food(
            food_id, {"total_cost": total_cost(components)}, components
        )
        self.events.publish(
            StoreEvent(
                EntityKind.COMPLETED_FOOD, ChangeAction.UPDATED, rebuilt.id, rebuilt
            )
        )
        return rebuilt

    def delete_food(self, food_id: UUID) -> None:
        """Delete a completed food together with its components."""
        self.repository.delete_food(food_id)
        self.events.publish(
            StoreEvent(EntityKind.COMPLETED_FOOD, ChangeAction.DELETED, food_id)
        )

    @staticmethod
    def profitability(food: CompletedFood) -> ProfitSummary:
        """Classify a completed food's price against its stored total cost."""
        return classify(food.price, food.total_cost)

    def _price_components(
        self, items: list[FoodComponentPayload]
    ) -> list[FoodComponent]:
        ids = [item.dish_id for item in items]
        ensure_unique(ids)
        dishes = {dish.id: dish for dish in self.dish_repository.get_dishes(ids)}
        components = []
        for item in items:
            dish = dishes.get(item.dish_id)
            if dish is None:
                raise NotFoundError("dish", item.dish_id)
            components.append(
                FoodComponent(
                    dish_id=dish.id,
                    usage_quantity=item.usage_quantity,
                    usage_unit=item.usage_unit,
                    usage_cost=component_cost(dish.total_cost, item.usage_quantity),
                    note=item.description,
                    dish=dish,
                )
            )
        return components
