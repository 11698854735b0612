"""Services for dishes assembled from ingredients."""

import logging
from dataclasses import dataclass, replace
from typing import Protocol
from uuid import UUID

from cost_tracker.domain.dishes import Dish, DishComponent
from cost_tracker.domain.errors import DuplicateComponentError, NotFoundError
from cost_tracker.domain.events import ChangeAction, EntityKind, StoreEvent
from cost_tracker.domain.payloads import (
    DishComponentPayload,
    DishPayload,
    DishUpdatePayload,
    validate_payload,
)
from cost_tracker.domain.queries import ListParams
from cost_tracker.services.costing import component_cost, total_cost
from cost_tracker.services.events import EventHub
from cost_tracker.services.ingredients import IngredientRepository

SORT_KEYS = frozenset({"name", "total_cost", "created_at"})

_logger = logging.getLogger(__name__)


class DishRepository(Protocol):
    """Persistence interface for dishes and their ingredient usages."""

    def list_dishes(self, params: ListParams) -> list[Dish]:
        """Return dishes matching the filters, without components."""

    def get_dish(self, dish_id: UUID) -> Dish | None:
        """Return a dish with its components, if present."""

    def get_dishes(self, dish_ids: list[UUID]) -> list[Dish]:
        """Return the dishes with the given ids that exist."""

    def create_dish(
        self, row: dict[str, object], components: list[DishComponent]
    ) -> Dish:
        """Create a dish with its components and return it."""

    def update_dish(
        self,
        dish_id: UUID,
        row: dict[str, object],
        components: list[DishComponent] | None,
    ) -> Dish:
        """Update a dish, replacing its components when given, and return it."""

    def delete_dish(self, dish_id: UUID) -> None:
        """Delete a dish and its components."""


@dataclass
class DishService:
    """Application service for dish operations.

    Component costs and the dish total are computed here when a dish is
    written and stored as a snapshot. Reads return the stored values.
    """

    repository: DishRepository
    ingredient_repository: IngredientRepository
    events: EventHub

    def list_dishes(self, params: ListParams | None = None) -> list[Dish]:
        """List dishes."""
        resolved = params or ListParams()
        if resolved.sort_by not in SORT_KEYS:
            resolved = replace(resolved, sort_by="created_at")
        return self.repository.list_dishes(resolved)

    def get_dish(self, dish_id: UUID) -> Dish | None:
        """Return a dish with its components."""
        return self.repository.get_dish(dish_id)

    def create_dish(self, payload: dict[str, object]) -> Dish:
        """Validate a dish request, price its components and persist it."""
        request = validate_payload(DishPayload, payload)
        components = self._price_components(request.ingredients)
        row = {
            "name": request.name,
            "genre": request.genre,
            "description": request.description,
            "total_cost": total_cost(components),
        }
        dish = self.repository.create_dish(row, components)
        _logger.info("Created dish %s with total cost %.2f", dish.id, dish.total_cost)
        self.events.publish(
            StoreEvent(EntityKind.DISH, ChangeAction.CREATED, dish.id, dish)
        )
        return dish

    def update_dish(self, dish_id: UUID, payload: dict[str, object]) -> Dish:
        """Apply a partial update; a new ingredient list re-snapshots the cost."""
        request = validate_payload(DishUpdatePayload, payload)
        row: dict[str, object] = request.model_dump(
            mode="json", exclude_none=True, exclude={"ingredients"}
        )
        components = None
        if request.ingredients is not None:
            components = self._price_components(request.ingredients)
            row["total_cost"] = total_cost(components)
        dish = self.repository.update_dish(dish_id, row, components)
        self.events.publish(
            StoreEvent(EntityKind.DISH, ChangeAction.UPDATED, dish.id, dish)
        )
        return dish

    def rebuild_dish(self, dish_id: UUID) -> Dish:
        """Re-snapshot component costs from current ingredient prices.

        Components whose ingredient no longer exists keep their stored cost.
        """
        dish = self.repository.get_dish(dish_id)
        if dish is None:
            raise NotFoundError("dish", dish_id)
        ingredients = {
            ingredient.id: ingredient
            for ingredient in self.ingredient_repository.get_ingredients(
                [component.ingredient_id for component in dish.components]
            )
        }
        components = []
        for component in dish.components:
            ingredient = ingredients.get(component.ingredient_id)
            if ingredient is None:
                components.append(component)
                continue
            components.append(
                replace(
                    component,
                    ingredient=ingredient,
                    used_cost=component_cost(
                        ingredient.unit_price, component.used_quantity
                    ),
                )
            )
        rebuilt = self.repository.update_dish(
            dish_id, {"total_cost": total_cost(components)}, components
        )
        _logger.info(
            "Rebuilt dish %s: total cost %.2f -> %.2f",
            dish_id,
            dish.total_cost,
            rebuilt.total_cost,
        )
        self.events.publish(
            StoreEvent(EntityKind.DISH, ChangeAction.UPDATED, rebuilt.id, rebuilt)
        )
        return rebuilt

    def delete_dish(self, dish_id: UUID) -> None:
        """Delete a dish together with its components."""
        self.repository.delete_dish(dish_id)
        self.events.publish(StoreEvent(EntityKind.DISH, ChangeAction.DELETED, dish_id))

    def _price_components(
        self, items: list[DishComponentPayload]
    ) -> list[DishComponent]:
        ids = [item.ingredient_id for item in items]
        ensure_unique(ids)
        ingredients = {
            ingredient.id: ingredient
            for ingredient in self.ingredient_repository.get_ingredients(ids)
        }
        components = []
        for item in items:
            ingredient = ingredients.get(item.ingredient_id)
            if ingredient is None:
                raise NotFoundError("ingredient", item.ingredient_id)
            components.append(
                DishComponent(
                    ingredient_id=ingredient.id,
                    used_quantity=item.used_quantity,
                    used_cost=component_cost(ingredient.unit_price, item.used_quantity),
                    ingredient=ingredient,
                )
            )
        return components


def ensure_unique(ids: list[UUID]) -> None:
    """Reject a component list that references the same item twice."""
    seen: set[UUID] = set()
    for item_id in ids:
        if item_id in seen:
            raise DuplicateComponentError(item_id)
        seen.add(item_id)
