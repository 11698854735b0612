"""Services for managing purchased ingredients."""

import logging
from dataclasses import dataclass, replace
from typing import Protocol
from uuid import UUID

from cost_tracker.domain.events import ChangeAction, EntityKind, StoreEvent
from cost_tracker.domain.ingredients import Ingredient
from cost_tracker.domain.payloads import (
    IngredientPayload,
    IngredientUpdatePayload,
    validate_payload,
)
from cost_tracker.domain.queries import ListParams, SortOrder
from cost_tracker.services.events import EventHub

SORT_KEYS = frozenset({"name", "price", "unit_price", "created_at"})

_logger = logging.getLogger(__name__)


class IngredientRepository(Protocol):
    """Persistence interface for ingredients."""

    def list_ingredients(self, params: ListParams) -> list[Ingredient]:
        """Return ingredients matching the filters."""

    def get_ingredient(self, ingredient_id: UUID) -> Ingredient | None:
        """Return an ingredient by id, if present."""

    def get_ingredients(self, ingredient_ids: list[UUID]) -> list[Ingredient]:
        """Return the ingredients with the given ids that exist."""

    def create_ingredient(self, payload: dict[str, object]) -> Ingredient:
        """Create an ingredient and return it."""

    def update_ingredient(
        self, ingredient_id: UUID, payload: dict[str, object]
    ) -> Ingredient:
        """Update an ingredient and return it."""

    def delete_ingredient(self, ingredient_id: UUID) -> None:
        """Delete an ingredient."""


@dataclass
class IngredientService:
    """Application service for ingredient operations."""

    repository: IngredientRepository
    events: EventHub

    def list_ingredients(self, params: ListParams | None = None) -> list[Ingredient]:
        """List ingredients, sorting by unit price locally when asked to."""
        resolved = _checked_params(params or ListParams())
        if resolved.sort_by != "unit_price":
            return self.repository.list_ingredients(resolved)
        # Unit price is derived, so the page is cut after sorting.
        rows = self.repository.list_ingredients(
            replace(resolved, sort_by="created_at", limit=None, offset=0)
        )
        ranked = _sort_by_unit_price(rows, resolved.sort_order)
        end = None if resolved.limit is None else resolved.offset + resolved.limit
        return ranked[resolved.offset : end]

    def search(
        self,
        name: str,
        sort_key: str = "created_at",
        sort_order: SortOrder = SortOrder.ASC,
    ) -> list[Ingredient]:
        """Return ingredients whose name contains ``name``."""
        return self.list_ingredients(
            ListParams(name=name, sort_by=sort_key, sort_order=sort_order)
        )

    def get_ingredient(self, ingredient_id: UUID) -> Ingredient | None:
        """Return an ingredient by id."""
        return self.repository.get_ingredient(ingredient_id)

    def create_ingredient(self, payload: dict[str, object]) -> Ingredient:
        """Validate and create an ingredient."""
        request = validate_payload(IngredientPayload, payload)
        ingredient = self.repository.create_ingredient(request.model_dump(mode="json"))
        _logger.info("Created ingredient %s (%s)", ingredient.id, ingredient.name)
        self.events.publish(
            StoreEvent(
                EntityKind.INGREDIENT, ChangeAction.CREATED, ingredient.id, ingredient
            )
        )
        return ingredient

    def update_ingredient(
        self, ingredient_id: UUID, payload: dict[str, object]
    ) -> Ingredient:
        """Validate and apply a partial update.

        Dishes that already use the ingredient keep their stored costs until
        they are rebuilt.
        """
        request = validate_payload(IngredientUpdatePayload, payload)
        ingredient = self.repository.update_ingredient(
            ingredient_id, request.model_dump(mode="json", exclude_none=True)
        )
        self.events.publish(
            StoreEvent(
                EntityKind.INGREDIENT, ChangeAction.UPDATED, ingredient.id, ingredient
            )
        )
        return ingredient

    def delete_ingredient(self, ingredient_id: UUID) -> None:
        """Delete an ingredient."""
        self.repository.delete_ingredient(ingredient_id)
        _logger.info("Deleted ingredient %s", ingredient_id)
        self.events.publish(
            StoreEvent(EntityKind.INGREDIENT, ChangeAction.DELETED, ingredient_id)
        )


def _checked_params(params: ListParams) -> ListParams:
    if params.sort_by not in SORT_KEYS:
        return replace(params, sort_by="created_at")
    return params


def _sort_by_unit_price(
    items: list[Ingredient], sort_order: SortOrder
) -> list[Ingredient]:
    return sorted(
        items,
        key=lambda item: item.unit_price,
        reverse=sort_order is SortOrder.DESC,
    )
