"""Staging builders for composing dishes and completed foods before commit.

A builder holds one in-progress composition. The running total is derived
from the staged components on every read; nothing is persisted until
:meth:`CompositionBuilder.commit` succeeds.

States::

    EMPTY -> STAGING -> SUBMITTING -> COMMITTED
                ^            |
                +-- failure -+
"""

import asyncio
import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import Generic, Protocol, TypeVar
from uuid import UUID

from cost_tracker.domain.dishes import Dish
from cost_tracker.domain.errors import (
    CommitInProgressError,
    DuplicateComponentError,
    NotFoundError,
    ValidationError,
)
from cost_tracker.domain.foods import CompletedFood, UsageUnit
from cost_tracker.domain.ingredients import Ingredient
from cost_tracker.domain.payloads import check_usage_quantity
from cost_tracker.domain.profitability import ProfitSummary
from cost_tracker.services.costing import component_cost, total_cost
from cost_tracker.services.profitability import classify

_logger = logging.getLogger(__name__)


class BuilderState(str, Enum):
    EMPTY = "empty"
    STAGING = "staging"
    SUBMITTING = "submitting"
    COMMITTED = "committed"


@dataclass(frozen=True)
class StagedComponent:
    """One staged usage with the cost computed when it was staged."""

    candidate_id: UUID
    name: str
    quantity: float
    cost: float
    unit: UsageUnit | None = None
    note: str | None = None


class DishWriter(Protocol):
    def create_dish(self, payload: dict[str, object]) -> Dish:
        """Persist a new dish."""

    def update_dish(self, dish_id: UUID, payload: dict[str, object]) -> Dish:
        """Persist changes to an existing dish."""


class CompletedFoodWriter(Protocol):
    def create_food(self, payload: dict[str, object]) -> CompletedFood:
        """Persist a new completed food."""

    def update_food(
        self, food_id: UUID, payload: dict[str, object]
    ) -> CompletedFood:
        """Persist changes to an existing completed food."""


CandidateT = TypeVar("CandidateT", Ingredient, Dish)
EntityT = TypeVar("EntityT", Dish, CompletedFood)


class CompositionBuilder(Generic[CandidateT, EntityT]):
    """State machine shared by the dish and completed food builders."""

    _candidate_kind = "component"

    def __init__(self, name: str = "", description: str | None = None) -> None:
        self.name = name
        self.description = description
        self.state = BuilderState.EMPTY
        self.last_error: str | None = None
        self.editing_id: UUID | None = None
        self._components: list[StagedComponent] = []
        self._candidates: dict[UUID, CandidateT] = {}

    @property
    def components(self) -> tuple[StagedComponent, ...]:
        return tuple(self._components)

    @property
    def is_submitting(self) -> bool:
        """True while a commit is in flight; the commit control stays disabled."""
        return self.state is BuilderState.SUBMITTING

    def set_name(self, name: str) -> None:
        self._ensure_mutable()
        self.name = name

    def set_description(self, description: str | None) -> None:
        self._ensure_mutable()
        self.description = description

    def add_component(
        self,
        candidate: CandidateT,
        quantity: float,
        unit: UsageUnit | None = None,
        note: str | None = None,
    ) -> StagedComponent:
        """Stage a usage of ``candidate``.

        A candidate can be staged once; to change its quantity use
        :meth:`update_component_quantity` or remove and add it again.
        """
        self._ensure_mutable()
        if candidate.id in self._candidates:
            raise DuplicateComponentError(candidate.id)
        resolved_unit = self._resolve_unit(unit)
        self._check_quantity(quantity, resolved_unit)
        component = StagedComponent(
            candidate_id=candidate.id,
            name=candidate.name,
            quantity=quantity,
            cost=component_cost(self._base_value(candidate), quantity),
            unit=resolved_unit,
            note=note,
        )
        self._components.append(component)
        self._candidates[candidate.id] = candidate
        self.state = BuilderState.STAGING
        return component

    def remove_component(self, index: int) -> StagedComponent:
        """Remove a staged component; the builder empties with the last one."""
        self._ensure_mutable()
        self._check_index(index)
        component = self._components.pop(index)
        self._candidates.pop(component.candidate_id, None)
        if not self._components:
            self.state = BuilderState.EMPTY
        return component

    def update_component_quantity(
        self, index: int, new_quantity: float
    ) -> StagedComponent:
        """Change a staged quantity and recompute that component's cost."""
        self._ensure_mutable()
        self._check_index(index)
        current = self._components[index]
        self._check_quantity(new_quantity, current.unit)
        candidate = self._candidates[current.candidate_id]
        updated = replace(
            current,
            quantity=new_quantity,
            cost=component_cost(self._base_value(candidate), new_quantity),
        )
        self._components[index] = updated
        return updated

    def running_total(self) -> float:
        """Total cost of everything currently staged."""
        return total_cost(self._components)

    def projection(self, selling_price: float | None = None) -> ProfitSummary:
        """Classify a selling price against the running total."""
        return classify(self._resolve_price(selling_price), self.running_total())

    def projected_profit(self, selling_price: float | None = None) -> float:
        """Raw projected profit; negative when the price does not cover cost."""
        return self.projection(selling_price).profit_raw

    def projected_profit_rate(self, selling_price: float | None = None) -> float:
        """Projected profit rate in percent."""
        return self.projection(selling_price).profit_rate

    def can_commit(self) -> bool:
        """True when the composition has a name and at least one component."""
        return bool(self.name.strip()) and bool(self._components)

    async def commit(self) -> EntityT:
        """Persist the composition.

        Staged data is kept when the store call fails; the builder returns to
        STAGING with ``last_error`` set and the error is re-raised.
        """
        if self.state is BuilderState.SUBMITTING:
            raise CommitInProgressError("A commit is already in progress")
        if not self.can_commit():
            raise ValidationError(
                "A name and at least one component are required to commit"
            )
        payload = self.payload()
        editing_id = self.editing_id
        self.state = BuilderState.SUBMITTING
        self.last_error = None
        try:
            entity = await asyncio.to_thread(self._persist, editing_id, payload)
        except Exception as exc:
            self.state = BuilderState.STAGING
            self.last_error = str(exc)
            _logger.warning("Commit of %r failed: %s", self.name, exc)
            raise
        _logger.info("Committed %r as %s", self.name, entity.id)
        self._reset()
        self.state = BuilderState.COMMITTED
        return entity

    def payload(self) -> dict[str, object]:
        """Build the create/update request for the staged composition."""
        raise NotImplementedError

    def _load_components(
        self,
        entity_id: UUID,
        name: str,
        description: str | None,
        staged: list[
            tuple[CandidateT | None, UUID, float, UsageUnit | None, str | None]
        ],
    ) -> None:
        self._ensure_mutable()
        seen: set[UUID] = set()
        for candidate, candidate_id, quantity, unit, _ in staged:
            if candidate is None:
                raise NotFoundError(self._candidate_kind, candidate_id)
            if candidate.id in seen:
                raise DuplicateComponentError(candidate.id)
            seen.add(candidate.id)
            self._check_quantity(quantity, self._resolve_unit(unit))
        # Nothing below can fail, so a rejected load keeps the current staging.
        self._reset()
        self.name = name
        self.description = description
        for candidate, _, quantity, unit, note in staged:
            self.add_component(candidate, quantity, unit=unit, note=note)
        self.editing_id = entity_id

    def _reset(self) -> None:
        self.name = ""
        self.description = None
        self.editing_id = None
        self._components.clear()
        self._candidates.clear()
        self.state = BuilderState.EMPTY

    def _ensure_mutable(self) -> None:
        if self.state is BuilderState.SUBMITTING:
            raise CommitInProgressError("The composition is being submitted")

    def _check_index(self, index: int) -> None:
        if not 0 <= index < len(self._components):
            raise ValidationError(f"No staged component at index {index}", "index")

    def _resolve_price(self, selling_price: float | None) -> float | None:
        return selling_price

    def _base_value(self, candidate: CandidateT) -> float:
        raise NotImplementedError

    def _resolve_unit(self, unit: UsageUnit | None) -> UsageUnit | None:
        return unit

    def _check_quantity(self, quantity: float, unit: UsageUnit | None) -> None:
        if quantity <= 0:
            raise ValidationError("Quantity must be greater than 0", "quantity")

    def _persist(self, editing_id: UUID | None, payload: dict[str, object]) -> EntityT:
        raise NotImplementedError


class DishBuilder(CompositionBuilder[Ingredient, Dish]):
    """Stages ingredient usages for a dish, priced at the ingredient unit price."""

    _candidate_kind = "ingredient"

    def __init__(
        self,
        writer: DishWriter,
        name: str = "",
        genre: str | None = None,
        description: str | None = None,
    ) -> None:
        super().__init__(name=name, description=description)
        self.writer = writer
        self.genre = genre

    def load(self, dish: Dish) -> None:
        """Stage an existing dish for editing, re-pricing at current prices."""
        self._load_components(
            dish.id,
            dish.name,
            dish.description,
            [
                (c.ingredient, c.ingredient_id, c.used_quantity, None, None)
                for c in dish.components
            ],
        )
        self.genre = dish.genre

    def set_genre(self, genre: str | None) -> None:
        self._ensure_mutable()
        self.genre = genre

    def payload(self) -> dict[str, object]:
        return {
            "name": self.name.strip(),
            "genre": self.genre,
            "description": self.description,
            "ingredients": [
                {
                    "ingredient_id": str(component.candidate_id),
                    "used_quantity": component.quantity,
                }
                for component in self._components
            ],
        }

    def _reset(self) -> None:
        super()._reset()
        self.genre = None

    def _base_value(self, candidate: Ingredient) -> float:
        return candidate.unit_price

    def _persist(self, editing_id: UUID | None, payload: dict[str, object]) -> Dish:
        if editing_id is None:
            return self.writer.create_dish(payload)
        return self.writer.update_dish(editing_id, payload)


class CompletedFoodBuilder(CompositionBuilder[Dish, CompletedFood]):
    """Stages dish usages for a completed food, priced at the dish total cost."""

    _candidate_kind = "dish"

    def __init__(
        self,
        writer: CompletedFoodWriter,
        name: str = "",
        price: float | None = None,
        description: str | None = None,
    ) -> None:
        super().__init__(name=name, description=description)
        self.writer = writer
        self.price: float | None = None
        self.set_price(price)

    def set_price(self, price: float | None) -> None:
        """Set the selling price; None leaves the food unpriced."""
        self._ensure_mutable()
        if price is not None and price < 0:
            raise ValidationError("Price must not be negative", "price")
        self.price = price

    def load(self, food: CompletedFood) -> None:
        """Stage an existing completed food for editing."""
        self._load_components(
            food.id,
            food.name,
            food.description,
            [
                (c.dish, c.dish_id, c.usage_quantity, c.usage_unit, c.note)
                for c in food.components
            ],
        )
        self.price = food.price

    def payload(self) -> dict[str, object]:
        return {
            "name": self.name.strip(),
            "price": self.price,
            "description": self.description,
            "dishes": [
                {
                    "dish_id": str(component.candidate_id),
                    "usage_quantity": component.quantity,
                    "usage_unit": (component.unit or UsageUnit.SERVING).value,
                    "description": component.note,
                }
                for component in self._components
            ],
        }

    def _reset(self) -> None:
        super()._reset()
        self.price = None

    def _resolve_price(self, selling_price: float | None) -> float | None:
        return self.price if selling_price is None else selling_price

    def _base_value(self, candidate: Dish) -> float:
        return candidate.total_cost

    def _resolve_unit(self, unit: UsageUnit | None) -> UsageUnit | None:
        return unit or UsageUnit.SERVING

    def _check_quantity(self, quantity: float, unit: UsageUnit | None) -> None:
        check_usage_quantity(quantity, unit or UsageUnit.SERVING)

    def _persist(
        self, editing_id: UUID | None, payload: dict[str, object]
    ) -> CompletedFood:
        if editing_id is None:
            return self.writer.create_food(payload)
        return self.writer.update_food(editing_id, payload)
