"""Tests for the composition staging builders."""

import asyncio
import time
from dataclasses import dataclass, field
from uuid import UUID, uuid4

import pytest

from cost_tracker.domain.dishes import Dish, DishComponent
from cost_tracker.domain.errors import (
    CommitInProgressError,
    DuplicateComponentError,
    NotFoundError,
    PersistenceError,
    ValidationError,
)
from cost_tracker.domain.foods import CompletedFood, FoodComponent, UsageUnit
from cost_tracker.services.builder import (
    BuilderState,
    CompletedFoodBuilder,
    DishBuilder,
)
from tests.conftest import InMemoryIngredientRepository, make_dish, make_ingredient


@dataclass
class FailingDishWriter:
    calls: int = 0

    def create_dish(self, payload: dict[str, object]) -> Dish:
        self.calls += 1
        raise PersistenceError("Failed to create dish: connection reset")

    def update_dish(self, dish_id: UUID, payload: dict[str, object]) -> Dish:
        raise PersistenceError("Failed to update dish")


@dataclass
class SlowDishWriter:
    payloads: list[dict[str, object]] = field(default_factory=list)

    def create_dish(self, payload: dict[str, object]) -> Dish:
        time.sleep(0.05)
        self.payloads.append(payload)
        return make_dish(name=str(payload["name"]))

    def update_dish(self, dish_id: UUID, payload: dict[str, object]) -> Dish:
        return make_dish(id=dish_id)


class FailingFoodWriter:
    def create_food(self, payload: dict[str, object]) -> CompletedFood:
        raise PersistenceError("Failed to create completed food")

    def update_food(
        self, food_id: UUID, payload: dict[str, object]
    ) -> CompletedFood:
        raise PersistenceError("Failed to update completed food")


def _stock(repository: InMemoryIngredientRepository) -> tuple:
    onion = repository.add(make_ingredient(name="Onion", price=100.0, quantity=100.0))
    pork = repository.add(make_ingredient(name="Pork", price=300.0, quantity=100.0))
    return onion, pork


def test_dish_builder_stages_and_commits(dish_service, ingredient_repository) -> None:
    onion, pork = _stock(ingredient_repository)
    builder = DishBuilder(dish_service, name="Stir fry")
    assert builder.state is BuilderState.EMPTY

    builder.add_component(onion, 50.0)
    builder.add_component(pork, 25.0)

    assert builder.state is BuilderState.STAGING
    assert [c.cost for c in builder.components] == [50.0, 75.0]
    assert builder.running_total() == 125.0

    dish = asyncio.run(builder.commit())

    assert dish.total_cost == pytest.approx(125.0, abs=1e-9)
    assert dish.total_cost == pytest.approx(sum(c.used_cost for c in dish.components))
    assert builder.state is BuilderState.COMMITTED
    assert builder.components == ()
    assert builder.name == ""


def test_duplicate_component_is_rejected_without_mutation(
    ingredient_repository,
) -> None:
    onion, _ = _stock(ingredient_repository)
    builder = DishBuilder(SlowDishWriter(), name="Soup")
    builder.add_component(onion, 50.0)

    with pytest.raises(DuplicateComponentError):
        builder.add_component(onion, 10.0)

    assert len(builder.components) == 1
    assert builder.components[0].quantity == 50.0


@pytest.mark.parametrize("quantity", [0.0, -1.0])
def test_non_positive_quantity_is_rejected(quantity: float) -> None:
    builder = DishBuilder(SlowDishWriter(), name="Soup")

    with pytest.raises(ValidationError):
        builder.add_component(make_ingredient(), quantity)

    assert builder.state is BuilderState.EMPTY


def test_zero_quantity_update_keeps_previous_values() -> None:
    builder = DishBuilder(SlowDishWriter(), name="Soup")
    builder.add_component(make_ingredient(price=200.0, quantity=100.0), 30.0)

    with pytest.raises(ValidationError):
        builder.update_component_quantity(0, 0)

    assert builder.components[0].quantity == 30.0
    assert builder.components[0].cost == 60.0


def test_update_quantity_recomputes_cost() -> None:
    builder = DishBuilder(SlowDishWriter(), name="Soup")
    builder.add_component(make_ingredient(price=200.0, quantity=100.0), 30.0)

    updated = builder.update_component_quantity(0, 45.0)

    assert updated.cost == 90.0
    assert builder.running_total() == 90.0


def test_remove_last_component_empties_builder() -> None:
    builder = DishBuilder(SlowDishWriter(), name="Soup")
    builder.add_component(make_ingredient(), 10.0)

    builder.remove_component(0)

    assert builder.state is BuilderState.EMPTY
    assert builder.running_total() == 0.0
    with pytest.raises(ValidationError):
        builder.remove_component(0)


def test_commit_requires_name_and_components() -> None:
    builder = DishBuilder(SlowDishWriter(), name="  ")
    builder.add_component(make_ingredient(), 10.0)

    assert not builder.can_commit()
    with pytest.raises(ValidationError):
        asyncio.run(builder.commit())

    builder.set_name("Soup")
    assert builder.can_commit()


def test_failed_commit_keeps_staged_data() -> None:
    writer = FailingDishWriter()
    builder = DishBuilder(writer, name="Soup")
    builder.add_component(make_ingredient(price=200.0, quantity=100.0), 30.0)

    with pytest.raises(PersistenceError):
        asyncio.run(builder.commit())

    assert writer.calls == 1
    assert builder.state is BuilderState.STAGING
    assert builder.last_error == "Failed to create dish: connection reset"
    assert builder.name == "Soup"
    assert builder.running_total() == 60.0


def test_second_commit_while_submitting_is_rejected() -> None:
    writer = SlowDishWriter()
    builder = DishBuilder(writer, name="Soup")
    builder.add_component(make_ingredient(), 10.0)

    async def commit_twice() -> list[object]:
        return await asyncio.gather(
            builder.commit(), builder.commit(), return_exceptions=True
        )

    first, second = asyncio.run(commit_twice())

    assert isinstance(first, Dish)
    assert isinstance(second, CommitInProgressError)
    assert len(writer.payloads) == 1


def test_mutations_rejected_while_submitting() -> None:
    builder = DishBuilder(SlowDishWriter(), name="Soup")
    builder.add_component(make_ingredient(), 10.0)
    builder.state = BuilderState.SUBMITTING

    assert builder.is_submitting
    with pytest.raises(CommitInProgressError):
        builder.add_component(make_ingredient(), 5.0)
    with pytest.raises(CommitInProgressError):
        builder.update_component_quantity(0, 5.0)
    with pytest.raises(CommitInProgressError):
        builder.remove_component(0)


def test_payload_carries_no_derived_fields() -> None:
    ingredient = make_ingredient()
    builder = DishBuilder(SlowDishWriter(), name=" Soup ", genre="japanese")
    builder.add_component(ingredient, 10.0)

    assert builder.payload() == {
        "name": "Soup",
        "genre": "japanese",
        "description": None,
        "ingredients": [{"ingredient_id": str(ingredient.id), "used_quantity": 10.0}],
    }


def test_load_existing_dish_and_update(dish_service, ingredient_repository) -> None:
    onion, pork = _stock(ingredient_repository)
    dish = dish_service.create_dish(
        {
            "name": "Stir fry",
            "ingredients": [
                {"ingredient_id": str(onion.id), "used_quantity": 50},
                {"ingredient_id": str(pork.id), "used_quantity": 25},
            ],
        }
    )
    builder = DishBuilder(dish_service)

    builder.load(dish)
    assert builder.editing_id == dish.id
    assert builder.running_total() == 125.0

    builder.update_component_quantity(1, 50.0)
    updated = asyncio.run(builder.commit())

    assert updated.id == dish.id
    assert updated.total_cost == 200.0


def test_load_rejects_missing_ingredient() -> None:
    dish_with_orphan = make_dish(
        total_cost=10.0,
        components=(
            DishComponent(
                ingredient_id=make_ingredient().id, used_quantity=1, used_cost=10.0
            ),
        ),
    )
    builder = DishBuilder(SlowDishWriter(), name="Draft")
    builder.add_component(make_ingredient(), 5.0)

    with pytest.raises(NotFoundError):
        builder.load(dish_with_orphan)

    assert builder.name == "Draft"
    assert len(builder.components) == 1


def test_food_load_with_invalid_ratio_keeps_current_staging() -> None:
    curry = make_dish(total_cost=400.0)
    stored = CompletedFood(
        id=uuid4(),
        name="Curry set",
        description=None,
        price=900.0,
        total_cost=800.0,
        components=(
            FoodComponent(
                dish_id=curry.id,
                usage_quantity=2.0,
                usage_unit=UsageUnit.RATIO,
                usage_cost=800.0,
                dish=curry,
            ),
        ),
    )
    builder = CompletedFoodBuilder(FailingFoodWriter(), name="Work in progress")
    builder.add_component(make_dish(name="Rice", total_cost=100.0), 1.0)

    with pytest.raises(ValidationError):
        builder.load(stored)

    assert builder.name == "Work in progress"
    assert [c.name for c in builder.components] == ["Rice"]
    assert builder.editing_id is None
    assert builder.price is None


def test_food_builder_projects_profit(food_service, dish_repository) -> None:
    curry = dish_repository.add(make_dish(total_cost=400.0))
    rice = dish_repository.add(make_dish(name="Rice", total_cost=100.0))
    builder = CompletedFoodBuilder(food_service, name="Curry set", price=1000.0)

    builder.add_component(curry, 1.0)
    builder.add_component(rice, 0.5, unit=UsageUnit.RATIO, note="half batch")

    assert builder.running_total() == 450.0
    assert builder.projected_profit() == 550.0
    assert builder.projected_profit_rate() == pytest.approx(55.0)
    assert builder.projected_profit(300.0) == -150.0
    assert builder.components[0].unit is UsageUnit.SERVING

    food = asyncio.run(builder.commit())

    assert food.total_cost == 450.0
    assert food.price == 1000.0
    assert [c.note for c in food.components] == [None, "half batch"]
    assert builder.price is None


def test_food_builder_validates_ratio_and_price() -> None:
    builder = CompletedFoodBuilder(FailingFoodWriter(), name="Set")

    with pytest.raises(ValidationError):
        builder.add_component(make_dish(), 1.5, unit=UsageUnit.RATIO)
    with pytest.raises(ValidationError):
        builder.set_price(-1.0)

    builder.add_component(make_dish(), 1.5)
    assert builder.components[0].quantity == 1.5

