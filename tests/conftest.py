"""Shared test fixtures."""

from dataclasses import dataclass, field, replace
from datetime import UTC, datetime, timedelta
from uuid import UUID, uuid4

import pytest

from cost_tracker.config import Settings
from cost_tracker.containers import AppContainer
from cost_tracker.domain.dishes import Dish, DishComponent
from cost_tracker.domain.errors import NotFoundError, PersistenceError
from cost_tracker.domain.foods import CompletedFood, FoodComponent
from cost_tracker.domain.ingredients import Ingredient
from cost_tracker.domain.queries import ListParams, SortOrder
from cost_tracker.services.comparison import CandidateComparator
from cost_tracker.services.dishes import DishRepository, DishService
from cost_tracker.services.events import EventHub
from cost_tracker.services.foods import CompletedFoodRepository, CompletedFoodService
from cost_tracker.services.ingredients import IngredientRepository, IngredientService
from cost_tracker.services.reports import ReportService

_EPOCH = datetime(2024, 1, 1, tzinfo=UTC)


def make_ingredient(**overrides: object) -> Ingredient:
    values: dict[str, object] = {
        "id": uuid4(),
        "name": "Pork belly",
        "store": "Market",
        "quantity": 100.0,
        "unit": "g",
        "price": 200.0,
        "genre": "meat",
    }
    values.update(overrides)
    return Ingredient(**values)  # type: ignore[arg-type]


def make_dish(total_cost: float = 400.0, **overrides: object) -> Dish:
    values: dict[str, object] = {
        "id": uuid4(),
        "name": "Curry",
        "genre": None,
        "description": None,
        "total_cost": total_cost,
    }
    values.update(overrides)
    return Dish(**values)  # type: ignore[arg-type]


def _matches(item: object, params: ListParams, value_column: str) -> bool:
    name = getattr(item, "name", "")
    if params.name and params.name.lower() not in name.lower():
        return False
    store = getattr(item, "store", None)
    if params.store and (store is None or params.store.lower() not in store.lower()):
        return False
    if params.genre and getattr(item, "genre", None) != params.genre:
        return False
    value = getattr(item, value_column)
    if params.min_value is not None and (value is None or value < params.min_value):
        return False
    if params.max_value is not None and (value is None or value > params.max_value):
        return False
    return True


def _page(items: list, params: ListParams, value_column: str) -> list:
    selected = [item for item in items if _matches(item, params, value_column)]
    selected.sort(
        key=lambda item: getattr(item, params.sort_by),
        reverse=params.sort_order is SortOrder.DESC,
    )
    end = None if params.limit is None else params.offset + params.limit
    return selected[params.offset : end]


@dataclass
class InMemoryIngredientRepository(IngredientRepository):
    """In-memory ingredient repository for tests."""

    ingredients: dict[UUID, Ingredient] = field(default_factory=dict)
    queries: list[ListParams] = field(default_factory=list)
    fail: bool = False

    def add(self, ingredient: Ingredient) -> Ingredient:
        if ingredient.created_at is None:
            ingredient = replace(
                ingredient, created_at=_EPOCH + timedelta(seconds=len(self.ingredients))
            )
        self.ingredients[ingredient.id] = ingredient
        return ingredient

    def list_ingredients(self, params: ListParams) -> list[Ingredient]:
        self._check()
        self.queries.append(params)
        return _page(list(self.ingredients.values()), params, "price")

    def get_ingredient(self, ingredient_id: UUID) -> Ingredient | None:
        self._check()
        return self.ingredients.get(ingredient_id)

    def get_ingredients(self, ingredient_ids: list[UUID]) -> list[Ingredient]:
        self._check()
        return [self.ingredients[i] for i in ingredient_ids if i in self.ingredients]

    def create_ingredient(self, payload: dict[str, object]) -> Ingredient:
        self._check()
        return self.add(Ingredient(id=uuid4(), **payload))  # type: ignore[arg-type]

    def update_ingredient(
        self, ingredient_id: UUID, payload: dict[str, object]
    ) -> Ingredient:
        self._check()
        current = self.ingredients.get(ingredient_id)
        if current is None:
            raise NotFoundError("ingredient", ingredient_id)
        updated = replace(current, **payload)  # type: ignore[arg-type]
        self.ingredients[ingredient_id] = updated
        return updated

    def delete_ingredient(self, ingredient_id: UUID) -> None:
        self._check()
        self.ingredients.pop(ingredient_id, None)

    def _check(self) -> None:
        if self.fail:
            raise PersistenceError("Failed to reach the store")


@dataclass
class InMemoryDishRepository(DishRepository):
    """In-memory dish repository for tests."""

    dishes: dict[UUID, Dish] = field(default_factory=dict)
    fail: bool = False

    def add(self, dish: Dish) -> Dish:
        if dish.created_at is None:
            dish = replace(
                dish, created_at=_EPOCH + timedelta(seconds=len(self.dishes))
            )
        self.dishes[dish.id] = dish
        return dish

    def list_dishes(self, params: ListParams) -> list[Dish]:
        self._check()
        dishes = [replace(dish, components=()) for dish in self.dishes.values()]
        return _page(dishes, params, "total_cost")

    def get_dish(self, dish_id: UUID) -> Dish | None:
        self._check()
        return self.dishes.get(dish_id)

    def get_dishes(self, dish_ids: list[UUID]) -> list[Dish]:
        self._check()
        return [self.dishes[i] for i in dish_ids if i in self.dishes]

    def create_dish(
        self, row: dict[str, object], components: list[DishComponent]
    ) -> Dish:
        self._check()
        dish = Dish(
            id=uuid4(),
            components=tuple(replace(c, id=uuid4()) for c in components),
            **row,  # type: ignore[arg-type]
        )
        return self.add(dish)

    def update_dish(
        self,
        dish_id: UUID,
        row: dict[str, object],
        components: list[DishComponent] | None,
    ) -> Dish:
        self._check()
        current = self.dishes.get(dish_id)
        if current is None:
            raise NotFoundError("dish", dish_id)
        updated = replace(current, **row)  # type: ignore[arg-type]
        if components is not None:
            updated = replace(updated, components=tuple(components))
        self.dishes[dish_id] = updated
        return updated

    def delete_dish(self, dish_id: UUID) -> None:
        self._check()
        self.dishes.pop(dish_id, None)

    def _check(self) -> None:
        if self.fail:
            raise PersistenceError("Failed to reach the store")


@dataclass
class InMemoryCompletedFoodRepository(CompletedFoodRepository):
    """In-memory completed food repository for tests."""

    foods: dict[UUID, CompletedFood] = field(default_factory=dict)
    fail: bool = False

    def list_foods(self, params: ListParams) -> list[CompletedFood]:
        self._check()
        foods = [replace(food, components=()) for food in self.foods.values()]
        return _page(foods, params, "price")

    def get_food(self, food_id: UUID) -> CompletedFood | None:
        self._check()
        return self.foods.get(food_id)

    def create_food(
        self, row: dict[str, object], components: list[FoodComponent]
    ) -> CompletedFood:
        self._check()
        food = CompletedFood(
            id=uuid4(),
            components=tuple(replace(c, id=uuid4()) for c in components),
            created_at=_EPOCH + timedelta(seconds=len(self.foods)),
            **row,  # type: ignore[arg-type]
        )
        self.foods[food.id] = food
        return food

    def update_food(
        self,
        food_id: UUID,
        row: dict[str, object],
        components: list[FoodComponent] | None,
    ) -> CompletedFood:
        self._check()
        current = self.foods.get(food_id)
        if current is None:
            raise NotFoundError("completed food", food_id)
        updated = replace(current, **row)  # type: ignore[arg-type]
        if components is not None:
            updated = replace(updated, components=tuple(components))
        self.foods[food_id] = updated
        return updated

    def delete_food(self, food_id: UUID) -> None:
        self._check()
        self.foods.pop(food_id, None)

    def _check(self) -> None:
        if self.fail:
            raise PersistenceError("Failed to reach the store")


@pytest.fixture
def settings() -> Settings:
    return Settings(
        supabase_url="https://example.supabase.co",
        supabase_service_key="header.payload.signature",
    )


@pytest.fixture
def events() -> EventHub:
    return EventHub()


@pytest.fixture
def ingredient_repository() -> InMemoryIngredientRepository:
    return InMemoryIngredientRepository()


@pytest.fixture
def dish_repository() -> InMemoryDishRepository:
    return InMemoryDishRepository()


@pytest.fixture
def food_repository() -> InMemoryCompletedFoodRepository:
    return InMemoryCompletedFoodRepository()


@pytest.fixture
def ingredient_service(
    ingredient_repository: InMemoryIngredientRepository, events: EventHub
) -> IngredientService:
    return IngredientService(ingredient_repository, events)


@pytest.fixture
def dish_service(
    dish_repository: InMemoryDishRepository,
    ingredient_repository: InMemoryIngredientRepository,
    events: EventHub,
) -> DishService:
    return DishService(dish_repository, ingredient_repository, events)


@pytest.fixture
def food_service(
    food_repository: InMemoryCompletedFoodRepository,
    dish_repository: InMemoryDishRepository,
    events: EventHub,
) -> CompletedFoodService:
    return CompletedFoodService(food_repository, dish_repository, events)


@pytest.fixture
def container(
    settings: Settings,
    events: EventHub,
    ingredient_service: IngredientService,
    dish_service: DishService,
    food_service: CompletedFoodService,
) -> AppContainer:
    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        events=events,
        ingredient_service=ingredient_service,
        dish_service=dish_service,
        food_service=food_service,
        comparator=CandidateComparator(ingredient_service),
        report_service=ReportService(ingredient_service, dish_service, food_service),
        close_resources=close_resources,
    )
