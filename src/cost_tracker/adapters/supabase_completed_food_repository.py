"""Supabase implementation for completed foods and their dish usages."""

from dataclasses import dataclass
from uuid import UUID

from supabase import Client

from cost_tracker.adapters.supabase_dish_repository import TABLE as DISHES_TABLE
from cost_tracker.adapters.supabase_dish_repository import parse_dish
from cost_tracker.adapters.supabase_queries import (
    apply_list_params,
    execute,
    optional_float,
    parse_timestamp,
)
from cost_tracker.domain.dishes import Dish
from cost_tracker.domain.errors import NotFoundError, PersistenceError
from cost_tracker.domain.foods import CompletedFood, FoodComponent, UsageUnit
from cost_tracker.domain.queries import ListParams
from cost_tracker.services.foods import CompletedFoodRepository

TABLE = "completed_foods"
COMPONENTS_TABLE = "completed_food_dishes"


@dataclass
class SupabaseCompletedFoodRepository(CompletedFoodRepository):
    """Supabase-backed repository for completed foods."""

    client: Client

    def list_foods(self, params: ListParams) -> list[CompletedFood]:
        """Return completed foods matching the filters, without components."""
        query = apply_list_params(
            self.client.table(TABLE).select("*"), params, value_column="price"
        )
        return [parse_food(row) for row in execute(query, "list completed foods")]

    def get_food(self, food_id: UUID) -> CompletedFood | None:
        """Return a completed food with its dish usages."""
        rows = execute(
            self.client.table(TABLE).select("*").eq("id", str(food_id)).limit(1),
            "load completed food",
        )
        if not rows:
            return None
        return parse_food(rows[0], self._load_components(food_id))

    def create_food(
        self, row: dict[str, object], components: list[FoodComponent]
    ) -> CompletedFood:
        """Create a completed food and its dish usages."""
        rows = execute(self.client.table(TABLE).insert(row), "create completed food")
        if not rows:
            raise PersistenceError("Failed to create completed food")
        food_id = UUID(str(rows[0]["id"]))
        try:
            stored = self._insert_components(food_id, components)
        except PersistenceError:
            execute(
                self.client.table(TABLE).delete().eq("id", str(food_id)),
                "roll back completed food",
            )
            raise
        return parse_food(rows[0], stored)

    def update_food(
        self,
        food_id: UUID,
        row: dict[str, object],
        components: list[FoodComponent] | None,
    ) -> CompletedFood:
        """Update a completed food, replacing its dish usages when given.

        New usage rows are stored before the previous ones are removed, and
        the completed food row is written last.
        """
        if components is not None:
            previous = self._component_ids(food_id)
            stored = self._insert_components(food_id, components)
            try:
                self._delete_components(
                    previous, "clear previous completed food dishes"
                )
            except PersistenceError:
                self._delete_components(
                    [str(c.id) for c in stored if c.id],
                    "roll back completed food dishes",
                )
                raise
        if row:
            updated = execute(
                self.client.table(TABLE).update(row).eq("id", str(food_id)),
                "update completed food",
            )
            if not updated:
                raise NotFoundError("completed food", food_id)
        food = self.get_food(food_id)
        if food is None:
            raise NotFoundError("completed food", food_id)
        return food

    def delete_food(self, food_id: UUID) -> None:
        """Delete a completed food and its dish usages."""
        execute(
            self.client.table(COMPONENTS_TABLE)
            .delete()
            .eq("completed_food_id", str(food_id)),
            "delete completed food dishes",
        )
        execute(
            self.client.table(TABLE).delete().eq("id", str(food_id)),
            "delete completed food",
        )

    def _component_ids(self, food_id: UUID) -> list[str]:
        rows = execute(
            self.client.table(COMPONENTS_TABLE)
            .select("id")
            .eq("completed_food_id", str(food_id)),
            "load completed food dish ids",
        )
        return [str(row["id"]) for row in rows]

    def _delete_components(self, component_ids: list[str], action: str) -> None:
        if component_ids:
            execute(
                self.client.table(COMPONENTS_TABLE).delete().in_("id", component_ids),
                action,
            )

    def _insert_components(
        self, food_id: UUID, components: list[FoodComponent]
    ) -> list[FoodComponent]:
        if not components:
            return []
        rows = execute(
            self.client.table(COMPONENTS_TABLE).insert(
                [
                    {
                        "completed_food_id": str(food_id),
                        "dish_id": str(component.dish_id),
                        "usage_quantity": component.usage_quantity,
                        "usage_unit": component.usage_unit.value,
                        "usage_cost": component.usage_cost,
                        "description": component.note,
                    }
                    for component in components
                ]
            ),
            "create completed food dishes",
        )
        dishes = {c.dish_id: c.dish for c in components}
        return [
            _parse_component(row, dishes.get(UUID(str(row["dish_id"])))) for row in rows
        ]

    def _load_components(self, food_id: UUID) -> list[FoodComponent]:
        rows = execute(
            self.client.table(COMPONENTS_TABLE)
            .select("*")
            .eq("completed_food_id", str(food_id)),
            "load completed food dishes",
        )
        dish_ids = list({str(row["dish_id"]) for row in rows})
        dishes = {}
        if dish_ids:
            dish_rows = execute(
                self.client.table(DISHES_TABLE).select("*").in_("id", dish_ids),
                "load dishes",
            )
            dishes = {dish.id: dish for dish in map(parse_dish, dish_rows)}
        return [
            _parse_component(row, dishes.get(UUID(str(row["dish_id"])))) for row in rows
        ]


def parse_food(
    row: dict[str, object], components: list[FoodComponent] | None = None
) -> CompletedFood:
    """Parse a completed food row into a domain model."""
    return CompletedFood(
        id=UUID(str(row["id"])),
        name=str(row.get("name", "")),
        description=row.get("description"),
        price=optional_float(row.get("price")),
        total_cost=float(row.get("total_cost", 0.0)),
        components=tuple(components or ()),
        created_at=parse_timestamp(row.get("created_at")),
        updated_at=parse_timestamp(row.get("updated_at")),
    )


def _parse_component(row: dict[str, object], dish: Dish | None) -> FoodComponent:
    return FoodComponent(
        id=UUID(str(row["id"])) if row.get("id") else None,
        dish_id=UUID(str(row["dish_id"])),
        usage_quantity=float(row.get("usage_quantity", 0.0)),
        usage_unit=UsageUnit(str(row.get("usage_unit", UsageUnit.SERVING.value))),
        usage_cost=float(row.get("usage_cost", 0.0)),
        note=row.get("description"),
        dish=dish,
    )
