"""Supabase implementation for dishes and their ingredient usages."""

from dataclasses import dataclass
from uuid import UUID

from supabase import Client

from cost_tracker.adapters.supabase_ingredient_repository import (
    TABLE as INGREDIENTS_TABLE,
)
from cost_tracker.adapters.supabase_ingredient_repository import (
    parse_ingredient,
)
from cost_tracker.adapters.supabase_queries import (
    apply_list_params,
    execute,
    parse_timestamp,
)
from cost_tracker.domain.dishes import Dish, DishComponent
from cost_tracker.domain.errors import NotFoundError, PersistenceError
from cost_tracker.domain.ingredients import Ingredient
from cost_tracker.domain.queries import ListParams
from cost_tracker.services.dishes import DishRepository

TABLE = "dishes"
COMPONENTS_TABLE = "dish_ingredients"


@dataclass
class SupabaseDishRepository(DishRepository):
    """Supabase-backed repository for dishes."""

    client: Client

    def list_dishes(self, params: ListParams) -> list[Dish]:
        """Return dishes matching the filters, without components."""
        query = apply_list_params(
            self.client.table(TABLE).select("*"), params, value_column="total_cost"
        )
        return [parse_dish(row) for row in execute(query, "list dishes")]

    def get_dish(self, dish_id: UUID) -> Dish | None:
        """Return a dish with its components and their ingredients."""
        rows = execute(
            self.client.table(TABLE).select("*").eq("id", str(dish_id)).limit(1),
            "load dish",
        )
        if not rows:
            return None
        return parse_dish(rows[0], self._load_components(dish_id))

    def get_dishes(self, dish_ids: list[UUID]) -> list[Dish]:
        """Return the dishes with the given ids, without components."""
        if not dish_ids:
            return []
        rows = execute(
            self.client.table(TABLE)
            .select("*")
            .in_("id", [str(item_id) for item_id in dish_ids]),
            "load dishes",
        )
        return [parse_dish(row) for row in rows]

    def create_dish(
        self, row: dict[str, object], components: list[DishComponent]
    ) -> Dish:
        """Create a dish and its components.

        The dish row is removed again when its components cannot be stored.
        """
        rows = execute(self.client.table(TABLE).insert(row), "create dish")
        if not rows:
            raise PersistenceError("Failed to create dish")
        dish_id = UUID(str(rows[0]["id"]))
        try:
            stored = self._insert_components(dish_id, components)
        except PersistenceError:
            execute(
                self.client.table(TABLE).delete().eq("id", str(dish_id)),
                "roll back dish",
            )
            raise
        return parse_dish(rows[0], stored)

    def update_dish(
        self,
        dish_id: UUID,
        row: dict[str, object],
        components: list[DishComponent] | None,
    ) -> Dish:
        """Update a dish, replacing its components when given.

        New component rows are stored before the previous ones are removed,
        and the dish row is written last, so a failed insert leaves the
        previous components and total untouched.
        """
        if components is not None:
            previous = self._component_ids(dish_id)
            stored = self._insert_components(dish_id, components)
            try:
                self._delete_components(previous, "clear previous dish ingredients")
            except PersistenceError:
                self._delete_components(
                    [str(c.id) for c in stored if c.id], "roll back dish ingredients"
                )
                raise
        if row:
            updated = execute(
                self.client.table(TABLE).update(row).eq("id", str(dish_id)),
                "update dish",
            )
            if not updated:
                raise NotFoundError("dish", dish_id)
        dish = self.get_dish(dish_id)
        if dish is None:
            raise NotFoundError("dish", dish_id)
        return dish

    def delete_dish(self, dish_id: UUID) -> None:
        """Delete a dish and its components."""
        execute(
            self.client.table(COMPONENTS_TABLE).delete().eq("dish_id", str(dish_id)),
            "delete dish ingredients",
        )
        execute(
            self.client.table(TABLE).delete().eq("id", str(dish_id)), "delete dish"
        )

    def _component_ids(self, dish_id: UUID) -> list[str]:
        rows = execute(
            self.client.table(COMPONENTS_TABLE)
            .select("id")
            .eq("dish_id", str(dish_id)),
            "load dish ingredient ids",
        )
        return [str(row["id"]) for row in rows]

    def _delete_components(self, component_ids: list[str], action: str) -> None:
        if component_ids:
            execute(
                self.client.table(COMPONENTS_TABLE).delete().in_("id", component_ids),
                action,
            )

    def _insert_components(
        self, dish_id: UUID, components: list[DishComponent]
    ) -> list[DishComponent]:
        if not components:
            return []
        rows = execute(
            self.client.table(COMPONENTS_TABLE).insert(
                [
                    {
                        "dish_id": str(dish_id),
                        "ingredient_id": str(component.ingredient_id),
                        "used_quantity": component.used_quantity,
                        "used_cost": component.used_cost,
                    }
                    for component in components
                ]
            ),
            "create dish ingredients",
        )
        ingredients = {c.ingredient_id: c.ingredient for c in components}
        return [
            _parse_component(row, ingredients.get(UUID(str(row["ingredient_id"]))))
            for row in rows
        ]

    def _load_components(self, dish_id: UUID) -> list[DishComponent]:
        rows = execute(
            self.client.table(COMPONENTS_TABLE).select("*").eq("dish_id", str(dish_id)),
            "load dish ingredients",
        )
        ingredient_ids = list({str(row["ingredient_id"]) for row in rows})
        ingredients = {}
        if ingredient_ids:
            ingredient_rows = execute(
                self.client.table(INGREDIENTS_TABLE)
                .select("*")
                .in_("id", ingredient_ids),
                "load ingredients",
            )
            ingredients = {
                ingredient.id: ingredient
                for ingredient in map(parse_ingredient, ingredient_rows)
            }
        return [
            _parse_component(row, ingredients.get(UUID(str(row["ingredient_id"]))))
            for row in rows
        ]


def parse_dish(
    row: dict[str, object], components: list[DishComponent] | None = None
) -> Dish:
    """Parse a dish row into a domain model."""
    return Dish(
        id=UUID(str(row["id"])),
        name=str(row.get("name", "")),
        genre=row.get("genre"),
        description=row.get("description"),
        total_cost=float(row.get("total_cost", 0.0)),
        components=tuple(components or ()),
        created_at=parse_timestamp(row.get("created_at")),
        updated_at=parse_timestamp(row.get("updated_at")),
    )


def _parse_component(
    row: dict[str, object], ingredient: Ingredient | None
) -> DishComponent:
    return DishComponent(
        id=UUID(str(row["id"])) if row.get("id") else None,
        ingredient_id=UUID(str(row["ingredient_id"])),
        used_quantity=float(row.get("used_quantity", 0.0)),
        used_cost=float(row.get("used_cost", 0.0)),
        ingredient=ingredient,
    )
