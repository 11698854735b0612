"""Supabase implementation for ingredients."""

from dataclasses import dataclass
from uuid import UUID

from supabase import Client

from cost_tracker.adapters.supabase_queries import (
    apply_list_params,
    execute,
    parse_timestamp,
)
from cost_tracker.domain.errors import NotFoundError, PersistenceError
from cost_tracker.domain.ingredients import Ingredient
from cost_tracker.domain.queries import ListParams
from cost_tracker.services.ingredients import IngredientRepository

TABLE = "ingredients"


@dataclass
class SupabaseIngredientRepository(IngredientRepository):
    """Supabase-backed repository for ingredients."""

    client: Client

    def list_ingredients(self, params: ListParams) -> list[Ingredient]:
        """Return ingredients matching the filters."""
        query = apply_list_params(
            self.client.table(TABLE).select("*"), params, value_column="price"
        )
        return [parse_ingredient(row) for row in execute(query, "list ingredients")]

    def get_ingredient(self, ingredient_id: UUID) -> Ingredient | None:
        """Return an ingredient by id, if present."""
        rows = execute(
            self.client.table(TABLE).select("*").eq("id", str(ingredient_id)).limit(1),
            "load ingredient",
        )
        if not rows:
            return None
        return parse_ingredient(rows[0])

    def get_ingredients(self, ingredient_ids: list[UUID]) -> list[Ingredient]:
        """Return the ingredients with the given ids."""
        if not ingredient_ids:
            return []
        rows = execute(
            self.client.table(TABLE)
            .select("*")
            .in_("id", [str(item_id) for item_id in ingredient_ids]),
            "load ingredients",
        )
        return [parse_ingredient(row) for row in rows]

    def create_ingredient(self, payload: dict[str, object]) -> Ingredient:
        """Create an ingredient and return it."""
        rows = execute(self.client.table(TABLE).insert(payload), "create ingredient")
        if not rows:
            raise PersistenceError("Failed to create ingredient")
        return parse_ingredient(rows[0])

    def update_ingredient(
        self, ingredient_id: UUID, payload: dict[str, object]
    ) -> Ingredient:
        """Update an ingredient and return it."""
        if not payload:
            current = self.get_ingredient(ingredient_id)
            if current is None:
                raise NotFoundError("ingredient", ingredient_id)
            return current
        rows = execute(
            self.client.table(TABLE).update(payload).eq("id", str(ingredient_id)),
            "update ingredient",
        )
        if not rows:
            raise NotFoundError("ingredient", ingredient_id)
        return parse_ingredient(rows[0])

    def delete_ingredient(self, ingredient_id: UUID) -> None:
        """Delete an ingredient."""
        execute(
            self.client.table(TABLE).delete().eq("id", str(ingredient_id)),
            "delete ingredient",
        )


def parse_ingredient(row: dict[str, object]) -> Ingredient:
    """Parse an ingredient row into a domain model."""
    return Ingredient(
        id=UUID(str(row["id"])),
        name=str(row.get("name", "")),
        store=str(row.get("store", "")),
        quantity=float(row.get("quantity", 0.0)),
        unit=str(row.get("unit", "")),
        price=float(row.get("price", 0.0)),
        genre=str(row.get("genre", "")),
        created_at=parse_timestamp(row.get("created_at")),
        updated_at=parse_timestamp(row.get("updated_at")),
    )
