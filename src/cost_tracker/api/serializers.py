"""JSON shapes for API responses.

Derived figures (unit price, profit, tier) are added here from the domain
functions; they are never read back from request bodies.
"""

from dataclasses import asdict
from datetime import datetime
from typing import Any

from cost_tracker.domain.comparison import RankedCandidate
from cost_tracker.domain.dishes import Dish, DishComponent
from cost_tracker.domain.foods import CompletedFood, FoodComponent
from cost_tracker.domain.ingredients import Ingredient
from cost_tracker.domain.profitability import ProfitSummary


def envelope(data: object = None, message: str | None = None) -> dict[str, Any]:
    """Wrap a successful result in the response envelope."""
    return {"success": True, "data": data, "message": message}


def ingredient_to_dict(ingredient: Ingredient) -> dict[str, Any]:
    return {
        "id": str(ingredient.id),
        "name": ingredient.name,
        "store": ingredient.store,
        "quantity": ingredient.quantity,
        "unit": ingredient.unit,
        "price": ingredient.price,
        "genre": ingredient.genre,
        "unit_price": ingredient.unit_price,
        "created_at": _timestamp(ingredient.created_at),
        "updated_at": _timestamp(ingredient.updated_at),
    }


def dish_component_to_dict(component: DishComponent) -> dict[str, Any]:
    return {
        "id": str(component.id) if component.id else None,
        "ingredient_id": str(component.ingredient_id),
        "used_quantity": component.used_quantity,
        "used_cost": component.used_cost,
        "ingredient": (
            ingredient_to_dict(component.ingredient) if component.ingredient else None
        ),
    }


def dish_to_dict(dish: Dish) -> dict[str, Any]:
    return {
        "id": str(dish.id),
        "name": dish.name,
        "genre": dish.genre,
        "description": dish.description,
        "total_cost": dish.total_cost,
        "ingredients": [dish_component_to_dict(c) for c in dish.components],
        "created_at": _timestamp(dish.created_at),
        "updated_at": _timestamp(dish.updated_at),
    }


def food_component_to_dict(component: FoodComponent) -> dict[str, Any]:
    return {
        "id": str(component.id) if component.id else None,
        "dish_id": str(component.dish_id),
        "usage_quantity": component.usage_quantity,
        "usage_unit": component.usage_unit.value,
        "usage_cost": component.usage_cost,
        "description": component.note,
        "dish": dish_to_dict(component.dish) if component.dish else None,
    }


def food_to_dict(food: CompletedFood, summary: ProfitSummary) -> dict[str, Any]:
    """Serialize a completed food with its profit figures."""
    return {
        "id": str(food.id),
        "name": food.name,
        "description": food.description,
        "price": food.price,
        "total_cost": food.total_cost,
        "profit": summary.profit,
        "profit_raw": summary.profit_raw,
        "profit_rate": summary.profit_rate,
        "tier": summary.tier.value,
        "dishes": [food_component_to_dict(c) for c in food.components],
        "created_at": _timestamp(food.created_at),
        "updated_at": _timestamp(food.updated_at),
    }


def candidate_to_dict(candidate: RankedCandidate) -> dict[str, Any]:
    return {
        "ingredient": ingredient_to_dict(candidate.ingredient),
        "normalized_quantity": candidate.normalized_quantity,
        "effective_price": candidate.effective_price,
        "is_best_value": candidate.is_best_value,
        "comparable": candidate.comparable,
    }


def summary_to_dict(summary: dict[str, Any]) -> dict[str, Any]:
    """Serialize the report summary built by the report service."""
    return {
        "counts": summary["counts"],
        "average_unit_price_by_genre": summary["average_unit_price_by_genre"],
        "most_efficient_ingredients": [
            ingredient_to_dict(item) for item in summary["most_efficient_ingredients"]
        ],
        "dish_cost_distribution": asdict(summary["dish_cost_distribution"]),
        "price_range": asdict(summary["price_range"]),
        "profit": asdict(summary["profit"]),
        "tiers": summary["tiers"],
    }


def _timestamp(value: datetime | None) -> str | None:
    return value.isoformat() if value else None
