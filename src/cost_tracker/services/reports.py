"""Cost and profit reports over ingredients, dishes and completed foods."""

from collections import defaultdict
from collections.abc import Iterable
from dataclasses import dataclass
from statistics import fmean, median

from cost_tracker.domain.dishes import Dish
from cost_tracker.domain.foods import CompletedFood
from cost_tracker.domain.ingredients import Ingredient
from cost_tracker.domain.reports import (
    CostDistribution,
    PriceRangeSummary,
    ProfitTotals,
)
from cost_tracker.services.dishes import DishService
from cost_tracker.services.foods import CompletedFoodService
from cost_tracker.services.ingredients import IngredientService
from cost_tracker.services.profitability import classify, group_by_tier

DISH_COST_LOW = 500
DISH_COST_HIGH = 1000
PRICE_BUDGET = 1000
PRICE_PREMIUM = 2000


def average_unit_price_by_genre(ingredients: Iterable[Ingredient]) -> dict[str, float]:
    """Average unit price per ingredient genre."""
    prices: dict[str, list[float]] = defaultdict(list)
    for ingredient in ingredients:
        prices[ingredient.genre].append(ingredient.unit_price)
    return {genre: fmean(values) for genre, values in prices.items()}


def most_efficient_ingredients(
    ingredients: Iterable[Ingredient], limit: int = 5
) -> list[Ingredient]:
    """Ingredients with the lowest unit price first."""
    return sorted(ingredients, key=lambda item: item.unit_price)[:limit]


def dish_cost_distribution(dishes: Iterable[Dish]) -> CostDistribution:
    """Count dishes per total cost band."""
    low = medium = high = 0
    for dish in dishes:
        if dish.total_cost < DISH_COST_LOW:
            low += 1
        elif dish.total_cost < DISH_COST_HIGH:
            medium += 1
        else:
            high += 1
    return CostDistribution(low=low, medium=medium, high=high)


def price_range_summary(foods: Iterable[CompletedFood]) -> PriceRangeSummary:
    """Selling price statistics over foods that have a positive price."""
    prices = [food.price for food in foods if food.price]
    if not prices:
        return PriceRangeSummary(0.0, 0.0, 0.0, 0.0, 0, 0, 0)
    budget = sum(1 for price in prices if price < PRICE_BUDGET)
    premium = sum(1 for price in prices if price >= PRICE_PREMIUM)
    return PriceRangeSummary(
        min=min(prices),
        max=max(prices),
        average=fmean(prices),
        median=median(prices),
        budget=budget,
        standard=len(prices) - budget - premium,
        premium=premium,
    )


def profit_summary(foods: Iterable[CompletedFood]) -> ProfitTotals:
    """Revenue, cost and raw profit totals over priced foods."""
    summaries = [
        classify(food.price, food.total_cost) for food in foods if food.price
    ]
    if not summaries:
        return ProfitTotals(0, 0.0, 0.0, 0.0, 0.0)
    return ProfitTotals(
        priced_count=len(summaries),
        total_revenue=sum(summary.price or 0.0 for summary in summaries),
        total_cost=sum(summary.total_cost for summary in summaries),
        total_profit=sum(summary.profit_raw for summary in summaries),
        average_profit_rate=fmean(summary.profit_rate for summary in summaries),
    )


@dataclass
class ReportService:
    """Builds the dashboard summary from the entity services."""

    ingredient_service: IngredientService
    dish_service: DishService
    food_service: CompletedFoodService

    def summary(self) -> dict[str, object]:
        """Return counts, distributions and profit totals."""
        ingredients = self.ingredient_service.list_ingredients()
        dishes = self.dish_service.list_dishes()
        foods = self.food_service.list_foods()
        tiers = group_by_tier(foods)
        return {
            "counts": {
                "ingredients": len(ingredients),
                "dishes": len(dishes),
                "completed_foods": len(foods),
            },
            "average_unit_price_by_genre": average_unit_price_by_genre(ingredients),
            "most_efficient_ingredients": most_efficient_ingredients(ingredients),
            "dish_cost_distribution": dish_cost_distribution(dishes),
            "price_range": price_range_summary(foods),
            "profit": profit_summary(foods),
            "tiers": {tier.value: len(items) for tier, items in tiers.items()},
        }
