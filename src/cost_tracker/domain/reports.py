"""Domain models for cost and profit reports."""

from dataclasses import dataclass


@dataclass(frozen=True)
class CostDistribution:
    """Dish counts per total cost band."""

    low: int
    medium: int
    high: int


@dataclass(frozen=True)
class PriceRangeSummary:
    """Selling price statistics over priced completed foods."""

    min: float
    max: float
    average: float
    median: float
    budget: int
    standard: int
    premium: int


@dataclass(frozen=True)
class ProfitTotals:
    """Revenue, cost and profit totals over priced completed foods."""

    priced_count: int
    total_revenue: float
    total_cost: float
    total_profit: float
    average_profit_rate: float
