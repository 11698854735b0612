"""Profitability classifier.

The threshold table below is the only place profit rates are mapped to
tiers; display code calls :func:`classify` instead of comparing rates.
"""

from collections.abc import Iterable

from cost_tracker.domain.foods import CompletedFood
from cost_tracker.domain.profitability import ProfitSummary, ProfitTier

# Lower bounds in percent, checked top-down.
TIER_THRESHOLDS: tuple[tuple[float, ProfitTier], ...] = (
    (30.0, ProfitTier.EXCELLENT),
    (15.0, ProfitTier.GOOD),
    (0.0, ProfitTier.POOR),
)

_MAX_TARGET_RATE = 100.0


def profit(price: float | None, total_cost: float, *, clamp: bool = True) -> float:
    """Return ``price - total_cost``, clamped at zero unless ``clamp`` is False."""
    if price is None:
        return 0.0
    delta = price - total_cost
    return max(0.0, delta) if clamp else delta


def profit_rate(price: float | None, total_cost: float) -> float:
    """Return the margin in percent of price; may be negative."""
    if price is None or price <= 0:
        return 0.0
    return (price - total_cost) / price * 100


def tier_for_rate(rate: float) -> ProfitTier:
    """Map a profit rate in percent to its tier."""
    for lower_bound, tier in TIER_THRESHOLDS:
        if rate >= lower_bound:
            return tier
    return ProfitTier.LOSS


def classify(price: float | None, total_cost: float) -> ProfitSummary:
    """Derive every profit figure for a price and total cost."""
    rate = profit_rate(price, total_cost)
    return ProfitSummary(
        price=price,
        total_cost=total_cost,
        profit_raw=profit(price, total_cost, clamp=False),
        profit=profit(price, total_cost),
        profit_rate=rate,
        tier=ProfitTier.UNSET if price is None else tier_for_rate(rate),
    )


def recommended_price(total_cost: float, target_rate: float) -> float:
    """Return the selling price that yields ``target_rate`` percent margin."""
    if target_rate >= _MAX_TARGET_RATE:
        return total_cost * 2
    return total_cost / (1 - target_rate / 100)


def group_by_tier(
    foods: Iterable[CompletedFood],
) -> dict[ProfitTier, list[CompletedFood]]:
    """Bucket completed foods by profitability tier."""
    groups: dict[ProfitTier, list[CompletedFood]] = {tier: [] for tier in ProfitTier}
    for food in foods:
        groups[classify(food.price, food.total_cost).tier].append(food)
    return groups
