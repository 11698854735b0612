"""Profitability figures derived from price and total cost."""

from dataclasses import dataclass
from enum import Enum


class ProfitTier(str, Enum):
    """Categorical profitability label."""

    EXCELLENT = "excellent"
    GOOD = "good"
    POOR = "poor"
    LOSS = "loss"
    UNSET = "unset"


@dataclass(frozen=True)
class ProfitSummary:
    """Profit figures for one priced (or unpriced) product.

    ``profit_raw`` may be negative and is the value to use for loss detection;
    ``profit`` is clamped at zero for magnitude labels.
    """

    price: float | None
    total_cost: float
    profit_raw: float
    profit: float
    profit_rate: float
    tier: ProfitTier
