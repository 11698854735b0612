"""Tests for the profitability classifier."""

from uuid import uuid4

import pytest

from cost_tracker.domain.foods import CompletedFood
from cost_tracker.domain.profitability import ProfitTier
from cost_tracker.services.profitability import (
    classify,
    group_by_tier,
    profit,
    profit_rate,
    recommended_price,
    tier_for_rate,
)


def test_classify_healthy_margin() -> None:
    summary = classify(1000.0, 600.0)

    assert summary.profit == 400.0
    assert summary.profit_raw == 400.0
    assert summary.profit_rate == pytest.approx(40.0)
    assert summary.tier is ProfitTier.EXCELLENT


def test_classify_loss_keeps_raw_profit_and_clamps_display_profit() -> None:
    summary = classify(400.0, 500.0)

    assert summary.profit_raw == -100.0
    assert summary.profit == 0.0
    assert summary.profit_rate == pytest.approx(-25.0)
    assert summary.tier is ProfitTier.LOSS


def test_classify_without_price_is_unset() -> None:
    summary = classify(None, 500.0)

    assert summary.profit == 0.0
    assert summary.profit_raw == 0.0
    assert summary.profit_rate == 0.0
    assert summary.tier is ProfitTier.UNSET


def test_zero_price_has_zero_rate() -> None:
    assert profit_rate(0.0, 100.0) == 0.0
    assert classify(0.0, 100.0).tier is ProfitTier.POOR


@pytest.mark.parametrize(
    ("rate", "tier"),
    [
        (30.0, ProfitTier.EXCELLENT),
        (29.99, ProfitTier.GOOD),
        (15.0, ProfitTier.GOOD),
        (14.99, ProfitTier.POOR),
        (0.0, ProfitTier.POOR),
        (-0.01, ProfitTier.LOSS),
    ],
)
def test_tier_boundaries(rate: float, tier: ProfitTier) -> None:
    assert tier_for_rate(rate) is tier


def test_profit_clamp_is_optional() -> None:
    assert profit(100.0, 150.0) == 0.0
    assert profit(100.0, 150.0, clamp=False) == -50.0


def test_recommended_price() -> None:
    assert recommended_price(700.0, 30.0) == pytest.approx(1000.0)
    assert recommended_price(700.0, 100.0) == 1400.0


def test_group_by_tier() -> None:
    def food(price: float | None, cost: float) -> CompletedFood:
        return CompletedFood(
            id=uuid4(), name="Set", description=None, price=price, total_cost=cost
        )

    groups = group_by_tier([food(1000, 500), food(1000, 900), food(None, 10)])

    assert len(groups[ProfitTier.EXCELLENT]) == 1
    assert len(groups[ProfitTier.POOR]) == 1
    assert len(groups[ProfitTier.UNSET]) == 1
    assert groups[ProfitTier.LOSS] == []


def test_priced_food_with_margin_is_excellent() -> None:
    summary = classify(200.0, 125.0)

    assert summary.profit == 75.0
    assert summary.profit_rate == pytest.approx(37.5)
    assert summary.tier is ProfitTier.EXCELLENT


def test_food_priced_below_cost_is_a_loss() -> None:
    summary = classify(100.0, 120.0)

    assert summary.profit_raw == -20.0
    assert summary.profit == 0.0
    assert summary.profit_rate == pytest.approx(-20.0)
    assert summary.tier is ProfitTier.LOSS
