"""Cost rollup engine.

Every derived cost in the application goes through these functions: an
ingredient's unit price, a component's cost contribution and a composite's
total. They are pure and never raise on arithmetic edge cases.
"""

from collections.abc import Iterable
from typing import Protocol


class Costed(Protocol):
    """Anything carrying a cost contribution."""

    @property
    def cost(self) -> float:
        """Cost contribution of this item."""


def unit_price(price: float, quantity: float) -> float:
    """Return ``price / quantity``, or 0 when the quantity is not positive."""
    if quantity <= 0:
        return 0.0
    return price / quantity


def component_cost(base_unit_value: float, used_quantity: float) -> float:
    """Return the cost of using ``used_quantity`` of something.

    ``base_unit_value`` is an ingredient's unit price when building a dish and
    a dish's total cost when building a completed food.
    """
    return base_unit_value * used_quantity


def total_cost(components: Iterable[Costed]) -> float:
    """Sum the cost of every component; 0 for no components."""
    return sum((component.cost for component in components), 0.0)


def cost_per_serving(total: float, servings: float) -> float:
    """Split a total cost over a number of servings."""
    if servings <= 0:
        return 0.0
    return total / servings
