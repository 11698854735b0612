"""Domain models for purchase candidate comparison."""

from dataclasses import dataclass

from cost_tracker.domain.ingredients import Ingredient


@dataclass(frozen=True)
class RankedCandidate:
    """An ingredient offer annotated with its normalized price."""

    ingredient: Ingredient
    normalized_quantity: float
    effective_price: float
    is_best_value: bool

    @property
    def comparable(self) -> bool:
        """False when the offer has no usable quantity to divide by."""
        return self.normalized_quantity > 0
