"""Purchase candidate comparison across stores, units and pack sizes."""

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Protocol

from cost_tracker.domain.comparison import RankedCandidate
from cost_tracker.domain.ingredients import Ingredient
from cost_tracker.domain.queries import SortOrder
from cost_tracker.services.costing import unit_price

DEFAULT_COUNT_UNITS = frozenset(
    {"個", "本", "枚", "パック", "piece", "pieces", "pc", "pcs"}
)

_logger = logging.getLogger(__name__)


class IngredientSearch(Protocol):
    """Name search over stored ingredients."""

    def search(
        self, name: str, sort_key: str, sort_order: SortOrder
    ) -> list[Ingredient]:
        """Return ingredients whose name matches ``name``."""


def normalized_quantity(
    ingredient: Ingredient,
    *,
    normalize_count_units: bool,
    conversion_factor: float | None,
    count_units: frozenset[str] = DEFAULT_COUNT_UNITS,
) -> float:
    """Return the quantity expressed in weight units when conversion applies."""
    if (
        normalize_count_units
        and ingredient.unit in count_units
        and conversion_factor is not None
        and conversion_factor > 0
    ):
        return ingredient.quantity * conversion_factor
    return ingredient.quantity


def rank_candidates(
    candidates: Iterable[Ingredient],
    *,
    normalize_count_units: bool = False,
    conversion_factor: float | None = None,
    lowest_price: bool = True,
    count_units: frozenset[str] = DEFAULT_COUNT_UNITS,
) -> list[RankedCandidate]:
    """Annotate candidates with their effective price and flag the best value.

    In lowest-price mode the result is sorted by effective price, ties kept in
    input order and candidates without a usable quantity moved to the end.
    Otherwise input order is preserved. The best value is always the cheapest
    comparable candidate.
    """
    priced = []
    for ingredient in candidates:
        quantity = normalized_quantity(
            ingredient,
            normalize_count_units=normalize_count_units,
            conversion_factor=conversion_factor,
            count_units=count_units,
        )
        priced.append((ingredient, quantity, unit_price(ingredient.price, quantity)))

    best_index: int | None = None
    for index, (_, quantity, price) in enumerate(priced):
        if quantity <= 0:
            continue
        if best_index is None or price < priced[best_index][2]:
            best_index = index

    ranked = [
        RankedCandidate(
            ingredient=ingredient,
            normalized_quantity=quantity,
            effective_price=price,
            is_best_value=index == best_index,
        )
        for index, (ingredient, quantity, price) in enumerate(priced)
    ]
    if lowest_price:
        ranked.sort(key=lambda item: (not item.comparable, item.effective_price))
    return ranked


@dataclass
class CandidateComparator:
    """Runs a name search and ranks the matching offers."""

    repository: IngredientSearch
    count_units: frozenset[str] = field(default=DEFAULT_COUNT_UNITS)

    def compare_by_name(
        self,
        name: str,
        *,
        normalize_count_units: bool = False,
        conversion_factor: float | None = None,
        lowest_price: bool = True,
    ) -> list[RankedCandidate]:
        """Search offers for ``name`` and rank them."""
        cleaned = name.strip()
        if not cleaned:
            return []
        sort_key = "unit_price" if lowest_price else "created_at"
        candidates = self.repository.search(cleaned, sort_key, SortOrder.ASC)
        _logger.debug(
            "Comparing %s candidates for %r (normalize=%s, factor=%s)",
            len(candidates),
            cleaned,
            normalize_count_units,
            conversion_factor,
        )
        return rank_candidates(
            candidates,
            normalize_count_units=normalize_count_units,
            conversion_factor=conversion_factor,
            lowest_price=lowest_price,
            count_units=self.count_units,
        )
