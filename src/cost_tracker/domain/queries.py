"""Query parameters shared by the entity repositories."""

from dataclasses import dataclass
from enum import Enum


class SortOrder(str, Enum):
    ASC = "ASC"
    DESC = "DESC"


@dataclass(frozen=True)
class ListParams:
    """Filter, sort and pagination options for list queries.

    ``min_value``/``max_value`` bound the price for ingredients and completed
    foods and the total cost for dishes.
    """

    name: str | None = None
    store: str | None = None
    genre: str | None = None
    min_value: float | None = None
    max_value: float | None = None
    sort_by: str = "created_at"
    sort_order: SortOrder = SortOrder.ASC
    limit: int | None = None
    offset: int = 0
