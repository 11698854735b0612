"""Helpers shared by the Supabase repositories."""

from datetime import datetime
from typing import Any

from cost_tracker.domain.errors import PersistenceError
from cost_tracker.domain.queries import ListParams, SortOrder


def execute(query: Any, action: str) -> list[dict[str, Any]]:
    """Run a PostgREST query and return its rows.

    Transport and API failures surface as :class:`PersistenceError`.
    """
    try:
        response = query.execute()
    except Exception as exc:
        raise PersistenceError(f"Failed to {action}: {exc}") from exc
    return list(response.data or [])


def apply_list_params(query: Any, params: ListParams, value_column: str) -> Any:
    """Apply filters, ordering and pagination to a select query."""
    if params.name:
        query = query.ilike("name", f"%{escape_like(params.name)}%")
    if params.store:
        query = query.ilike("store", f"%{escape_like(params.store)}%")
    if params.genre:
        query = query.eq("genre", params.genre)
    if params.min_value is not None:
        query = query.gte(value_column, params.min_value)
    if params.max_value is not None:
        query = query.lte(value_column, params.max_value)
    query = query.order(params.sort_by, desc=params.sort_order is SortOrder.DESC)
    if params.limit is not None:
        query = query.range(params.offset, params.offset + params.limit - 1)
    return query


def escape_like(value: str) -> str:
    """Escape LIKE wildcards so user text matches literally."""
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def parse_timestamp(value: object) -> datetime | None:
    if isinstance(value, str) and value:
        return datetime.fromisoformat(value)
    return None


def optional_float(value: object) -> float | None:
    if value is None:
        return None
    return float(value)
