"""Request-scoped accessors shared by the API routers."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import Query, Request

from cost_tracker.domain.queries import ListParams, SortOrder

if TYPE_CHECKING:
    from cost_tracker.containers import AppContainer


def get_container(request: Request) -> AppContainer:
    """Return the container attached to the running app."""
    return request.app.state.container


def list_params(  # noqa: PLR0913
    request: Request,
    name: str | None = None,
    store: str | None = None,
    genre: str | None = None,
    min_value: float | None = None,
    max_value: float | None = None,
    sort_by: str = "created_at",
    sort_order: SortOrder = SortOrder.ASC,
    limit: int | None = Query(default=None, ge=1),
    offset: int = Query(default=0, ge=0),
) -> ListParams:
    """Build list query options, defaulting the page size from settings."""
    container = get_container(request)
    return ListParams(
        name=name,
        store=store,
        genre=genre,
        min_value=min_value,
        max_value=max_value,
        sort_by=sort_by,
        sort_order=sort_order,
        limit=limit or container.settings.default_page_size,
        offset=offset,
    )
