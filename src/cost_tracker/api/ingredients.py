"""Ingredient endpoints and the purchase candidate comparison."""

from typing import Any
from uuid import UUID

from fastapi import APIRouter, Body, Depends, Request

from cost_tracker.api.dependencies import get_container, list_params
from cost_tracker.api.serializers import (
    candidate_to_dict,
    envelope,
    ingredient_to_dict,
)
from cost_tracker.domain.errors import NotFoundError
from cost_tracker.domain.queries import ListParams

router = APIRouter(prefix="/api/ingredients", tags=["ingredients"])


@router.get("")
async def list_ingredients(
    request: Request, params: ListParams = Depends(list_params)
) -> dict[str, Any]:
    """List ingredients with filters, sorting and paging."""
    service = get_container(request).ingredient_service
    ingredients = service.list_ingredients(params)
    return envelope([ingredient_to_dict(item) for item in ingredients])


@router.get("/compare")
async def compare_ingredients(
    request: Request,
    name: str = "",
    normalize: bool = False,
    factor: float | None = None,
    lowest: bool = True,
) -> dict[str, Any]:
    """Rank the stored offers for an ingredient name by effective price."""
    container = get_container(request)
    if factor is None:
        factor = container.settings.default_piece_weight_g
    ranked = container.comparator.compare_by_name(
        name,
        normalize_count_units=normalize,
        conversion_factor=factor,
        lowest_price=lowest,
    )
    return envelope([candidate_to_dict(item) for item in ranked])


@router.get("/{ingredient_id}")
async def get_ingredient(ingredient_id: UUID, request: Request) -> dict[str, Any]:
    ingredient = get_container(request).ingredient_service.get_ingredient(
        ingredient_id
    )
    if ingredient is None:
        raise NotFoundError("ingredient", ingredient_id)
    return envelope(ingredient_to_dict(ingredient))


@router.post("", status_code=201)
async def create_ingredient(
    request: Request, payload: dict[str, Any] = Body(...)
) -> dict[str, Any]:
    ingredient = get_container(request).ingredient_service.create_ingredient(payload)
    return envelope(ingredient_to_dict(ingredient), "Ingredient created")


@router.put("/{ingredient_id}")
async def update_ingredient(
    ingredient_id: UUID, request: Request, payload: dict[str, Any] = Body(...)
) -> dict[str, Any]:
    ingredient = get_container(request).ingredient_service.update_ingredient(
        ingredient_id, payload
    )
    return envelope(ingredient_to_dict(ingredient), "Ingredient updated")


@router.delete("/{ingredient_id}")
async def delete_ingredient(ingredient_id: UUID, request: Request) -> dict[str, Any]:
    get_container(request).ingredient_service.delete_ingredient(ingredient_id)
    return envelope(message="Ingredient deleted")
