"""Dish endpoints."""

from typing import Any
from uuid import UUID

from fastapi import APIRouter, Body, Depends, Request

from cost_tracker.api.dependencies import get_container, list_params
from cost_tracker.api.serializers import dish_to_dict, envelope
from cost_tracker.domain.errors import NotFoundError
from cost_tracker.domain.queries import ListParams

router = APIRouter(prefix="/api/dishes", tags=["dishes"])


@router.get("")
async def list_dishes(
    request: Request, params: ListParams = Depends(list_params)
) -> dict[str, Any]:
    """List dishes; ``min_value``/``max_value`` bound the total cost."""
    service = get_container(request).dish_service
    return envelope([dish_to_dict(dish) for dish in service.list_dishes(params)])


@router.get("/{dish_id}")
async def get_dish(dish_id: UUID, request: Request) -> dict[str, Any]:
    dish = get_container(request).dish_service.get_dish(dish_id)
    if dish is None:
        raise NotFoundError("dish", dish_id)
    return envelope(dish_to_dict(dish))


@router.post("", status_code=201)
async def create_dish(
    request: Request, payload: dict[str, Any] = Body(...)
) -> dict[str, Any]:
    dish = get_container(request).dish_service.create_dish(payload)
    return envelope(dish_to_dict(dish), "Dish created")


@router.put("/{dish_id}")
async def update_dish(
    dish_id: UUID, request: Request, payload: dict[str, Any] = Body(...)
) -> dict[str, Any]:
    dish = get_container(request).dish_service.update_dish(dish_id, payload)
    return envelope(dish_to_dict(dish), "Dish updated")


@router.post("/{dish_id}/rebuild")
async def rebuild_dish(dish_id: UUID, request: Request) -> dict[str, Any]:
    """Re-price a dish from current ingredient prices."""
    dish = get_container(request).dish_service.rebuild_dish(dish_id)
    return envelope(dish_to_dict(dish), "Dish cost rebuilt")


@router.delete("/{dish_id}")
async def delete_dish(dish_id: UUID, request: Request) -> dict[str, Any]:
    get_container(request).dish_service.delete_dish(dish_id)
    return envelope(message="Dish deleted")
