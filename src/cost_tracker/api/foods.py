"""Completed food endpoints; responses carry profit figures."""

from typing import Any
from uuid import UUID

from fastapi import APIRouter, Body, Depends, Request

from cost_tracker.api.dependencies import get_container, list_params
from cost_tracker.api.serializers import envelope, food_to_dict
from cost_tracker.domain.errors import NotFoundError
from cost_tracker.domain.foods import CompletedFood
from cost_tracker.domain.queries import ListParams
from cost_tracker.services.foods import CompletedFoodService

router = APIRouter(prefix="/api/completed-foods", tags=["completed-foods"])


@router.get("")
async def list_foods(
    request: Request, params: ListParams = Depends(list_params)
) -> dict[str, Any]:
    service = get_container(request).food_service
    return envelope([_serialize(food) for food in service.list_foods(params)])


@router.get("/{food_id}")
async def get_food(food_id: UUID, request: Request) -> dict[str, Any]:
    food = get_container(request).food_service.get_food(food_id)
    if food is None:
        raise NotFoundError("completed food", food_id)
    return envelope(_serialize(food))


@router.post("", status_code=201)
async def create_food(
    request: Request, payload: dict[str, Any] = Body(...)
) -> dict[str, Any]:
    food = get_container(request).food_service.create_food(payload)
    return envelope(_serialize(food), "Completed food created")


@router.put("/{food_id}")
async def update_food(
    food_id: UUID, request: Request, payload: dict[str, Any] = Body(...)
) -> dict[str, Any]:
    food = get_container(request).food_service.update_food(food_id, payload)
    return envelope(_serialize(food), "Completed food updated")


@router.post("/{food_id}/rebuild")
async def rebuild_food(food_id: UUID, request: Request) -> dict[str, Any]:
    """Re-price a completed food from its dishes' stored totals."""
    food = get_container(request).food_service.rebuild_food(food_id)
    return envelope(_serialize(food), "Completed food cost rebuilt")


@router.delete("/{food_id}")
async def delete_food(food_id: UUID, request: Request) -> dict[str, Any]:
    get_container(request).food_service.delete_food(food_id)
    return envelope(message="Completed food deleted")


def _serialize(food: CompletedFood) -> dict[str, Any]:
    return food_to_dict(food, CompletedFoodService.profitability(food))
