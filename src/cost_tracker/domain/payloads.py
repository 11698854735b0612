"""Request payloads for creating and updating entities.

Derived fields (unit prices, component costs, totals, profit figures) are
not part of any payload; unknown keys are dropped on validation.
"""

from typing import TypeVar
from uuid import UUID

import pydantic
from pydantic import BaseModel, ConfigDict, Field, model_validator

from cost_tracker.domain.errors import ValidationError
from cost_tracker.domain.foods import UsageUnit
from cost_tracker.domain.ingredients import Genre

NAME_MAX_LENGTH = 255
STORE_MAX_LENGTH = 100
UNIT_MAX_LENGTH = 20
DESCRIPTION_MAX_LENGTH = 1000
QUANTITY_MAX = 99999
PRICE_MAX = 999999

_PayloadT = TypeVar("_PayloadT", bound=BaseModel)


class _Payload(BaseModel):
    model_config = ConfigDict(extra="ignore", str_strip_whitespace=True)


class IngredientPayload(_Payload):
    """Fields for a new ingredient."""

    name: str = Field(min_length=1, max_length=NAME_MAX_LENGTH)
    store: str = Field(min_length=1, max_length=STORE_MAX_LENGTH)
    quantity: float = Field(gt=0, le=QUANTITY_MAX)
    unit: str = Field(min_length=1, max_length=UNIT_MAX_LENGTH)
    price: float = Field(gt=0, le=PRICE_MAX)
    genre: Genre


class IngredientUpdatePayload(_Payload):
    """Partial ingredient update."""

    name: str | None = Field(default=None, min_length=1, max_length=NAME_MAX_LENGTH)
    store: str | None = Field(default=None, min_length=1, max_length=STORE_MAX_LENGTH)
    quantity: float | None = Field(default=None, gt=0, le=QUANTITY_MAX)
    unit: str | None = Field(default=None, min_length=1, max_length=UNIT_MAX_LENGTH)
    price: float | None = Field(default=None, gt=0, le=PRICE_MAX)
    genre: Genre | None = None


class DishComponentPayload(_Payload):
    ingredient_id: UUID
    used_quantity: float = Field(gt=0, le=QUANTITY_MAX)


class DishPayload(_Payload):
    """Fields for a new dish."""

    name: str = Field(min_length=1, max_length=NAME_MAX_LENGTH)
    genre: str | None = Field(default=None, max_length=50)
    description: str | None = Field(default=None, max_length=DESCRIPTION_MAX_LENGTH)
    ingredients: list[DishComponentPayload] = Field(min_length=1)


class DishUpdatePayload(_Payload):
    """Partial dish update; ``ingredients`` replaces the whole component set."""

    name: str | None = Field(default=None, min_length=1, max_length=NAME_MAX_LENGTH)
    genre: str | None = Field(default=None, max_length=50)
    description: str | None = Field(default=None, max_length=DESCRIPTION_MAX_LENGTH)
    ingredients: list[DishComponentPayload] | None = Field(default=None, min_length=1)


class FoodComponentPayload(_Payload):
    dish_id: UUID
    usage_quantity: float = Field(gt=0, le=QUANTITY_MAX)
    usage_unit: UsageUnit = UsageUnit.SERVING
    description: str | None = Field(default=None, max_length=DESCRIPTION_MAX_LENGTH)

    @model_validator(mode="after")
    def _check_ratio(self) -> "FoodComponentPayload":
        check_usage_quantity(self.usage_quantity, self.usage_unit)
        return self


class CompletedFoodPayload(_Payload):
    """Fields for a new completed food."""

    name: str = Field(min_length=1, max_length=NAME_MAX_LENGTH)
    price: float | None = Field(default=None, ge=0, le=PRICE_MAX)
    description: str | None = Field(default=None, max_length=DESCRIPTION_MAX_LENGTH)
    dishes: list[FoodComponentPayload] = Field(min_length=1)


class CompletedFoodUpdatePayload(_Payload):
    """Partial completed food update; ``dishes`` replaces the whole set."""

    name: str | None = Field(default=None, min_length=1, max_length=NAME_MAX_LENGTH)
    price: float | None = Field(default=None, ge=0, le=PRICE_MAX)
    description: str | None = Field(default=None, max_length=DESCRIPTION_MAX_LENGTH)
    dishes: list[FoodComponentPayload] | None = Field(default=None, min_length=1)


def check_usage_quantity(quantity: float, unit: UsageUnit) -> None:
    """Reject non-positive quantities and ratios above one batch."""
    if quantity <= 0:
        raise ValidationError("Quantity must be greater than 0", field="usage_quantity")
    if unit is UsageUnit.RATIO and quantity > 1:
        raise ValidationError(
            "A ratio usage must be between 0 and 1", field="usage_quantity"
        )


def validate_payload(model: type[_PayloadT], payload: dict[str, object]) -> _PayloadT:
    """Validate ``payload`` against ``model``, raising a domain ValidationError."""
    try:
        return model.model_validate(payload)
    except pydantic.ValidationError as exc:
        error = exc.errors()[0]
        field = ".".join(str(part) for part in error.get("loc", ()))
        raise ValidationError(
            str(error.get("msg", "Invalid payload")), field=field or None
        ) from exc
