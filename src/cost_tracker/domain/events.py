"""Change notifications published by the entity services."""

from dataclasses import dataclass
from enum import Enum
from uuid import UUID


class EntityKind(str, Enum):
    INGREDIENT = "ingredient"
    DISH = "dish"
    COMPLETED_FOOD = "completed_food"


class ChangeAction(str, Enum):
    CREATED = "created"
    UPDATED = "updated"
    DELETED = "deleted"


@dataclass(frozen=True)
class StoreEvent:
    """A committed change to one entity; ``entity`` is None for deletions."""

    kind: EntityKind
    action: ChangeAction
    entity_id: UUID
    entity: object | None = None
