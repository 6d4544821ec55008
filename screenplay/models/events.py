"""Change events emitted by the entity store after each committed write."""

from enum import Enum
from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field

from screenplay.models.entities import AnyEntity, EntityKind


class ChangeType(str, Enum):
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


class EntityRef(BaseModel):
    """The only payload a delete carries."""

    id: str


class EntityCreated(BaseModel):
    type: Literal["create"] = "create"
    entity_kind: EntityKind
    data: AnyEntity


class EntityUpdated(BaseModel):
    type: Literal["update"] = "update"
    entity_kind: EntityKind
    data: AnyEntity


class EntityDeleted(BaseModel):
    type: Literal["delete"] = "delete"
    entity_kind: EntityKind
    data: EntityRef


ChangeEvent = Annotated[
    Union[EntityCreated, EntityUpdated, EntityDeleted],
    Field(discriminator="type"),
]
