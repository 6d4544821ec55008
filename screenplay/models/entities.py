"""Entity Model — the six kinds of record a conversation builds up."""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Type, Union
from uuid import UUID, uuid4

from pydantic import (
    AwareDatetime,
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
    model_validator,
)

from screenplay.storage.errors import EntityValidationError


class EntityKind(str, Enum):
    ACTOR = "actor"
    GOAL = "goal"
    TASK = "task"
    INTERACTION = "interaction"
    QUESTION = "question"
    JOURNEY = "journey"


class Priority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class StepOutcome(str, Enum):
    SUCCESS = "success"
    FAILURE = "failure"
    BLOCKED = "blocked"


MANAGED_FIELDS = ("id", "created_at", "updated_at")


class Entity(BaseModel):
    """Fields shared by every stored record."""

    model_config = ConfigDict(extra="forbid")

    id: str
    name: str
    description: str
    created_at: AwareDatetime
    updated_at: AwareDatetime

    @field_validator("id")
    @classmethod
    def _id_is_uuid(cls, value: str) -> str:
        UUID(value)
        return value

    @field_validator("name")
    @classmethod
    def _name_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("name must not be empty")
        return value

    @model_validator(mode="after")
    def _timestamps_ordered(self):
        if self.updated_at < self.created_at:
            raise ValueError("updated_at precedes created_at")
        return self


class Actor(Entity):
    abilities: List[str] = []
    constraints: List[str] = []


class Goal(Entity):
    success_criteria: List[str] = []
    priority: Priority
    assigned_to: List[str] = []             # Actor IDs, may dangle

    @field_validator("assigned_to")
    @classmethod
    def _refs_not_empty(cls, value: List[str]) -> List[str]:
        return _check_refs(value)


class Task(Entity):
    required_abilities: List[str] = []
    composed_of: List[str] = []             # Interaction IDs, may dangle
    goal_ids: List[str] = []                # Goal IDs, may dangle

    @field_validator("composed_of", "goal_ids")
    @classmethod
    def _refs_not_empty(cls, value: List[str]) -> List[str]:
        return _check_refs(value)


class Interaction(Entity):
    preconditions: List[str] = []
    effects: List[str] = []


class Question(Entity):
    asks_about: str


class JourneyStep(BaseModel):
    """One recorded attempt at a task along a journey."""

    task_id: str = Field(min_length=1)   # May dangle
    outcome: StepOutcome
    timestamp: AwareDatetime


class Journey(Entity):
    actor_id: str = Field(min_length=1)  # May dangle
    goal_ids: List[str] = []
    steps: List[JourneyStep] = []           # Append-only

    @field_validator("goal_ids")
    @classmethod
    def _refs_not_empty(cls, value: List[str]) -> List[str]:
        return _check_refs(value)


AnyEntity = Union[Actor, Goal, Task, Interaction, Question, Journey]

ENTITY_MODELS: Dict[EntityKind, Type[Entity]] = {
    EntityKind.ACTOR: Actor,
    EntityKind.GOAL: Goal,
    EntityKind.TASK: Task,
    EntityKind.INTERACTION: Interaction,
    EntityKind.QUESTION: Question,
    EntityKind.JOURNEY: Journey,
}


def _check_refs(value: List[str]) -> List[str]:
    for ref in value:
        if not ref:
            raise ValueError("identifier must not be empty")
    return value


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def validate_entity(kind: EntityKind, data: Any) -> Entity:
    """
    Validate a record against its kind's schema.

    Accepts a dict or an already-built model; models are re-validated from
    their dumped form so a mutated instance cannot slip past the rules.
    """
    kind = EntityKind(kind)
    model = ENTITY_MODELS[kind]
    if isinstance(data, BaseModel):
        data = data.model_dump()
    try:
        return model.model_validate(data)
    except ValidationError as e:
        first = e.errors()[0]
        field = ".".join(str(part) for part in first["loc"]) or "<record>"
        raise EntityValidationError(kind.value, field, first["msg"]) from e


def new_entity(kind: EntityKind, fields: Dict[str, Any], now: Optional[datetime] = None) -> Entity:
    """Build a fresh record: new identifier, matching timestamps."""
    kind = EntityKind(kind)
    for key in MANAGED_FIELDS:
        if key in fields:
            raise EntityValidationError(kind.value, key, "assigned by the store")
    now = now or utc_now()
    data = dict(fields)
    data.update(id=str(uuid4()), created_at=now, updated_at=now)
    return validate_entity(kind, data)


def merge_entity(
    kind: EntityKind,
    existing: Entity,
    partial: Dict[str, Any],
    now: Optional[datetime] = None,
) -> Entity:
    """
    Shallow-merge ``partial`` over ``existing`` and re-validate the whole record.

    The identifier cannot change and the timestamps belong to the store:
    ``updated_at`` is refreshed here and never moves backwards.
    """
    kind = EntityKind(kind)
    model = ENTITY_MODELS[kind]

    for key in partial:
        if key not in model.model_fields:
            raise EntityValidationError(kind.value, key, "unknown field")
    if "id" in partial and partial["id"] != existing.id:
        raise EntityValidationError(kind.value, "id", "identifiers are immutable")

    merged = existing.model_dump()
    merged.update({k: v for k, v in partial.items() if k not in MANAGED_FIELDS})
    merged["updated_at"] = max(now or utc_now(), existing.updated_at)
    return validate_entity(kind, merged)
