"""Screenplay kernel data models."""

from screenplay.models.config import StoreConfig
from screenplay.models.entities import (
    ENTITY_MODELS,
    Actor,
    AnyEntity,
    Entity,
    EntityKind,
    Goal,
    Interaction,
    Journey,
    JourneyStep,
    Priority,
    Question,
    StepOutcome,
    Task,
)
from screenplay.models.events import (
    ChangeEvent,
    ChangeType,
    EntityCreated,
    EntityDeleted,
    EntityRef,
    EntityUpdated,
)
from screenplay.models.gap import ExpectedType, Gap
from screenplay.models.queries import ActorGoalCheck, GoalAchievability
from screenplay.models.snapshot import FullModel

__all__ = [
    "ENTITY_MODELS",
    "Actor",
    "ActorGoalCheck",
    "AnyEntity",
    "ChangeEvent",
    "ChangeType",
    "Entity",
    "EntityCreated",
    "EntityDeleted",
    "EntityKind",
    "EntityRef",
    "EntityUpdated",
    "ExpectedType",
    "FullModel",
    "Gap",
    "Goal",
    "GoalAchievability",
    "Interaction",
    "Journey",
    "JourneyStep",
    "Priority",
    "Question",
    "StepOutcome",
    "StoreConfig",
    "Task",
]
