"""
Composition Operations — idempotent edits to a single reference list.

Behavioral Contract:
- The target entity must exist; a missing target aborts before any write
- Each edit reads and writes the target under its kind's lock (``store.modify``)
- The referenced id is never checked: forward references are allowed
- Add/assign is a union, remove/unassign a filtered exclusion; repeating
  either leaves the list unchanged but still goes through ``update``, so an
  ``update`` event fires every time
- Journey steps are append-only
"""

from typing import List, Union

from screenplay.models.entities import (
    EntityKind,
    Goal,
    Journey,
    StepOutcome,
    Task,
    utc_now,
)
from screenplay.storage.store import EntityStore


def _with(items: List[str], item: str) -> List[str]:
    return items if item in items else items + [item]


def _without(items: List[str], item: str) -> List[str]:
    return [i for i in items if i != item]


class ModelComposer:
    """Relationship mutators layered on an EntityStore."""

    def __init__(self, store: EntityStore):
        self.store = store

    # --- Goal <-> Actor ---

    def assign_goal_to_actor(self, goal_id: str, actor_id: str) -> Goal:
        return self.store.modify(
            EntityKind.GOAL,
            goal_id,
            lambda goal: {"assigned_to": _with(goal.assigned_to, actor_id)},
        )

    def unassign_goal_from_actor(self, goal_id: str, actor_id: str) -> Goal:
        return self.store.modify(
            EntityKind.GOAL,
            goal_id,
            lambda goal: {"assigned_to": _without(goal.assigned_to, actor_id)},
        )

    # --- Task <-> Interaction ---

    def add_interaction_to_task(self, task_id: str, interaction_id: str) -> Task:
        return self.store.modify(
            EntityKind.TASK,
            task_id,
            lambda task: {"composed_of": _with(task.composed_of, interaction_id)},
        )

    def remove_interaction_from_task(self, task_id: str, interaction_id: str) -> Task:
        return self.store.modify(
            EntityKind.TASK,
            task_id,
            lambda task: {"composed_of": _without(task.composed_of, interaction_id)},
        )

    # --- Journey ---

    def add_goal_to_journey(self, journey_id: str, goal_id: str) -> Journey:
        return self.store.modify(
            EntityKind.JOURNEY,
            journey_id,
            lambda journey: {"goal_ids": _with(journey.goal_ids, goal_id)},
        )

    def remove_goal_from_journey(self, journey_id: str, goal_id: str) -> Journey:
        return self.store.modify(
            EntityKind.JOURNEY,
            journey_id,
            lambda journey: {"goal_ids": _without(journey.goal_ids, goal_id)},
        )

    def record_journey_step(
        self,
        journey_id: str,
        task_id: str,
        outcome: Union[StepOutcome, str],
    ) -> Journey:
        """Append a step stamped with the current time. Never deduplicated."""
        step = {"task_id": task_id, "outcome": outcome, "timestamp": utc_now()}
        return self.store.modify(
            EntityKind.JOURNEY,
            journey_id,
            lambda journey: {"steps": [s.model_dump() for s in journey.steps] + [step]},
        )
