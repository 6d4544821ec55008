"""Query results — derived, read-only analyses of the model."""

from typing import List

from pydantic import BaseModel

from screenplay.models.entities import Actor, Goal


class ActorGoalCheck(BaseModel):
    """Whether one actor can carry out at least one task toward one goal."""

    can_achieve: bool
    reason: str
    actor_abilities: List[str] = []
    required_abilities: List[str] = []
    missing_abilities: List[str] = []


class GoalAchievability(BaseModel):
    """Why a goal cannot be reached by the actors assigned to it."""

    goal: Goal
    is_achievable: bool
    reason: str
    assigned_actors: List[Actor] = []       # Only assigned actors that exist
    missing_abilities: List[str] = []
