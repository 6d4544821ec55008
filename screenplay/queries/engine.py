"""
Query Engine — read-only analyses over the model.

Every query is a pure function of the entities handed to it. ModelQueries
binds them to a store for callers that only hold identifiers.
"""

from typing import Iterable, List, Optional, Sequence, TypeVar

from screenplay.models.entities import Actor, Entity, EntityKind, Goal, Journey, Task
from screenplay.models.queries import ActorGoalCheck, GoalAchievability
from screenplay.storage.store import EntityStore, KindLike

E = TypeVar("E", bound=Entity)


def _ordered_union(lists: Iterable[Sequence[str]]) -> List[str]:
    """Union of several lists, keeping first-seen order."""
    result: List[str] = []
    for items in lists:
        for item in items:
            if item not in result:
                result.append(item)
    return result


def _tasks_for_goal(goal: Goal, tasks: Sequence[Task]) -> List[Task]:
    return [t for t in tasks if goal.id in t.goal_ids]


def find_actors_without_ability(actors: Sequence[Actor], ability: str) -> List[Actor]:
    """Actors whose abilities do not include ``ability``."""
    return [a for a in actors if ability not in a.abilities]


def find_tasks_without_interactions(tasks: Sequence[Task]) -> List[Task]:
    """Tasks that still need decomposing into interactions."""
    return [t for t in tasks if not t.composed_of]


def find_untested_journeys(journeys: Sequence[Journey]) -> List[Journey]:
    """Journeys with no recorded steps."""
    return [j for j in journeys if not j.steps]


def find_by_name(entities: Sequence[E], name: str) -> Optional[E]:
    """
    First entity whose name matches, ignoring case and surrounding whitespace.

    Callers use this to reuse an existing entity instead of defining a
    duplicate under the same name.
    """
    wanted = name.strip().lower()
    for entity in entities:
        if entity.name.strip().lower() == wanted:
            return entity
    return None


def check_actor_can_achieve_goal(
    actor: Actor,
    goal: Goal,
    tasks: Sequence[Task],
) -> ActorGoalCheck:
    """
    Can ``actor`` perform at least one task that leads to ``goal``?

    Fails closed when the actor is not assigned or no task references the
    goal. Otherwise the first task whose required abilities the actor fully
    covers wins; if there is none, the report lists every ability missing
    across all of the goal's tasks.
    """
    abilities = set(actor.abilities)

    if actor.id not in goal.assigned_to:
        return ActorGoalCheck(
            can_achieve=False,
            reason=f'Actor "{actor.name}" is not assigned to goal "{goal.name}"',
            actor_abilities=list(actor.abilities),
        )

    relevant = _tasks_for_goal(goal, tasks)
    if not relevant:
        return ActorGoalCheck(
            can_achieve=False,
            reason=(
                f'No tasks defined yet for goal "{goal.name}". '
                "Cannot determine missing abilities."
            ),
            actor_abilities=list(actor.abilities),
        )

    for task in relevant:
        if all(ability in abilities for ability in task.required_abilities):
            return ActorGoalCheck(
                can_achieve=True,
                reason=f'Actor "{actor.name}" can perform task "{task.name}"',
                actor_abilities=list(actor.abilities),
                required_abilities=_ordered_union([task.required_abilities]),
            )

    required = _ordered_union(t.required_abilities for t in relevant)
    missing = [a for a in required if a not in abilities]
    return ActorGoalCheck(
        can_achieve=False,
        reason=(
            f'Actor "{actor.name}" cannot perform any task for goal "{goal.name}". '
            f"Missing abilities: {', '.join(missing)}"
        ),
        actor_abilities=list(actor.abilities),
        required_abilities=required,
        missing_abilities=missing,
    )


def find_unachievable_goals(
    goals: Sequence[Goal],
    actors: Sequence[Actor],
    tasks: Sequence[Task],
    actor_id: Optional[str] = None,
) -> List[GoalAchievability]:
    """
    Goals that none of their assigned actors can reach.

    A goal is unachievable when no assigned actor exists, when no task
    references it, or when no single assigned actor covers every required
    ability of any single referencing task. With ``actor_id`` set, only goals
    assigned to that actor are examined.
    """
    actors_by_id = {a.id: a for a in actors}
    unachievable: List[GoalAchievability] = []

    for goal in goals:
        if actor_id is not None and actor_id not in goal.assigned_to:
            continue

        assigned = [actors_by_id[i] for i in goal.assigned_to if i in actors_by_id]
        if not assigned:
            if goal.assigned_to:
                reason = "All assigned actors are missing (gaps)"
            else:
                reason = "No actors assigned to this goal"
            unachievable.append(GoalAchievability(goal=goal, is_achievable=False, reason=reason))
            continue

        relevant = _tasks_for_goal(goal, tasks)
        if not relevant:
            unachievable.append(GoalAchievability(
                goal=goal,
                is_achievable=False,
                reason=f'No tasks defined yet for goal "{goal.name}"',
                assigned_actors=assigned,
            ))
            continue

        capable = any(
            all(ability in actor.abilities for ability in task.required_abilities)
            for actor in assigned
            for task in relevant
        )
        if capable:
            continue

        required = _ordered_union(t.required_abilities for t in relevant)
        pooled = set(_ordered_union(a.abilities for a in assigned))
        missing = [a for a in required if a not in pooled]
        unachievable.append(GoalAchievability(
            goal=goal,
            is_achievable=False,
            reason=(
                f'None of the assigned actors can perform tasks for goal "{goal.name}". '
                f"Missing abilities: {', '.join(missing)}"
            ),
            assigned_actors=assigned,
            missing_abilities=missing,
        ))

    return unachievable


class ModelQueries:
    """The query functions above, resolved against a store's current contents."""

    def __init__(self, store: EntityStore):
        self.store = store

    def actors_without_ability(self, ability: str) -> List[Actor]:
        return find_actors_without_ability(self.store.get_all(EntityKind.ACTOR), ability)

    def tasks_without_interactions(self) -> List[Task]:
        return find_tasks_without_interactions(self.store.get_all(EntityKind.TASK))

    def untested_journeys(self) -> List[Journey]:
        return find_untested_journeys(self.store.get_all(EntityKind.JOURNEY))

    def actor_can_achieve_goal(self, actor_id: str, goal_id: str) -> ActorGoalCheck:
        """Raises EntityNotFoundError if either id does not exist."""
        actor = self.store.require(EntityKind.ACTOR, actor_id)
        goal = self.store.require(EntityKind.GOAL, goal_id)
        return check_actor_can_achieve_goal(actor, goal, self.store.get_all(EntityKind.TASK))

    def unachievable_goals(self, actor_id: Optional[str] = None) -> List[GoalAchievability]:
        return find_unachievable_goals(
            self.store.get_all(EntityKind.GOAL),
            self.store.get_all(EntityKind.ACTOR),
            self.store.get_all(EntityKind.TASK),
            actor_id=actor_id,
        )

    def find_by_name(self, kind: KindLike, name: str) -> Optional[Entity]:
        return find_by_name(self.store.get_all(kind), name)
