"""
Consistency Engine — reconciles cross-references against what actually exists.

Behavioral Contract:
- Pure: reads a FullModel, returns a fresh list of Gaps, mutates nothing
- Recomputed on every request; no incremental state is kept
- A gap exists iff some reference field names an id that is not the id of
  any Actor, Goal, Task or Interaction
- Questions and Journeys are never reference targets
"""

from typing import Callable, Dict, Iterable, Iterator, List, Set, Tuple

from screenplay.models.entities import Entity, Journey
from screenplay.models.gap import ExpectedType, Gap
from screenplay.models.snapshot import FullModel

# (entities to scan, (id, expected type) pairs each one references)
ReferenceScan = Tuple[
    Callable[[FullModel], Iterable[Entity]],
    Callable[[Entity], Iterable[Tuple[str, ExpectedType]]],
]


def _journey_refs(journey: Journey) -> Iterator[Tuple[str, ExpectedType]]:
    yield journey.actor_id, ExpectedType.ACTOR
    for goal_id in journey.goal_ids:
        yield goal_id, ExpectedType.GOAL
    for step in journey.steps:
        yield step.task_id, ExpectedType.TASK


# Scan order matters: the first reference to a dangling id fixes its
# expected_type and its position in the result. Goal and task fields are
# scanned field by field; each journey is scanned whole before the next.
REFERENCE_SCANS: List[ReferenceScan] = [
    (lambda m: m.goals, lambda g: [(r, ExpectedType.ACTOR) for r in g.assigned_to]),
    (lambda m: m.tasks, lambda t: [(r, ExpectedType.INTERACTION) for r in t.composed_of]),
    (lambda m: m.tasks, lambda t: [(r, ExpectedType.GOAL) for r in t.goal_ids]),
    (lambda m: m.journeys, _journey_refs),
]


def existing_ids(model: FullModel) -> Set[str]:
    """Identifiers a reference may resolve to."""
    ids: Set[str] = set()
    for collection in (model.actors, model.goals, model.tasks, model.interactions):
        ids.update(e.id for e in collection)
    return ids


def compute_gaps(model: FullModel) -> List[Gap]:
    """
    Compute the current gap set from a full snapshot.

    Each (gap id, referencing id) pair is recorded once, so an entity that
    names the same missing id twice still appears once in referenced_by.
    If one id dangles under two expected types, the first reference scanned wins.
    """
    real = existing_ids(model)
    gaps: Dict[str, Gap] = {}
    seen: Set[Tuple[str, str]] = set()

    for entities_of, refs_of in REFERENCE_SCANS:
        for entity in entities_of(model):
            for ref, expected in refs_of(entity):
                if ref in real:
                    continue
                gap = gaps.get(ref)
                if gap is None:
                    gap = Gap(id=ref, expected_type=expected, referenced_by=[])
                    gaps[ref] = gap
                if (ref, entity.id) not in seen:
                    seen.add((ref, entity.id))
                    gap.referenced_by.append(entity.id)

    return list(gaps.values())
