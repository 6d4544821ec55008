"""Tests for the Composition Operations."""

import threading
from uuid import uuid4

import pytest

from screenplay.composition.operations import ModelComposer
from screenplay.models import EntityKind, ExpectedType, StepOutcome
from screenplay.storage.errors import EntityNotFoundError, EntityValidationError


class TestGoalAssignment:
    def setup_method(self):
        self.actor_fields = {"name": "Accountant", "description": "", "abilities": ["audit"]}

    def test_assign_is_idempotent_but_still_emits(self, store, events):
        composer = ModelComposer(store)
        actor = store.define(EntityKind.ACTOR, self.actor_fields)
        goal = store.define(EntityKind.GOAL, {"name": "G", "description": "", "priority": "high"})
        events.clear()

        first = composer.assign_goal_to_actor(goal.id, actor.id)
        second = composer.assign_goal_to_actor(goal.id, actor.id)

        assert first.assigned_to == [actor.id]
        assert second.assigned_to == [actor.id]
        assert [e.type for e in events] == ["update", "update"]

    def test_unassign(self, store):
        composer = ModelComposer(store)
        other = str(uuid4())
        actor = store.define(EntityKind.ACTOR, self.actor_fields)
        goal = store.define(EntityKind.GOAL, {
            "name": "G", "description": "", "priority": "high", "assigned_to": [actor.id, other],
        })

        assert composer.unassign_goal_from_actor(goal.id, actor.id).assigned_to == [other]
        assert composer.unassign_goal_from_actor(goal.id, actor.id).assigned_to == [other]

    def test_forward_reference_becomes_gap(self, store):
        composer = ModelComposer(store)
        goal = store.define(EntityKind.GOAL, {"name": "G", "description": "", "priority": "low"})
        future_actor = str(uuid4())

        composer.assign_goal_to_actor(goal.id, future_actor)

        gaps = store.snapshot().gaps
        assert [(g.id, g.expected_type, g.referenced_by) for g in gaps] == [
            (future_actor, ExpectedType.ACTOR, [goal.id]),
        ]

    def test_concurrent_assignments_all_kept(self, store):
        goal = store.define(EntityKind.GOAL, {"name": "G", "description": "", "priority": "high"})
        actor_ids = [str(uuid4()) for _ in range(20)]

        def assign(ids):
            composer = ModelComposer(store)
            for actor_id in ids:
                composer.assign_goal_to_actor(goal.id, actor_id)

        threads = [threading.Thread(target=assign, args=(actor_ids[i::4],)) for i in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert sorted(store.get(EntityKind.GOAL, goal.id).assigned_to) == sorted(actor_ids)

    def test_missing_goal_aborts_before_write(self, store, events):
        composer = ModelComposer(store)
        with pytest.raises(EntityNotFoundError) as exc:
            composer.assign_goal_to_actor(str(uuid4()), str(uuid4()))
        assert exc.value.kind == "goal"
        assert events == []


class TestTaskInteractions:
    def test_add_and_remove(self, store, events):
        composer = ModelComposer(store)
        edit = store.define(EntityKind.INTERACTION, {"name": "Edit File", "description": ""})
        run = store.define(EntityKind.INTERACTION, {"name": "Run Tests", "description": ""})
        task = store.define(EntityKind.TASK, {"name": "Write Tests", "description": ""})
        events.clear()

        composer.add_interaction_to_task(task.id, edit.id)
        composer.add_interaction_to_task(task.id, run.id)
        composer.add_interaction_to_task(task.id, edit.id)
        assert store.get(EntityKind.TASK, task.id).composed_of == [edit.id, run.id]

        composer.remove_interaction_from_task(task.id, edit.id)
        assert store.get(EntityKind.TASK, task.id).composed_of == [run.id]
        assert len(events) == 4

    def test_missing_task(self, store):
        with pytest.raises(EntityNotFoundError):
            ModelComposer(store).remove_interaction_from_task(str(uuid4()), str(uuid4()))


class TestJourneys:
    def _journey(self, store):
        actor = store.define(EntityKind.ACTOR, {"name": "Dev", "description": ""})
        return store.define(EntityKind.JOURNEY, {
            "name": "Feature Development", "description": "", "actor_id": actor.id,
        })

    def test_add_and_remove_goal(self, store):
        composer = ModelComposer(store)
        journey = self._journey(store)
        goal = store.define(EntityKind.GOAL, {"name": "Ship", "description": "", "priority": "high"})

        composer.add_goal_to_journey(journey.id, goal.id)
        updated = composer.add_goal_to_journey(journey.id, goal.id)
        assert updated.goal_ids == [goal.id]

        assert composer.remove_goal_from_journey(journey.id, goal.id).goal_ids == []

    def test_record_steps_append(self, store):
        composer = ModelComposer(store)
        journey = self._journey(store)
        task = store.define(EntityKind.TASK, {"name": "Write Code", "description": ""})

        composer.record_journey_step(journey.id, task.id, "success")
        updated = composer.record_journey_step(journey.id, task.id, StepOutcome.BLOCKED)

        assert [s.task_id for s in updated.steps] == [task.id, task.id]
        assert [s.outcome for s in updated.steps] == [StepOutcome.SUCCESS, StepOutcome.BLOCKED]
        assert updated.steps[0].timestamp <= updated.steps[1].timestamp

    def test_record_step_with_invalid_outcome(self, store, events):
        composer = ModelComposer(store)
        journey = self._journey(store)
        events.clear()

        with pytest.raises(EntityValidationError):
            composer.record_journey_step(journey.id, str(uuid4()), "abandoned")

        assert store.get(EntityKind.JOURNEY, journey.id).steps == []
        assert events == []

    def test_step_for_undefined_task_is_a_gap(self, store):
        composer = ModelComposer(store)
        journey = self._journey(store)
        task_id = str(uuid4())

        composer.record_journey_step(journey.id, task_id, "failure")

        gaps = store.snapshot().gaps
        assert [(g.id, g.expected_type) for g in gaps] == [(task_id, ExpectedType.TASK)]

    def test_missing_journey(self, store):
        with pytest.raises(EntityNotFoundError):
            ModelComposer(store).record_journey_step(str(uuid4()), str(uuid4()), "success")
