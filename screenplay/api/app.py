"""
Screenplay Kernel API — FastAPI endpoints.

A thin dispatch layer over the kernel's operations for:
- Entity definition, lookup, update and deletion for all six kinds
- The full model snapshot (entities + computed gaps) and clearing it
- Composition of relationships between entities
- Analytical queries

Run with ``uvicorn --factory screenplay.api.app:create_app``.
"""

import logging
from typing import Any, Dict, Optional

from fastapi import Body, FastAPI, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from screenplay.composition.operations import ModelComposer
from screenplay.models.config import StoreConfig
from screenplay.models.entities import EntityKind, StepOutcome
from screenplay.queries.engine import ModelQueries
from screenplay.storage.errors import EntityNotFoundError, EntityValidationError
from screenplay.storage.store import EntityStore

logger = logging.getLogger(__name__)


# --- Request/Response Models ---

class JourneyStepRequest(BaseModel):
    task_id: str
    outcome: StepOutcome


def _ok(data: Any) -> dict:
    return {"success": True, "data": data}


def _dump(entity) -> Optional[dict]:
    return entity.model_dump(mode="json") if entity is not None else None


# --- Application Factory ---

def create_app(
    store: Optional[EntityStore] = None,
    config: Optional[StoreConfig] = None,
) -> FastAPI:
    """Create and configure the FastAPI application."""

    app = FastAPI(
        title="Screenplay Kernel API",
        description="Incrementally built actor/goal/task model with gap detection",
        version="0.1.0",
    )

    # Initialize components
    if store is None:
        store = EntityStore(config or StoreConfig.from_env())
    if not store.initialized:
        store.initialize()
    composer = ModelComposer(store)
    queries = ModelQueries(store)

    # Store components on app state for access in endpoints
    app.state.store = store
    app.state.composer = composer
    app.state.queries = queries

    # === ERRORS ===

    @app.exception_handler(EntityNotFoundError)
    async def not_found_handler(request: Request, exc: EntityNotFoundError):
        logger.info(f"{request.method} {request.url.path}: {exc}")
        return JSONResponse(status_code=404, content={"success": False, "error": str(exc)})

    @app.exception_handler(EntityValidationError)
    async def validation_handler(request: Request, exc: EntityValidationError):
        logger.warning(f"{request.method} {request.url.path}: {exc}")
        return JSONResponse(
            status_code=422,
            content={"success": False, "error": str(exc), "field": exc.field},
        )

    # === ENTITIES ===

    @app.post("/entities/{kind}")
    def define_entity(kind: EntityKind, fields: Dict[str, Any] = Body(...)):
        """Define a new entity; the id and timestamps are assigned here."""
        return _ok(_dump(store.define(kind, fields)))

    @app.get("/entities/{kind}")
    def list_entities(kind: EntityKind):
        """All entities of a kind, in creation order."""
        return [_dump(e) for e in store.get_all(kind)]

    @app.get("/entities/{kind}/{entity_id}")
    def get_entity(kind: EntityKind, entity_id: str):
        return _dump(store.require(kind, entity_id))

    @app.patch("/entities/{kind}/{entity_id}")
    def update_entity(kind: EntityKind, entity_id: str, partial: Dict[str, Any] = Body(...)):
        """Merge the given fields into an existing entity."""
        return _ok(_dump(store.update(kind, entity_id, partial)))

    @app.delete("/entities/{kind}/{entity_id}")
    def delete_entity(kind: EntityKind, entity_id: str):
        store.delete(kind, entity_id)
        return _ok({"id": entity_id})

    # === MODEL ===

    @app.get("/model")
    def get_full_model():
        """Every entity plus the gaps computed from their references."""
        return store.snapshot().model_dump(mode="json")

    @app.delete("/model")
    def clear_model():
        store.clear()
        return {"success": True, "message": "Model cleared"}

    # === COMPOSITION ===

    @app.post("/goals/{goal_id}/actors/{actor_id}")
    def assign_goal_to_actor(goal_id: str, actor_id: str):
        return _ok(_dump(composer.assign_goal_to_actor(goal_id, actor_id)))

    @app.delete("/goals/{goal_id}/actors/{actor_id}")
    def unassign_goal_from_actor(goal_id: str, actor_id: str):
        return _ok(_dump(composer.unassign_goal_from_actor(goal_id, actor_id)))

    @app.post("/tasks/{task_id}/interactions/{interaction_id}")
    def add_interaction_to_task(task_id: str, interaction_id: str):
        return _ok(_dump(composer.add_interaction_to_task(task_id, interaction_id)))

    @app.delete("/tasks/{task_id}/interactions/{interaction_id}")
    def remove_interaction_from_task(task_id: str, interaction_id: str):
        return _ok(_dump(composer.remove_interaction_from_task(task_id, interaction_id)))

    @app.post("/journeys/{journey_id}/goals/{goal_id}")
    def add_goal_to_journey(journey_id: str, goal_id: str):
        return _ok(_dump(composer.add_goal_to_journey(journey_id, goal_id)))

    @app.delete("/journeys/{journey_id}/goals/{goal_id}")
    def remove_goal_from_journey(journey_id: str, goal_id: str):
        return _ok(_dump(composer.remove_goal_from_journey(journey_id, goal_id)))

    @app.post("/journeys/{journey_id}/steps")
    def record_journey_step(journey_id: str, req: JourneyStepRequest):
        """Append a step to a journey; steps are never rewritten."""
        return _ok(_dump(composer.record_journey_step(journey_id, req.task_id, req.outcome)))

    # === QUERIES ===

    @app.get("/queries/actors-without-ability")
    def find_actors_without_ability(ability: str):
        return [_dump(a) for a in queries.actors_without_ability(ability)]

    @app.get("/queries/tasks-without-interactions")
    def find_tasks_without_interactions():
        return [_dump(t) for t in queries.tasks_without_interactions()]

    @app.get("/queries/untested-journeys")
    def find_untested_journeys():
        return [_dump(j) for j in queries.untested_journeys()]

    @app.get("/queries/actor-can-achieve-goal")
    def actor_can_achieve_goal(actor_id: str, goal_id: str):
        return queries.actor_can_achieve_goal(actor_id, goal_id).model_dump(mode="json")

    @app.get("/queries/unachievable-goals")
    def find_unachievable_goals(actor_id: Optional[str] = None):
        return [r.model_dump(mode="json") for r in queries.unachievable_goals(actor_id)]

    @app.get("/queries/find-by-name")
    def find_by_name(kind: EntityKind, name: str):
        """Case-insensitive name lookup, to avoid defining duplicates."""
        match = queries.find_by_name(kind, name)
        return {"found": match is not None, "data": _dump(match)}

    return app
