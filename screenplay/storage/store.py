"""
Entity Store — the single source of truth for what currently exists.

Updated by: define / update / delete / compose operations
Queried by: snapshot assembly, the Consistency Engine, the Query Engine

Behavioral Contract:
- One JSON file per entity kind, always rewritten in full via temp file + rename
- Every read is served from the in-memory cache; only writes and loads touch disk
- Reads take no lock: each one works on a single collection list, which
  writers replace and never mutate in place
- The cache only changes after the durable write for that kind has succeeded
- Each committed write emits exactly one change event before the call returns
- Cross-references are stored as given; dangling ones surface later as Gaps
"""

import json
import logging
import tempfile
import threading
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Union

from screenplay.consistency.engine import compute_gaps
from screenplay.models.config import StoreConfig
from screenplay.models.entities import (
    Entity,
    EntityKind,
    merge_entity,
    new_entity,
    validate_entity,
)
from screenplay.models.events import (
    ChangeEvent,
    EntityCreated,
    EntityDeleted,
    EntityRef,
    EntityUpdated,
)
from screenplay.models.snapshot import FullModel
from screenplay.storage.errors import (
    EntityNotFoundError,
    EntityValidationError,
    StoreInitializationError,
)
from screenplay.storage.events import ChangeBus, ChangeListener

logger = logging.getLogger(__name__)

KindLike = Union[EntityKind, str]


def _index_of(records: List[Entity], entity_id: str) -> Optional[int]:
    for index, entity in enumerate(records):
        if entity.id == entity_id:
            return index
    return None


class EntityStore:
    """
    Durable, observable store for the six entity kinds.

    Construct one per data directory and call ``initialize()`` before use.
    Writes to one kind are serialized by a per-kind lock; there is no
    cross-kind transaction.
    """

    def __init__(self, config: Optional[StoreConfig] = None, bus: Optional[ChangeBus] = None):
        self.config = config or StoreConfig()
        self.bus = bus or ChangeBus()
        self._cache: Dict[EntityKind, List[Entity]] = {kind: [] for kind in EntityKind}
        self._locks = {kind: threading.RLock() for kind in EntityKind}
        self._initialized = False

    @property
    def data_dir(self) -> Path:
        return Path(self.config.data_dir)

    @property
    def initialized(self) -> bool:
        return self._initialized

    def path_for(self, kind: KindLike) -> Path:
        """Canonical file for a kind, e.g. ``actors.json``."""
        return self.data_dir / f"{EntityKind(kind).value}s.json"

    # --- Initialization ---

    def initialize(self) -> None:
        """Load every collection, creating empty ones that do not exist yet."""
        self.data_dir.mkdir(parents=True, exist_ok=True)
        for kind in EntityKind:
            self.load(kind)
        self._initialized = True
        logger.info(f"Entity store initialized at {self.data_dir}")

    def load(self, kind: KindLike) -> List[Entity]:
        """
        (Re)load one kind's collection from disk into the cache.

        A missing file is created empty. An unreadable file or any invalid
        record raises StoreInitializationError; nothing is silently dropped.
        """
        kind = EntityKind(kind)
        path = self.path_for(kind)

        with self._locks[kind]:
            if not path.exists():
                self._write(kind, [])
                self._cache[kind] = []
                logger.info(f"No {kind.value} collection at {path}, created empty")
                return []

            try:
                raw = json.loads(path.read_text(encoding="utf-8"))
            except (OSError, ValueError) as e:
                raise StoreInitializationError(kind.value, str(path), str(e)) from e

            if not isinstance(raw, list):
                raise StoreInitializationError(
                    kind.value, str(path), "expected a JSON list of records"
                )

            records: List[Entity] = []
            seen_ids = set()
            for index, item in enumerate(raw):
                try:
                    entity = validate_entity(kind, item)
                except EntityValidationError as e:
                    raise StoreInitializationError(
                        kind.value, str(path), f"record {index}: {e}"
                    ) from e
                if entity.id in seen_ids:
                    raise StoreInitializationError(
                        kind.value, str(path), f"record {index}: duplicate id {entity.id}"
                    )
                seen_ids.add(entity.id)
                records.append(entity)

            self._cache[kind] = records
            logger.info(f"Loaded {len(records)} {kind.value} record(s) from {path}")
            return [e.model_copy(deep=True) for e in records]

    # --- Writes ---

    def define(self, kind: KindLike, fields: Dict[str, Any]) -> Entity:
        """Create a new entity from caller-supplied fields and save it."""
        return self.save(kind, new_entity(kind, fields))

    def save(self, kind: KindLike, entity: Union[Entity, Dict[str, Any]]) -> Entity:
        """Validate and append a complete record, then persist and emit ``create``."""
        kind = EntityKind(kind)
        validated = validate_entity(kind, entity)

        with self._locks[kind]:
            if self._id_in_use(validated.id):
                raise EntityValidationError(kind.value, "id", f"{validated.id} is already in use")
            records = self._cache[kind] + [validated]
            self._write(kind, records)
            self._cache[kind] = records
            self._emit(EntityCreated(entity_kind=kind, data=validated.model_copy(deep=True)))

        return validated.model_copy(deep=True)

    def update(self, kind: KindLike, entity_id: str, partial: Dict[str, Any]) -> Entity:
        """Merge ``partial`` into an existing record, keeping its position."""
        kind = EntityKind(kind)

        with self._locks[kind]:
            records = list(self._cache[kind])
            index = _index_of(records, entity_id)
            if index is None:
                raise EntityNotFoundError(kind.value, entity_id)

            updated = merge_entity(kind, records[index], partial)
            records[index] = updated
            self._write(kind, records)
            self._cache[kind] = records
            self._emit(EntityUpdated(entity_kind=kind, data=updated.model_copy(deep=True)))

        return updated.model_copy(deep=True)

    def modify(
        self,
        kind: KindLike,
        entity_id: str,
        change: Callable[[Entity], Dict[str, Any]],
    ) -> Entity:
        """
        Read-modify-write one record under its kind's lock.

        ``change`` receives a copy of the current record and returns the
        partial to merge, so concurrent edits of the same record cannot
        overwrite each other.
        """
        kind = EntityKind(kind)
        with self._locks[kind]:
            current = self.require(kind, entity_id)
            return self.update(kind, entity_id, change(current))

    def delete(self, kind: KindLike, entity_id: str) -> None:
        """Remove a record permanently. Stale references to it become Gaps."""
        kind = EntityKind(kind)

        with self._locks[kind]:
            records = [e for e in self._cache[kind] if e.id != entity_id]
            if len(records) == len(self._cache[kind]):
                raise EntityNotFoundError(kind.value, entity_id)

            self._write(kind, records)
            self._cache[kind] = records
            self._emit(EntityDeleted(entity_kind=kind, data=EntityRef(id=entity_id)))

    def clear(self) -> None:
        """
        Remove everything.

        Emits one ``delete`` per stored entity, oldest first and kind by kind,
        before each collection is truncated, so subscribers observe the same
        stream they would from deleting every entity individually.
        """
        total = 0
        for kind in EntityKind:
            with self._locks[kind]:
                for entity in self._cache[kind]:
                    self._emit(EntityDeleted(entity_kind=kind, data=EntityRef(id=entity.id)))
                total += len(self._cache[kind])
                self._write(kind, [])
                self._cache[kind] = []
        logger.info(f"Cleared entity store ({total} entities removed)")

    # --- Reads ---

    def get(self, kind: KindLike, entity_id: str) -> Optional[Entity]:
        records = self._cache[EntityKind(kind)]
        index = _index_of(records, entity_id)
        if index is None:
            return None
        return records[index].model_copy(deep=True)

    def get_all(self, kind: KindLike) -> List[Entity]:
        """All records of a kind, in insertion order."""
        return [e.model_copy(deep=True) for e in self._cache[EntityKind(kind)]]

    def require(self, kind: KindLike, entity_id: str) -> Entity:
        """Like ``get`` but raises EntityNotFoundError instead of returning None."""
        entity = self.get(kind, entity_id)
        if entity is None:
            raise EntityNotFoundError(EntityKind(kind).value, entity_id)
        return entity

    def snapshot(self) -> FullModel:
        """Every collection plus a freshly computed gap set."""
        model = FullModel(
            actors=self.get_all(EntityKind.ACTOR),
            goals=self.get_all(EntityKind.GOAL),
            tasks=self.get_all(EntityKind.TASK),
            interactions=self.get_all(EntityKind.INTERACTION),
            questions=self.get_all(EntityKind.QUESTION),
            journeys=self.get_all(EntityKind.JOURNEY),
        )
        model.gaps = compute_gaps(model)
        return model

    # --- Change feed ---

    def subscribe(self, listener: ChangeListener) -> ChangeListener:
        return self.bus.subscribe(listener)

    def unsubscribe(self, listener: ChangeListener) -> bool:
        return self.bus.unsubscribe(listener)

    # --- Internals ---

    def _id_in_use(self, entity_id: str) -> bool:
        return any(
            e.id == entity_id for records in self._cache.values() for e in records
        )

    def _emit(self, event: ChangeEvent) -> None:
        logger.debug(f"Emitting {event.type} event for {event.entity_kind.value} {event.data.id}")
        self.bus.publish(event)

    def _write(self, kind: EntityKind, records: List[Entity]) -> None:
        """
        Atomically replace a kind's file with ``records``.

        Readers of the file see either the old or the new collection, never a
        partial one. On failure the temp file is removed and the error re-raised.
        """
        path = self.path_for(kind)
        payload = [e.model_dump(mode="json") for e in records]
        tmp_path: Optional[Path] = None
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                mode="w",
                encoding="utf-8",
                dir=path.parent,
                prefix=f".{path.name}.",
                suffix=".tmp",
                delete=False,
            ) as tmp_file:
                tmp_path = Path(tmp_file.name)
                json.dump(payload, tmp_file, indent=self.config.json_indent)
            tmp_path.replace(path)
        except OSError as e:
            logger.error(f"Failed to persist {kind.value} collection to {path}: {e}")
            if tmp_path is not None and tmp_path.exists():
                tmp_path.unlink()
            raise
        logger.debug(f"Persisted {len(records)} {kind.value} record(s) to {path}")
