"""Errors raised by the entity store and the layers built on it."""


class ScreenplayError(Exception):
    """Base class for every error the kernel raises."""
    pass


class EntityValidationError(ScreenplayError):
    """Raised when a record is malformed. Nothing is applied."""

    def __init__(self, kind: str, field: str, message: str):
        self.kind = kind
        self.field = field
        self.message = message
        super().__init__(f"Invalid {kind}: field '{field}': {message}")


class EntityNotFoundError(ScreenplayError):
    """Raised when an operation names an id absent from its kind's collection."""

    def __init__(self, kind: str, entity_id: str):
        self.kind = kind
        self.entity_id = entity_id
        super().__init__(f"Entity not found: {kind} with id {entity_id}")


class StoreInitializationError(ScreenplayError):
    """Raised when a durable collection cannot be loaded. Startup must abort."""

    def __init__(self, kind: str, path: str, reason: str):
        self.kind = kind
        self.path = path
        self.reason = reason
        super().__init__(f"Cannot load {kind} collection from {path}: {reason}")
