"""Gap — a placeholder for an identifier that is referenced but not defined."""

from enum import Enum
from typing import List

from pydantic import BaseModel


class ExpectedType(str, Enum):
    ACTOR = "actor"
    GOAL = "goal"
    TASK = "task"
    INTERACTION = "interaction"


class Gap(BaseModel):
    """Derived on every snapshot. Never persisted."""

    id: str                                 # The dangling identifier itself
    expected_type: ExpectedType             # Fixed by the first field that referenced it
    referenced_by: List[str] = []           # Referencing entity IDs, first-seen order
