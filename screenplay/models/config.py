"""Store configuration."""

import os
from pathlib import Path

from pydantic import BaseModel, Field


def _default_data_dir() -> Path:
    return Path.home() / ".screenplay"


class StoreConfig(BaseModel):
    """Where and how the entity store keeps its collections."""

    data_dir: Path = Field(default_factory=_default_data_dir)
    json_indent: int = Field(ge=0, default=2)

    @classmethod
    def from_env(cls) -> "StoreConfig":
        """Overrides come from SCREENPLAY_DATA_DIR and SCREENPLAY_JSON_INDENT."""
        overrides = {}
        if os.environ.get("SCREENPLAY_DATA_DIR"):
            overrides["data_dir"] = Path(os.environ["SCREENPLAY_DATA_DIR"]).expanduser()
        if os.environ.get("SCREENPLAY_JSON_INDENT"):
            overrides["json_indent"] = int(os.environ["SCREENPLAY_JSON_INDENT"])
        return cls(**overrides)
