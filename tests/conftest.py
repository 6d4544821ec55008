"""Shared fixtures: an initialized store in a throwaway directory."""

from typing import List

import pytest

from screenplay.models.config import StoreConfig
from screenplay.models.events import ChangeEvent
from screenplay.storage.store import EntityStore


@pytest.fixture
def data_dir(tmp_path):
    return tmp_path / "screenplay"


@pytest.fixture
def store(data_dir) -> EntityStore:
    store = EntityStore(StoreConfig(data_dir=data_dir))
    store.initialize()
    return store


@pytest.fixture
def events(store) -> List[ChangeEvent]:
    """Every change event the store emits after the fixture is requested."""
    received: List[ChangeEvent] = []
    store.subscribe(received.append)
    return received
