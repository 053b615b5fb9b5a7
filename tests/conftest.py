import os

import pytest

from collection_tags.clients.memory import MemoryLibrary
from collection_tags.models import Collection, Item, ItemKind
from collection_tags.settings import TaggingSettings


@pytest.fixture(autouse=True)
def clear_tagging_env(monkeypatch):
    """Keep host environment variables out of settings under test."""
    for key in list(os.environ):
        if key.startswith("COLLECTION_TAGS_"):
            monkeypatch.delenv(key, raising=False)


@pytest.fixture
def make_settings():
    """Factory for tagging settings that ignores any .env file."""

    def _make(**overrides) -> TaggingSettings:
        return TaggingSettings(_env_file=None, **overrides)

    return _make


@pytest.fixture
def library():
    """Library from Scenario A: 'Marvel' holds X and Y, prefix '#CT_'."""
    lib = MemoryLibrary()
    lib.add_item(Item(id="X", name="Iron Man", kind=ItemKind.MOVIE, tags=["foo"]))
    lib.add_item(
        Item(id="Y", name="Thor", kind=ItemKind.MOVIE, tags=["#CT_Marvel", "bar"])
    )
    lib.add_item(Item(id="Z", name="Batman", kind=ItemKind.MOVIE, tags=[]))
    lib.add_collection(Collection(id="C1", name="Marvel"), ["X", "Y"])
    lib.add_collection(Collection(id="C2", name="DC"), ["Z"])
    return lib
