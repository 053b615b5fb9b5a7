"""
Library backends for collection tags.

- MemoryLibrary: in-memory library with JSON snapshots
- ZoteroLibrary: Zotero Web/Local API via pyzotero
"""

from collection_tags.config import Config
from collection_tags.utils.errors import ConfigurationError

from .base import LibraryClient
from .memory import MemoryLibrary
from .zotero_client import ZoteroLibrary, create_zotero_library


def create_library(config: Config) -> LibraryClient:
    """Build the library backend selected by ``config.library_backend``."""
    if config.library_backend == "zotero":
        return create_zotero_library(config)
    if not config.library_file:
        raise ConfigurationError(
            "LIBRARY_FILE is required for the memory backend",
            suggestion="Point LIBRARY_FILE at a JSON library snapshot",
        )
    return MemoryLibrary.load(config.library_file)


__all__ = [
    "LibraryClient",
    "MemoryLibrary",
    "ZoteroLibrary",
    "create_library",
    "create_zotero_library",
]
