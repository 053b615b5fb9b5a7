"""Pydantic models for library snapshots and run results."""

from .library import (
    DEFAULT_ITEM_KINDS,
    Collection,
    CollectionMembers,
    Item,
    ItemKind,
)
from .operations import ItemFailure, ReconcileSummary, TagUpdate

__all__ = [
    # Library
    "Item",
    "ItemKind",
    "Collection",
    "CollectionMembers",
    "DEFAULT_ITEM_KINDS",
    # Operations
    "TagUpdate",
    "ItemFailure",
    "ReconcileSummary",
]
