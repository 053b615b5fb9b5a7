"""Library interfaces consumed by the reconciliation core."""

from collections.abc import Iterable
from typing import Protocol, runtime_checkable

from collection_tags.models import Collection, Item, ItemKind


@runtime_checkable
class LibraryClient(Protocol):
    """
    Read and write access to a media library.

    ``collection_members`` returns the member-closure of a collection: items
    of nested collections are included. ``update_item`` replaces the item's
    whole tag list and raises on failure.
    """

    async def list_items(self, kinds: Iterable[ItemKind]) -> list[Item]: ...

    async def list_collections(self) -> list[Collection]: ...

    async def collection_members(self, collection: Collection) -> list[Item]: ...

    async def update_item(self, item: Item, new_tags: list[str]) -> None: ...
