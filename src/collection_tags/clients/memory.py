"""
In-memory library backend.

Holds items and collections keyed by id and can be loaded from or saved to a
JSON snapshot, so a library can be reconciled offline and inspected after.
"""

from collections.abc import Iterable
import json
import logging
from pathlib import Path
from typing import Any

from collection_tags.models import Collection, Item, ItemKind
from collection_tags.utils.errors import NotFoundError, PersistenceError

logger = logging.getLogger(__name__)


class MemoryLibrary:
    """Library backend holding snapshots in dictionaries."""

    def __init__(self, path: str | Path | None = None):
        self.path = Path(path) if path else None
        self._items: dict[str, Item] = {}
        self._collections: dict[str, Collection] = {}
        # collection id -> direct member item ids, in insertion order
        self._members: dict[str, list[str]] = {}
        self.update_calls: list[tuple[str, list[str]]] = []

    # -------------------- Building --------------------

    def add_item(self, item: Item) -> Item:
        self._items[item.id] = item
        return item

    def add_collection(
        self, collection: Collection, item_ids: Iterable[str] = ()
    ) -> Collection:
        self._collections[collection.id] = collection
        self._members.setdefault(collection.id, [])
        for item_id in item_ids:
            self.add_to_collection(collection.id, item_id)
        return collection

    def add_to_collection(self, collection_id: str, item_id: str) -> None:
        if collection_id not in self._collections:
            raise NotFoundError(f"Collection not found: {collection_id}")
        if item_id not in self._items:
            raise NotFoundError(f"Item not found: {item_id}")
        members = self._members.setdefault(collection_id, [])
        if item_id not in members:
            members.append(item_id)

    def get_item(self, item_id: str) -> Item:
        try:
            return self._items[item_id]
        except KeyError:
            raise NotFoundError(f"Item not found: {item_id}") from None

    # -------------------- LibraryClient --------------------

    async def list_items(self, kinds: Iterable[ItemKind]) -> list[Item]:
        wanted = set(kinds)
        return [item for item in self._items.values() if item.kind in wanted]

    async def list_collections(self) -> list[Collection]:
        return list(self._collections.values())

    async def collection_members(self, collection: Collection) -> list[Item]:
        if collection.id not in self._collections:
            raise NotFoundError(f"Collection not found: {collection.id}")

        members: list[Item] = []
        seen_items: set[str] = set()
        visited: set[str] = set()
        stack = [collection.id]

        while stack:
            current = stack.pop()
            if current in visited:
                continue
            visited.add(current)

            for item_id in self._members.get(current, []):
                if item_id not in seen_items and item_id in self._items:
                    seen_items.add(item_id)
                    members.append(self._items[item_id])

            children = [
                child.id
                for child in self._collections.values()
                if child.parent_id == current
            ]
            # Reverse so children are visited in insertion order
            stack.extend(reversed(children))

        return members

    async def update_item(self, item: Item, new_tags: list[str]) -> None:
        if item.id not in self._items:
            raise PersistenceError(f"Item not found: {item.id}", item_id=item.id)
        self.update_calls.append((item.id, list(new_tags)))
        self._items[item.id] = self._items[item.id].with_tags(new_tags)

    # -------------------- Snapshots --------------------

    def to_dict(self) -> dict[str, Any]:
        return {
            "items": [item.model_dump(mode="json") for item in self._items.values()],
            "collections": [
                {
                    **collection.model_dump(mode="json"),
                    "items": list(self._members.get(collection.id, [])),
                }
                for collection in self._collections.values()
            ],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any], path: str | Path | None = None) -> "MemoryLibrary":
        library = cls(path)
        for raw in data.get("items", []):
            library.add_item(Item.model_validate(raw))
        for raw in data.get("collections", []):
            raw = dict(raw)
            item_ids = raw.pop("items", [])
            library.add_collection(Collection.model_validate(raw))
            for item_id in item_ids:
                if item_id not in library._items:
                    logger.warning(
                        f"Collection {raw.get('id')} references unknown item {item_id}"
                    )
                    continue
                library.add_to_collection(raw["id"], item_id)
        return library

    @classmethod
    def load(cls, path: str | Path) -> "MemoryLibrary":
        """Load a library snapshot from a JSON file."""
        snapshot = Path(path)
        if not snapshot.exists():
            raise NotFoundError(
                f"Library file not found: {snapshot}",
                suggestion="Set LIBRARY_FILE to an existing JSON snapshot",
            )
        with open(snapshot, encoding="utf-8") as f:
            data = json.load(f)
        return cls.from_dict(data, path=snapshot)

    def save(self, path: str | Path | None = None) -> Path:
        """Write the library snapshot back to JSON."""
        target = Path(path) if path else self.path
        if target is None:
            raise PersistenceError("No snapshot path configured for this library")
        target.parent.mkdir(parents=True, exist_ok=True)
        with open(target, "w", encoding="utf-8") as f:
            json.dump(self.to_dict(), f, indent=2, ensure_ascii=False)
        return target
