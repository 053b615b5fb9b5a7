"""
Zotero library backend.

Provides an async-compatible wrapper around pyzotero that exposes a Zotero
library as items, nested collections and free-text tags.
"""

import asyncio
from collections.abc import Iterable
import logging
from typing import Any, Literal

from pyzotero import zotero

from collection_tags.config import Config
from collection_tags.models import Collection, Item, ItemKind
from collection_tags.services.common.retry import async_retry_with_backoff
from collection_tags.utils.errors import ConfigurationError, PersistenceError

logger = logging.getLogger(__name__)

# Zotero item type -> media kind
ITEM_TYPE_KINDS: dict[str, ItemKind] = {
    "film": ItemKind.MOVIE,
    "tvBroadcast": ItemKind.EPISODE,
    "videoRecording": ItemKind.VIDEO,
    "audioRecording": ItemKind.AUDIO,
    "podcast": ItemKind.AUDIO,
    "radioBroadcast": ItemKind.AUDIO,
    "book": ItemKind.BOOK,
    "bookSection": ItemKind.BOOK,
}


def _tag_names(raw_tags: list[Any]) -> list[str]:
    names = []
    for raw_tag in raw_tags:
        if isinstance(raw_tag, dict):
            name = str(raw_tag.get("tag", ""))
        else:
            name = str(raw_tag)
        if name:
            names.append(name)
    return names


class ZoteroLibrary:
    """
    Library backend for a Zotero user or group library.

    Blocking pyzotero calls run in the default executor. Item writes fetch the
    latest version first and are retried on transient errors.
    """

    def __init__(
        self,
        library_id: str | int,
        library_type: Literal["user", "group"] = "user",
        api_key: str | None = None,
        local: bool = False,
        type_map: dict[str, ItemKind] | None = None,
    ):
        """
        Initialize the Zotero backend.

        Args:
            library_id: Zotero library ID
            library_type: Type of library ("user" or "group")
            api_key: API key for web access (not needed for local)
            local: Whether to use the local Zotero API
            type_map: Zotero item type to media kind mapping
        """
        self.library_id = str(library_id)
        self.library_type = library_type
        self.api_key = api_key
        self.local = local
        self.type_map = type_map or ITEM_TYPE_KINDS
        self._client: zotero.Zotero | None = None

    @property
    def client(self) -> zotero.Zotero:
        """Get or create the pyzotero client."""
        if self._client is None:
            self._client = zotero.Zotero(
                library_id=self.library_id,
                library_type=self.library_type,
                api_key=self.api_key,
                local=self.local,
            )
        return self._client

    async def _call(self, func):
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, func)

    # -------------------- Mapping --------------------

    def _to_item(self, raw: dict[str, Any]) -> Item | None:
        data = raw.get("data", {})
        kind = self.type_map.get(data.get("itemType", ""))
        if kind is None:
            return None
        return Item(
            id=raw.get("key") or data.get("key"),
            name=data.get("title") or data.get("name") or "",
            kind=kind,
            tags=_tag_names(data.get("tags", [])),
        )

    @staticmethod
    def _to_collection(raw: dict[str, Any]) -> Collection:
        data = raw.get("data", {})
        parent = data.get("parentCollection") or None
        return Collection(
            id=raw.get("key") or data.get("key"),
            name=data.get("name"),
            parent_id=parent,
        )

    def _to_items(self, raw_items: list[dict[str, Any]]) -> list[Item]:
        items = []
        for raw in raw_items:
            item = self._to_item(raw)
            if item is not None:
                items.append(item)
        return items

    # -------------------- LibraryClient --------------------

    async def list_items(self, kinds: Iterable[ItemKind]) -> list[Item]:
        wanted = set(kinds)
        item_types = [t for t, kind in self.type_map.items() if kind in wanted]
        if not item_types:
            return []
        query = " || ".join(item_types)
        raw_items = await self._call(
            lambda: self.client.everything(self.client.top(itemType=query))
        )
        return [item for item in self._to_items(raw_items) if item.kind in wanted]

    async def list_collections(self) -> list[Collection]:
        raw = await self._call(lambda: self.client.everything(self.client.collections()))
        return [self._to_collection(coll) for coll in raw]

    async def collection_members(self, collection: Collection) -> list[Item]:
        members: list[Item] = []
        seen: set[str] = set()
        visited: set[str] = set()
        pending = [collection.id]

        while pending:
            key = pending.pop(0)
            if key in visited:
                continue
            visited.add(key)

            raw_items = await self._call(
                lambda key=key: self.client.everything(
                    self.client.collection_items_top(key)
                )
            )
            for item in self._to_items(raw_items):
                if item.id not in seen:
                    seen.add(item.id)
                    members.append(item)

            children = await self._call(lambda key=key: self.client.collections_sub(key))
            pending.extend(child.get("key") for child in children)

        return members

    async def update_item(self, item: Item, new_tags: list[str]) -> None:
        async def _write() -> Any:
            current = await self._call(lambda: self.client.item(item.id))
            data = current.get("data", {})
            # Keep the tag type (manual/automatic) of tags that survive
            types = {
                str(t.get("tag", "")): t.get("type")
                for t in data.get("tags", [])
                if isinstance(t, dict) and t.get("type") is not None
            }
            data["tags"] = [
                {"tag": tag, "type": types[tag]} if tag in types else {"tag": tag}
                for tag in new_tags
            ]
            return await self._call(lambda: self.client.update_item(current))

        try:
            await async_retry_with_backoff(
                _write, description=f"Update tags of {item.id}"
            )
        except Exception as e:
            raise PersistenceError(
                f"Failed to update item {item.id}: {e}", item_id=item.id
            ) from e


def create_zotero_library(config: Config) -> ZoteroLibrary:
    """
    Build a Zotero backend from configuration.

    Raises:
        ConfigurationError: If required credentials are missing
    """
    if not config.has_zotero:
        raise ConfigurationError(
            "ZOTERO_LIBRARY_ID and ZOTERO_API_KEY are required for web API access",
            suggestion="Set ZOTERO_LOCAL=true for local access, or provide both values",
        )

    local = config.zotero_local
    library_id = config.zotero_library_id or "0"

    return ZoteroLibrary(
        library_id=library_id,
        library_type=config.zotero_library_type,
        api_key=config.zotero_api_key or None,
        local=local,
    )
