"""Expansion of in-scope collections into their flattened member items."""

import logging

from collection_tags.clients.base import LibraryClient
from collection_tags.models import Collection, CollectionMembers

logger = logging.getLogger(__name__)


async def resolve_membership(
    library: LibraryClient,
    collections: list[Collection],
) -> dict[str, CollectionMembers]:
    """
    Resolve the member-closure of each collection.

    Returns a mapping of collection id to its members, in the order the
    collections were given. Empty collections are kept with no items.
    Member lists are de-duplicated by item id.
    """
    memberships: dict[str, CollectionMembers] = {}

    for collection in collections:
        members = await library.collection_members(collection)

        unique = []
        seen: set[str] = set()
        for item in members:
            if item.id in seen:
                continue
            seen.add(item.id)
            unique.append(item)

        memberships[collection.id] = CollectionMembers(
            collection=collection, items=unique
        )
        logger.debug(
            f"Collection '{collection.trimmed_name}' ({collection.id}) "
            f"has {len(unique)} member(s)"
        )

    return memberships
