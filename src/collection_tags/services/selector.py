"""Selection of the collections that are in scope for tagging."""

from collections.abc import Iterable
import logging

from collection_tags.models import Collection

logger = logging.getLogger(__name__)


def parse_collection_names(raw: str | None) -> list[str]:
    """Split a comma-separated name list, trimming and dropping empty entries."""
    if not raw:
        return []
    return [name.strip() for name in raw.split(",") if name.strip()]


def select_collections(
    collections: Iterable[Collection],
    tag_all_collections: bool,
    names: Iterable[str],
) -> list[Collection]:
    """
    Return the collections in scope, preserving library enumeration order.

    With ``tag_all_collections`` every collection is selected. Otherwise a
    collection is selected when its trimmed name equals one configured name,
    ignoring case. Collections without a name only match under
    ``tag_all_collections``.
    """
    if tag_all_collections:
        return list(collections)

    wanted = {name.strip().lower() for name in names if name and name.strip()}
    if not wanted:
        logger.info("No collections configured for tagging")
        return []

    selected = []
    for collection in collections:
        trimmed = collection.trimmed_name
        if trimmed and trimmed.lower() in wanted:
            selected.append(collection)

    logger.debug(
        f"Selected {len(selected)} collection(s): "
        f"{[c.trimmed_name for c in selected]}"
    )
    return selected
