"""
Tag reconciliation.

Compares each item's managed tags with the tags it should carry and rewrites
the tag list only when they differ. Unmanaged tags keep their relative order
and always precede managed tags in a rewritten list.
"""

from collections.abc import Callable, Iterable, Mapping
import logging

from collection_tags.clients.base import LibraryClient
from collection_tags.models import Item, ItemFailure, ReconcileSummary, TagUpdate
from collection_tags.services.common.cancellation import CancellationToken
from collection_tags.services.tagging import TagSet, tag_key
from collection_tags.utils.logging_config import log_operation

logger = logging.getLogger(__name__)

ItemProgress = Callable[[int, int], None]

_EMPTY = TagSet()


def is_managed(tag: str, prefix: str) -> bool:
    """Whether ``tag`` starts with ``prefix``, ignoring case."""
    return tag_key(tag).startswith(tag_key(prefix))


def partition_tags(tags: Iterable[str], prefix: str) -> tuple[list[str], list[str]]:
    """Split tags into (managed, unmanaged), keeping order within each part."""
    managed: list[str] = []
    unmanaged: list[str] = []
    for tag in tags:
        (managed if is_managed(tag, prefix) else unmanaged).append(tag)
    return managed, unmanaged


def dedupe_tags(tags: Iterable[str]) -> list[str]:
    """Drop case-insensitive duplicates, keeping the first occurrence."""
    return list(TagSet(tags))


def plan_item(item: Item, desired: TagSet | None, prefix: str) -> TagUpdate | None:
    """
    Plan the tag rewrite for one item.

    Returns None when the item's managed tags already equal ``desired``
    as a case-insensitive set.
    """
    desired = desired if desired is not None else _EMPTY
    managed, unmanaged = partition_tags(item.tags, prefix)

    if TagSet(managed) == desired:
        return None

    new_tags = dedupe_tags([*unmanaged, *desired])
    current = TagSet(managed)
    return TagUpdate(
        item_id=item.id,
        item_name=item.name,
        old_tags=item.tags,
        new_tags=tuple(new_tags),
        added=tuple(tag for tag in desired if tag not in current),
        removed=tuple(tag for tag in managed if tag not in desired),
    )


def plan_updates(
    items: Iterable[Item],
    desired_tags: Mapping[str, TagSet],
    prefix: str,
) -> list[TagUpdate]:
    """Plan updates for a whole corpus without touching the library."""
    updates = []
    for item in items:
        update = plan_item(item, desired_tags.get(item.id), prefix)
        if update is not None:
            updates.append(update)
    return updates


class Reconciler:
    """Applies planned tag updates to a library, one item at a time."""

    def __init__(self, library: LibraryClient, prefix: str):
        self.library = library
        self.prefix = prefix

    async def apply(
        self,
        items: list[Item],
        desired_tags: Mapping[str, TagSet],
        *,
        cancel: CancellationToken | None = None,
        on_item: ItemProgress | None = None,
        dry_run: bool = False,
    ) -> ReconcileSummary:
        """
        Reconcile every item of the corpus in enumeration order.

        A failed write is logged and counted and the run moves on. Cancellation
        is checked before each item; updates already written stay written.
        """
        summary = ReconcileSummary(scanned=len(items), dry_run=dry_run)
        total = len(items)

        for index, item in enumerate(items, 1):
            if cancel is not None:
                cancel.raise_if_cancelled()

            update = plan_item(item, desired_tags.get(item.id), self.prefix)
            summary.checked += 1

            if update is not None:
                summary.changed += 1
                summary.updates.append(update)
                if dry_run:
                    log_operation(
                        logger, "plan", item.id, "pending",
                        added=list(update.added), removed=list(update.removed),
                    )
                else:
                    await self._write(item, update, summary)

            if on_item is not None:
                on_item(index, total)

        return summary

    async def _write(
        self, item: Item, update: TagUpdate, summary: ReconcileSummary
    ) -> None:
        try:
            await self.library.update_item(item, list(update.new_tags))
        except Exception as e:
            summary.failed += 1
            summary.failures.append(
                ItemFailure(item_id=item.id, item_name=item.name, error=str(e))
            )
            log_operation(logger, "update", item.id, "error", name=item.name, error=e)
            return

        summary.updated += 1
        log_operation(
            logger, "update", item.id, "success",
            added=list(update.added), removed=list(update.removed),
        )
