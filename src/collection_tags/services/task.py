"""
Collection tag update task.

Runs one full reconciliation: fetch the corpus, select and expand the
collections, compute the desired tags and rewrite the items that differ.
"""

import logging

from collection_tags.clients.base import LibraryClient
from collection_tags.models import DEFAULT_ITEM_KINDS, ItemKind, ReconcileSummary
from collection_tags.services.common.cancellation import (
    CancellationToken,
    ProgressCallback,
    ProgressReporter,
)
from collection_tags.services.membership import resolve_membership
from collection_tags.services.reconciler import Reconciler
from collection_tags.services.selector import select_collections
from collection_tags.services.tagging import compute_desired_tags
from collection_tags.settings import TaggingSettings
from collection_tags.utils.logging_config import log_task_end, log_task_start

logger = logging.getLogger(__name__)

# Progress checkpoints
PROGRESS_CORPUS = 10.0
PROGRESS_MEMBERSHIP = 20.0
PROGRESS_DESIRED = 30.0
PROGRESS_DONE = 100.0


class CollectionTagTask:
    """Scheduled task that mirrors collection membership into item tags."""

    name = "Collection Tag Update Task"
    key = "CollectionTagUpdateTask"
    description = "Update item tags from collection membership"
    category = "Collection Tags"

    def __init__(
        self,
        library: LibraryClient,
        settings: TaggingSettings,
        kinds: frozenset[ItemKind] = DEFAULT_ITEM_KINDS,
        task_logger: logging.Logger | None = None,
    ):
        self.library = library
        self.settings = settings
        self.kinds = kinds
        self.logger = task_logger or logger

    async def run(
        self,
        progress: ProgressCallback | None = None,
        cancel: CancellationToken | None = None,
        dry_run: bool = False,
    ) -> ReconcileSummary:
        """
        Execute one reconciliation run.

        Raises:
            asyncio.CancelledError: If ``cancel`` is signalled mid-run
        """
        reporter = ProgressReporter(progress)
        prefix = self.settings.tag_prefix

        if not self.settings.has_prefix:
            self.logger.warning("Tag prefix is empty; skipping collection tag update")
            reporter.report(PROGRESS_DONE)
            return ReconcileSummary(dry_run=dry_run, skipped_reason="empty_prefix")

        log_task_start(
            self.logger,
            self.name,
            prefix=prefix,
            tag_all_collections=self.settings.tag_all_collections,
            collections=self.settings.collection_names or "-",
            dry_run=dry_run,
        )

        items = await self.library.list_items(self.kinds)
        reporter.report(PROGRESS_CORPUS)
        self._check(cancel)

        collections = select_collections(
            await self.library.list_collections(),
            self.settings.tag_all_collections,
            self.settings.collection_names,
        )
        memberships = await resolve_membership(self.library, collections)
        reporter.report(PROGRESS_MEMBERSHIP)
        self._check(cancel)

        desired = compute_desired_tags(memberships, prefix)
        reporter.report(PROGRESS_DESIRED)

        span = PROGRESS_DONE - PROGRESS_DESIRED

        def on_item(index: int, total: int) -> None:
            reporter.report(PROGRESS_DESIRED + span * index / total)

        summary = await Reconciler(self.library, prefix).apply(
            items, desired, cancel=cancel, on_item=on_item, dry_run=dry_run
        )
        summary.collections = len(collections)
        reporter.report(PROGRESS_DONE)

        log_task_end(
            self.logger,
            self.name,
            items_processed=summary.checked,
            errors=[f"{f.item_id}: {f.error}" for f in summary.failures],
            changed=summary.changed,
            updated=summary.updated,
        )
        return summary

    @staticmethod
    def _check(cancel: CancellationToken | None) -> None:
        if cancel is not None:
            cancel.raise_if_cancelled()
