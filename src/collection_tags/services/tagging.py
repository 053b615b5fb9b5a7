"""
Managed tag construction and the desired-tag calculator.

Tags compare case-insensitively but keep the casing they were first
inserted with.
"""

from collections.abc import Iterable, Iterator, Mapping
import logging

from collection_tags.models import CollectionMembers

logger = logging.getLogger(__name__)


def tag_key(tag: str) -> str:
    """Case-insensitive identity of a tag.

    Uses per-character lowercasing, so "ß" and "SS" stay distinct.
    """
    return tag.lower()


class TagSet:
    """Insertion-ordered set of tags with case-insensitive membership."""

    def __init__(self, tags: Iterable[str] = ()):
        self._tags: dict[str, str] = {}
        for tag in tags:
            self.add(tag)

    def add(self, tag: str) -> bool:
        """Add ``tag`` unless a case-insensitive duplicate exists."""
        key = tag_key(tag)
        if key in self._tags:
            return False
        self._tags[key] = tag
        return True

    def keys(self) -> frozenset[str]:
        return frozenset(self._tags)

    def __contains__(self, tag: object) -> bool:
        return isinstance(tag, str) and tag_key(tag) in self._tags

    def __iter__(self) -> Iterator[str]:
        return iter(self._tags.values())

    def __len__(self) -> int:
        return len(self._tags)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, TagSet):
            return self.keys() == other.keys()
        return NotImplemented

    def __repr__(self) -> str:
        return f"TagSet({list(self)!r})"


def build_managed_tag(prefix: str, collection_name: str | None) -> str | None:
    """Return ``prefix + name.strip()``, or None for an empty name."""
    trimmed = (collection_name or "").strip()
    if not trimmed:
        return None
    return f"{prefix}{trimmed}"


def compute_desired_tags(
    memberships: Mapping[str, CollectionMembers],
    prefix: str,
) -> dict[str, TagSet]:
    """
    Map each member item id to the managed tags it should carry.

    Only items belonging to at least one named collection get an entry.
    When two collections produce the same tag in different casing, the
    casing of the collection enumerated first is kept.
    """
    desired: dict[str, TagSet] = {}

    for members in memberships.values():
        collection = members.collection
        managed_tag = build_managed_tag(prefix, collection.name)
        if managed_tag is None:
            logger.warning(f"Skipping collection {collection.id} with empty name")
            continue

        for item in members.items:
            desired.setdefault(item.id, TagSet()).add(managed_tag)

    logger.debug(f"Computed desired tags for {len(desired)} item(s)")
    return desired
