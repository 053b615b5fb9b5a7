"""
Snapshot models for library items and collections.

Items and collections are owned by the host library. These models are
read-only snapshots; tag changes go back through an explicit update call.
"""

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ItemKind(StrEnum):
    """Media kinds considered during reconciliation."""

    MOVIE = "movie"
    SERIES = "series"
    SEASON = "season"
    EPISODE = "episode"
    VIDEO = "video"
    AUDIO = "audio"
    BOOK = "book"


DEFAULT_ITEM_KINDS: frozenset[ItemKind] = frozenset(ItemKind)


class Item(BaseModel):
    """A media item with its current tags."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1, description="Stable item identifier")
    name: str = Field(default="", description="Display name")
    kind: ItemKind = Field(default=ItemKind.VIDEO, description="Media kind")
    tags: tuple[str, ...] = Field(default=(), description="Ordered tag list")

    @field_validator("tags", mode="before")
    @classmethod
    def _coerce_tags(cls, value):
        if value is None:
            return ()
        return tuple(value)

    def with_tags(self, tags: list[str] | tuple[str, ...]) -> "Item":
        """Return a copy of this snapshot carrying ``tags``."""
        return self.model_copy(update={"tags": tuple(tags)})


class Collection(BaseModel):
    """A named collection. Members are resolved by the library, not stored."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1, description="Stable collection identifier")
    name: str | None = Field(default=None, description="Collection name")
    parent_id: str | None = Field(default=None, description="Parent collection")

    @property
    def trimmed_name(self) -> str:
        return (self.name or "").strip()


class CollectionMembers(BaseModel):
    """An in-scope collection with its flattened member list."""

    collection: Collection
    items: list[Item] = Field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.items
