"""Tagging settings using Pydantic Settings."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_TAG_PREFIX = "#CollectionTags_"
DEFAULT_INTERVAL_HOURS = 6.0


class TaggingSettings(BaseSettings):
    """Collection tagging settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="COLLECTION_TAGS_",
        extra="ignore",
    )

    # Triggers
    update_on_scan: bool = Field(default=False)
    interval_hours: float = Field(default=DEFAULT_INTERVAL_HOURS, gt=0)

    # Selection
    tag_all_collections: bool = Field(default=False)
    collections_to_tag: str = Field(default="")

    # Tag format
    tag_prefix: str = Field(default=DEFAULT_TAG_PREFIX)

    @property
    def collection_names(self) -> list[str]:
        """Configured collection names, trimmed with empty entries removed."""
        from collection_tags.services.selector import parse_collection_names

        return parse_collection_names(self.collections_to_tag)

    @property
    def has_prefix(self) -> bool:
        return bool(self.tag_prefix and self.tag_prefix.strip())
