"""Result models for reconciliation runs."""

from pydantic import BaseModel, ConfigDict, Field


class TagUpdate(BaseModel):
    """Planned replacement of one item's tag list."""

    model_config = ConfigDict(frozen=True)

    item_id: str
    item_name: str = ""
    old_tags: tuple[str, ...] = ()
    new_tags: tuple[str, ...] = ()
    added: tuple[str, ...] = ()
    removed: tuple[str, ...] = ()


class ItemFailure(BaseModel):
    """Persistence failure recorded for a single item."""

    item_id: str
    item_name: str = ""
    error: str


class ReconcileSummary(BaseModel):
    """Aggregate counts for one reconciliation run."""

    scanned: int = Field(default=0, ge=0, description="Items in the corpus")
    checked: int = Field(default=0, ge=0, description="Items compared")
    changed: int = Field(default=0, ge=0, description="Items needing an update")
    updated: int = Field(default=0, ge=0, description="Items written successfully")
    failed: int = Field(default=0, ge=0, description="Items whose write failed")
    collections: int = Field(default=0, ge=0, description="In-scope collections")
    dry_run: bool = False
    skipped_reason: str | None = None
    updates: list[TagUpdate] = Field(default_factory=list)
    failures: list[ItemFailure] = Field(default_factory=list)

    def metrics(self) -> dict[str, int]:
        return {
            "scanned": self.scanned,
            "checked": self.checked,
            "changed": self.changed,
            "updated": self.updated,
            "failed": self.failed,
            "collections": self.collections,
        }
