"""
Sync and diff schemas.
"""

from pydantic import Field
from typing import Any, Optional
from enum import Enum

from models.base import BaseSchema
from models.item import ItemAbility


class DiffStatus(str, Enum):
    """Change status of an item relative to the stored items."""
    NEW = "new"
    UPDATED = "updated"
    DELETED = "deleted"
    UNCHANGED = "unchanged"


# Presentation order: new, updated, deleted, unchanged
DIFF_STATUS_ORDER = {
    DiffStatus.NEW: 0,
    DiffStatus.UPDATED: 1,
    DiffStatus.DELETED: 2,
    DiffStatus.UNCHANGED: 3,
}


class DiffEntry(BaseSchema):
    """Diff result for one item id."""

    riot_id: str
    status: DiffStatus
    item: dict[str, Any] = Field(default_factory=dict)
    previous: Optional[dict[str, Any]] = None
    changed_fields: list[str] = Field(default_factory=list)


class DiffReport(BaseSchema):
    """Dry-run comparison of a patch against the stored items."""

    version: str
    entries: list[DiffEntry]
    counts: dict[str, int]


class SyncItemResult(BaseSchema):
    """Outcome of one item's sync pipeline."""

    success: bool
    item_id: str
    error: Optional[str] = None


class SyncSummary(BaseSchema):
    """
    Outcome of a sync run.

    success is True only when no processed item failed. Skipped items
    are counted but have no entry in results.
    """

    success: bool
    version: str
    total: int = 0
    success_count: int = 0
    failed_count: int = 0
    skipped_count: int = 0
    deleted_count: int = 0
    results: list[SyncItemResult] = Field(default_factory=list)

    @property
    def errors(self) -> list[str]:
        """Itemized error log, one line per failed item."""
        return [f"{r.item_id}: {r.error}" for r in self.results if not r.success]


class SyncRequest(BaseSchema):
    """Trigger a full or targeted sync."""

    version: Optional[str] = Field(None, description="Patch version, latest when omitted")
    item_ids: Optional[list[str]] = Field(
        None,
        description="Sync only these items; no deletion pass"
    )


class ImageRefreshRequest(BaseSchema):
    """Re-upload icons for some items."""

    version: Optional[str] = None
    item_ids: list[str] = Field(..., min_length=1)


class ImageRefreshSummary(BaseSchema):
    """Outcome of an icon refresh."""

    success: bool
    success_count: int = 0
    failed_count: int = 0
    errors: list[str] = Field(default_factory=list)


class RawItemInspection(BaseSchema):
    """Raw record of one item with what the parsers read from it."""

    version: str
    riot_id: str
    raw: dict[str, Any]
    abilities: list[ItemAbility] = Field(default_factory=list)
    stats: dict[str, str] = Field(default_factory=dict)
    suggested_tags: list[str] = Field(default_factory=list)
    exclusion_reason: Optional[str] = None
