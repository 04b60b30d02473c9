"""
Patch version schemas.
"""

from pydantic import Field
from datetime import datetime
from typing import Any, Optional

from models.base import BaseSchema


class PatchVersionRecord(BaseSchema):
    """Single row of the patch_versions table."""

    current_patch: Optional[str] = None
    latest_patch: Optional[str] = None
    last_checked_at: datetime
    updated_at: Optional[datetime] = None


class PatchCheckResult(BaseSchema):
    """
    Result of a version check.

    error is set when the check failed and latest_patch is the
    configured fallback.
    """

    current_patch: Optional[str] = None
    latest_patch: str
    should_update: bool = False
    error: Optional[str] = None


class PatchVersionUpdate(BaseSchema):
    """Set the current patch."""

    current_patch: str = Field(..., min_length=1, max_length=20, examples=["16.1.1"])


class PatchItemDiff(BaseSchema):
    """Raw record that is new or changed in a patch."""

    patch_version: str
    riot_id: str
    item_data: dict[str, Any]


class VersionListResponse(BaseSchema):
    """Known Data Dragon versions, newest first."""

    data: list[str]
    latest: Optional[str] = None


class PatchDiffRequest(BaseSchema):
    """Record raw changes between two patches."""

    baseline_version: str = Field(..., min_length=1, examples=["16.1.1"])
    version: Optional[str] = Field(None, description="Newer patch, latest when omitted")


class PatchDiffSummary(BaseSchema):
    """Outcome of recording a patch diff."""

    baseline_version: str
    version: str
    changed: int
    riot_ids: list[str] = Field(default_factory=list)
