"""
Manual setting schemas.

A manual setting is an admin decision about one item's availability
that overrides the automatic exclusion rules.
"""

from pydantic import Field
from typing import Optional

from models.base import BaseSchema, TimestampMixin


class ManualSettingUpsert(BaseSchema):
    """Create or replace the manual setting of an item."""

    is_available: bool = Field(..., description="Whether the item should be stored")
    reason: Optional[str] = Field(
        None,
        max_length=500,
        description="Why the admin overrode the rules"
    )


class ManualSettingReasonUpdate(BaseSchema):
    """Edit only the reason text."""

    reason: Optional[str] = Field(None, max_length=500)


class ManualSetting(BaseSchema, TimestampMixin):
    """Manual setting as stored."""

    riot_id: str
    is_available: bool
    reason: Optional[str] = None


class ManualSettingListResponse(BaseSchema):
    """List of manual settings."""

    data: list[ManualSetting]
    total: int
