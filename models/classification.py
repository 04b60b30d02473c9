"""
Classification schemas.

Each fetched item is in exactly one state: available, manually set,
or auto-excluded. States are small frozen dataclasses so a category
change is a state replacement on one item.
"""

from dataclasses import dataclass, replace
from typing import Optional, Union
from enum import Enum

from pydantic import Field

from models.base import BaseSchema
from models.item import RiotItemRecord


class ItemCategory(str, Enum):
    """Classification category."""
    AVAILABLE = "available"
    MANUAL_SETTINGS = "manualSettings"
    AUTO_EXCLUDED = "autoExcluded"


@dataclass(frozen=True)
class AvailableState:
    """No manual setting and the automatic rules accept the item."""
    category = ItemCategory.AVAILABLE


@dataclass(frozen=True)
class ManualSettingState:
    """A manual setting exists; it wins over the rules."""
    is_enabled: bool
    reason: Optional[str] = None
    category = ItemCategory.MANUAL_SETTINGS


@dataclass(frozen=True)
class AutoExcludedState:
    """No manual setting and an automatic rule rejects the item."""
    reason: Optional[str] = None
    category = ItemCategory.AUTO_EXCLUDED


ItemState = Union[AvailableState, ManualSettingState, AutoExcludedState]


@dataclass(frozen=True)
class ClassifiedItem:
    """One fetched item with its classification state."""
    riot_id: str
    name: str
    image_path: str
    is_new: bool
    is_non_purchasable: bool
    maps: tuple[int, ...]
    raw: RiotItemRecord
    state: ItemState

    @property
    def category(self) -> ItemCategory:
        return self.state.category

    @property
    def reason(self) -> Optional[str]:
        return getattr(self.state, "reason", None)

    @property
    def is_manually_available(self) -> Optional[bool]:
        """Manual availability flag, None without a manual setting."""
        if isinstance(self.state, ManualSettingState):
            return self.state.is_enabled
        return None

    @property
    def is_stored(self) -> bool:
        """Whether the item belongs in the items table."""
        if isinstance(self.state, AvailableState):
            return True
        return isinstance(self.state, ManualSettingState) and self.state.is_enabled

    def with_state(self, state: ItemState) -> "ClassifiedItem":
        return replace(self, state=state)


# ===================
# API SCHEMAS
# ===================

class ClassifiedItemResponse(BaseSchema):
    """Flattened classified item for the admin view."""

    riot_id: str
    name: str
    image_path: str
    is_new: bool
    is_non_purchasable: bool
    category: ItemCategory
    is_manually_available: Optional[bool] = None
    reason: Optional[str] = None
    maps: list[int] = Field(default_factory=list)

    @classmethod
    def from_item(cls, item: ClassifiedItem) -> "ClassifiedItemResponse":
        return cls(
            riot_id=item.riot_id,
            name=item.name,
            image_path=item.image_path,
            is_new=item.is_new,
            is_non_purchasable=item.is_non_purchasable,
            category=item.category,
            is_manually_available=item.is_manually_available,
            reason=item.reason,
            maps=list(item.maps),
        )


class ClassificationResponse(BaseSchema):
    """All fetched items of a patch, split by category."""

    version: str
    available: list[ClassifiedItemResponse]
    manual_settings: list[ClassifiedItemResponse]
    auto_excluded: list[ClassifiedItemResponse]
    counts: dict[str, int]


class ManualSettingEntry(BaseSchema):
    """One manual setting in a classification save request."""

    riot_id: str = Field(..., min_length=1)
    is_available: bool
    reason: Optional[str] = Field(None, max_length=500)


class ClassificationSaveRequest(BaseSchema):
    """
    Edited classification to commit.

    manual_settings is the complete set after editing; items missing
    from it fall back to the automatic rules.
    """

    version: Optional[str] = None
    manual_settings: list[ManualSettingEntry] = Field(default_factory=list)


class ClassificationSaveResult(BaseSchema):
    """Outcome of committing a classification."""

    success: bool = True
    saved_items: int = 0
    saved_manual_settings: int = 0
    deleted_items: int = 0
    deleted_manual_settings: int = 0
