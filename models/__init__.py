"""
Pydantic models for validation and serialization.
"""

from models.base import (
    BaseSchema,
    TimestampMixin,
)
from models.item import (
    AbilityType,
    ItemAbility,
    RiotGold,
    RiotItemRecord,
    ItemUpsert,
    ItemResponse,
    ItemListResponse,
)
from models.manual_setting import (
    ManualSettingUpsert,
    ManualSettingReasonUpdate,
    ManualSetting,
    ManualSettingListResponse,
)
from models.classification import (
    ItemCategory,
    AvailableState,
    ManualSettingState,
    AutoExcludedState,
    ItemState,
    ClassifiedItem,
    ClassifiedItemResponse,
    ClassificationResponse,
    ManualSettingEntry,
    ClassificationSaveRequest,
    ClassificationSaveResult,
)
from models.sync import (
    DiffStatus,
    DIFF_STATUS_ORDER,
    DiffEntry,
    DiffReport,
    SyncItemResult,
    SyncSummary,
    SyncRequest,
    ImageRefreshRequest,
    ImageRefreshSummary,
    RawItemInspection,
)
from models.patch import (
    PatchVersionRecord,
    PatchCheckResult,
    PatchVersionUpdate,
    PatchItemDiff,
    PatchDiffRequest,
    PatchDiffSummary,
    VersionListResponse,
)

__all__ = [
    # Base
    "BaseSchema",
    "TimestampMixin",

    # Items
    "AbilityType",
    "ItemAbility",
    "RiotGold",
    "RiotItemRecord",
    "ItemUpsert",
    "ItemResponse",
    "ItemListResponse",

    # Manual settings
    "ManualSettingUpsert",
    "ManualSettingReasonUpdate",
    "ManualSetting",
    "ManualSettingListResponse",

    # Classification
    "ItemCategory",
    "AvailableState",
    "ManualSettingState",
    "AutoExcludedState",
    "ItemState",
    "ClassifiedItem",
    "ClassifiedItemResponse",
    "ClassificationResponse",
    "ManualSettingEntry",
    "ClassificationSaveRequest",
    "ClassificationSaveResult",

    # Sync
    "DiffStatus",
    "DIFF_STATUS_ORDER",
    "DiffEntry",
    "DiffReport",
    "SyncItemResult",
    "SyncSummary",
    "SyncRequest",
    "ImageRefreshRequest",
    "ImageRefreshSummary",
    "RawItemInspection",

    # Patch
    "PatchVersionRecord",
    "PatchCheckResult",
    "PatchVersionUpdate",
    "PatchItemDiff",
    "PatchDiffRequest",
    "PatchDiffSummary",
    "VersionListResponse",
]
