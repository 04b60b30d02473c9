"""
Business logic services.

Each service handles one domain area.
"""

from services.item_service import ItemService, get_item_service
from services.manual_setting_service import ManualSettingService, get_manual_setting_service
from services.item_metadata_service import ItemMetadataService, get_item_metadata_service
from services.transform_service import transform_riot_item, image_path_for
from services.classification_service import (
    ClassificationBoard,
    classify_items,
    evaluate_exclusion_rule,
)
from services.diff_service import compute_diff, summarize_diff
from services.patch_service import PatchService, get_patch_service
from services.sync_service import SyncService, get_sync_service

__all__ = [
    "ItemService",
    "get_item_service",
    "ManualSettingService",
    "get_manual_setting_service",
    "ItemMetadataService",
    "get_item_metadata_service",
    "transform_riot_item",
    "image_path_for",
    "ClassificationBoard",
    "classify_items",
    "evaluate_exclusion_rule",
    "compute_diff",
    "summarize_diff",
    "PatchService",
    "get_patch_service",
    "SyncService",
    "get_sync_service",
]
