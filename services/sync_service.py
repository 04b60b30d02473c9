"""
Item sync orchestration.

A sync takes one patch of Data Dragon item data to the items table:

    1. resolve the patch version
    2. fetch every item of the patch
    3. load manual settings and stored ids
    4. classify
    5. per stored item: icon -> WebP -> storage, transform, upsert
    6. delete stored rows that are no longer available, and their icons

Step 5 runs in batches on a thread pool; each batch finishes before
the next starts. One item failing never stops the others, and there
is no transaction across items: partial results are reported, not
rolled back.
"""

from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Iterable, Optional, TypeVar
import structlog

from config import settings
from integrations.riot_client import RiotClient, get_riot_client
from integrations.image_processing import resize_and_convert_to_webp
from integrations.storage import ItemImageStorage, get_item_image_storage
from models.item import RiotItemRecord
from models.classification import ClassificationSaveRequest, ClassificationSaveResult
from models.patch import PatchDiffSummary
from models.sync import (
    DiffReport,
    SyncItemResult,
    SyncSummary,
    ImageRefreshSummary,
    RawItemInspection,
)
from parsers import (
    extract_abilities,
    extract_stats_from_description,
    extract_tags_from_raw_data,
)
from services.classification_service import (
    ClassificationBoard,
    classify_items,
    evaluate_exclusion_rule,
)
from services.diff_service import compute_diff, summarize_diff
from services.item_service import ItemService, get_item_service
from services.item_metadata_service import ItemMetadataService, get_item_metadata_service
from services.manual_setting_service import ManualSettingService, get_manual_setting_service
from services.patch_service import PatchService, get_patch_service
from services.transform_service import transform_riot_item, image_path_for
from exceptions import AppError, ItemNotFoundError, StorageUploadError

logger = structlog.get_logger(__name__)

T = TypeVar("T")


def _error_message(error: Exception) -> str:
    if isinstance(error, AppError):
        return error.message
    return str(error) or type(error).__name__


class SyncService:
    """
    Sync, scan and classification commit for one patch at a time.

    Collaborators are injected; anything not passed uses the shared
    default instance.
    """

    def __init__(
        self,
        riot_client: Optional[RiotClient] = None,
        item_service: Optional[ItemService] = None,
        manual_setting_service: Optional[ManualSettingService] = None,
        metadata_service: Optional[ItemMetadataService] = None,
        patch_service: Optional[PatchService] = None,
        storage: Optional[ItemImageStorage] = None,
        image_processor: Callable[[bytes], bytes] = resize_and_convert_to_webp,
        batch_size: Optional[int] = None
    ):
        self.riot = riot_client or get_riot_client()
        self.items = item_service or get_item_service()
        self.manual_settings = manual_setting_service or get_manual_setting_service()
        self.metadata = metadata_service or get_item_metadata_service()
        self.patches = patch_service or get_patch_service()
        self.storage = storage or get_item_image_storage()
        self.image_processor = image_processor
        self.batch_size = batch_size or settings.sync_batch_size

    # ===================
    # HELPERS
    # ===================

    def resolve_version(self, version: Optional[str] = None) -> str:
        """
        Explicit version, else Data Dragon's newest (rate limited).

        Raises:
            RiotAPIError: If the newest version cannot be determined
        """
        if version:
            return version
        return self.patches.get_latest_version()

    def _run_in_batches(self, keys: list[str], work: Callable[[str], T]) -> list[T]:
        """
        Apply work to every key, batch_size at a time.

        Results come back in key order.
        """
        results: list[T] = []

        for start in range(0, len(keys), self.batch_size):
            batch = keys[start:start + self.batch_size]

            with ThreadPoolExecutor(max_workers=len(batch)) as pool:
                futures = [pool.submit(work, key) for key in batch]
                results.extend(future.result() for future in futures)

            logger.info(
                "batch_completed",
                processed=min(start + len(batch), len(keys)),
                total=len(keys)
            )

        return results

    def _classify(self, version: str, records: dict[str, RiotItemRecord]) -> ClassificationBoard:
        return classify_items(
            records,
            self.manual_settings.get_map(),
            self.items.get_ids(),
            version=version,
        )

    def _upload_icon(self, riot_id: str, version: str) -> str:
        """
        Fetch, convert and upload an icon.

        Raises:
            RiotAPIError: If the icon cannot be downloaded
            ImageProcessingError: If the icon cannot be converted
            StorageUploadError: If the bucket rejects the upload
        """
        data = self.riot.fetch_image(self.riot.get_item_image_url(version, riot_id))
        webp = self.image_processor(data)

        upload = self.storage.upload_item_image(riot_id, webp)
        if not upload.success:
            raise StorageUploadError(image_path_for(riot_id), upload.error)
        return upload.path

    def _delete_rows_outside(self, keep_ids: set[str]) -> list[str]:
        """Delete stored rows not in keep_ids along with their icons."""
        deleted = self.items.delete_not_in(keep_ids)

        removal = self.storage.remove([image_path_for(riot_id) for riot_id in deleted])
        if not removal.success:
            logger.warning("stale_icons_not_removed", count=len(deleted), error=removal.error)

        return deleted

    # ===================
    # SYNC
    # ===================

    def sync_item(
        self,
        riot_id: str,
        record: RiotItemRecord,
        version: str,
        additional_tags: Iterable[str] = (),
        roles: Optional[Iterable[str]] = None
    ) -> SyncItemResult:
        """
        Run the full pipeline for one item.

        Never raises; failures come back in the result.
        """
        try:
            self._upload_icon(riot_id, version)

            item = transform_riot_item(riot_id, record, additional_tags, roles)
            self.items.upsert(item)

            logger.debug("item_synced", riot_id=riot_id)

            return SyncItemResult(success=True, item_id=riot_id)

        except Exception as e:
            logger.error(
                "item_sync_failed",
                riot_id=riot_id,
                error=str(e),
                error_type=type(e).__name__
            )
            return SyncItemResult(success=False, item_id=riot_id, error=_error_message(e))

    def sync(
        self,
        patch_version: Optional[str] = None,
        item_ids: Optional[list[str]] = None
    ) -> SyncSummary:
        """
        Sync a patch into the items table.

        Args:
            patch_version: Patch to sync, newest when omitted
            item_ids: Only sync these items. Ids missing from the patch
                or not meant to be stored are skipped, and stored rows
                are never deleted.

        Returns:
            SyncSummary; success is True only when nothing failed

        Raises:
            RiotAPIError: If the item data of the patch cannot be fetched
        """
        version = self.resolve_version(patch_version)
        partial = item_ids is not None

        logger.info("sync_started", version=version, partial=partial)

        records = self.riot.fetch_item_data(version)
        board = self._classify(version, records)

        storage_ids = board.storage_ids()
        candidates = list(dict.fromkeys(item_ids)) if partial else list(records)
        to_process = [riot_id for riot_id in candidates if riot_id in storage_ids]
        skipped = len(candidates) - len(to_process)

        tags_map = self.metadata.get_additional_tags_map()
        roles_map = self.metadata.get_roles_map()

        results = self._run_in_batches(
            to_process,
            lambda riot_id: self.sync_item(
                riot_id,
                records[riot_id],
                version,
                tags_map.get(riot_id, []),
                roles_map.get(riot_id),
            )
        )

        deleted: list[str] = []
        if not partial:
            deleted = self._delete_rows_outside(storage_ids)

        failed = sum(1 for r in results if not r.success)
        summary = SyncSummary(
            success=failed == 0,
            version=version,
            total=len(candidates),
            success_count=len(results) - failed,
            failed_count=failed,
            skipped_count=skipped,
            deleted_count=len(deleted),
            results=results,
        )

        if summary.success and not partial:
            self.patches.save_patch_version(version)

        logger.info(
            "sync_completed",
            version=version,
            total=summary.total,
            success=summary.success_count,
            failed=summary.failed_count,
            skipped=summary.skipped_count,
            deleted=summary.deleted_count
        )
        for line in summary.errors:
            logger.warning("sync_item_error", detail=line)

        return summary

    # ===================
    # SCAN (DRY RUN)
    # ===================

    def scan(self, version: Optional[str] = None) -> DiffReport:
        """
        Diff what a sync would store against the stored rows.

        Nothing is written and no icon is fetched.
        """
        version = self.resolve_version(version)
        records = self.riot.fetch_item_data(version)
        board = self._classify(version, records)

        tags_map = self.metadata.get_additional_tags_map()
        roles_map = self.metadata.get_roles_map()

        fresh = [
            transform_riot_item(
                item.riot_id,
                item.raw,
                tags_map.get(item.riot_id, []),
                roles_map.get(item.riot_id),
            ).to_row()
            for item in board.items_for_storage()
        ]

        entries = compute_diff(fresh, self.items.get_rows())
        counts = summarize_diff(entries)

        logger.info("scan_completed", version=version, **counts)

        return DiffReport(version=version, entries=entries, counts=counts)

    # ===================
    # CLASSIFICATION
    # ===================

    def load_classification(self, version: Optional[str] = None) -> ClassificationBoard:
        """Classified items of a patch for review."""
        version = self.resolve_version(version)
        records = self.riot.fetch_item_data(version)
        return self._classify(version, records)

    def save_classification(self, board: ClassificationBoard) -> ClassificationSaveResult:
        """
        Commit an edited board.

        Upserts the rows of every stored item and every manual setting,
        then deletes manual settings and item rows the board no longer
        has. Database errors propagate with their message.
        """
        logger.info("saving_classification", version=board.version, **board.counts())

        tags_map = self.metadata.get_additional_tags_map()
        roles_map = self.metadata.get_roles_map()

        rows = [
            transform_riot_item(
                item.riot_id,
                item.raw,
                tags_map.get(item.riot_id, []),
                roles_map.get(item.riot_id),
            )
            for item in board.items_for_storage()
        ]
        saved_items = self.items.upsert_many(rows)

        payload = board.manual_settings_payload()
        saved_settings = self.manual_settings.upsert_many(payload)
        deleted_settings = self.manual_settings.delete_not_in(row["riot_id"] for row in payload)

        deleted_items = self._delete_rows_outside(board.storage_ids())

        result = ClassificationSaveResult(
            success=True,
            saved_items=saved_items,
            saved_manual_settings=saved_settings,
            deleted_items=len(deleted_items),
            deleted_manual_settings=len(deleted_settings),
        )

        logger.info("classification_saved", version=board.version, **result.model_dump(exclude={"success"}))

        return result

    def commit_classification(self, request: ClassificationSaveRequest) -> ClassificationSaveResult:
        """Apply a complete manual settings list to a patch and save it."""
        board = self.load_classification(request.version)
        board.replace_manual_settings(request.manual_settings)
        return self.save_classification(board)

    # ===================
    # IMAGES
    # ===================

    def refresh_item_image(self, riot_id: str, version: str) -> SyncItemResult:
        """Re-upload one icon and bump the item's updated_at."""
        try:
            self._upload_icon(riot_id, version)
            self.items.touch(riot_id)

            logger.info("image_refreshed", riot_id=riot_id)

            return SyncItemResult(success=True, item_id=riot_id)

        except Exception as e:
            logger.error("image_refresh_failed", riot_id=riot_id, error=str(e))
            return SyncItemResult(success=False, item_id=riot_id, error=_error_message(e))

    def refresh_images(self, riot_ids: list[str], version: Optional[str] = None) -> ImageRefreshSummary:
        """Re-upload several icons, batch_size at a time."""
        version = self.resolve_version(version)
        riot_ids = list(dict.fromkeys(riot_ids))

        logger.info("image_refresh_started", version=version, count=len(riot_ids))

        results = self._run_in_batches(
            riot_ids,
            lambda riot_id: self.refresh_item_image(riot_id, version)
        )

        errors = [f"{r.item_id}: {r.error}" for r in results if not r.success]

        logger.info(
            "image_refresh_completed",
            success=len(results) - len(errors),
            failed=len(errors)
        )

        return ImageRefreshSummary(
            success=not errors,
            success_count=len(results) - len(errors),
            failed_count=len(errors),
            errors=errors,
        )

    # ===================
    # RAW DATA
    # ===================

    def get_raw_record(self, riot_id: str, version: Optional[str] = None) -> RiotItemRecord:
        """
        Raises:
            ItemNotFoundError: If the patch has no such item
        """
        version = self.resolve_version(version)
        records = self.riot.fetch_item_data(version)
        if riot_id not in records:
            raise ItemNotFoundError(riot_id)
        return records[riot_id]

    def inspect(self, riot_id: str, version: Optional[str] = None) -> RawItemInspection:
        """Raw record plus parser output, for checking extraction by eye."""
        version = self.resolve_version(version)
        record = self.get_raw_record(riot_id, version)

        return RawItemInspection(
            version=version,
            riot_id=riot_id,
            raw=record.to_raw(),
            abilities=extract_abilities(record.description),
            stats=extract_stats_from_description(record.description),
            suggested_tags=extract_tags_from_raw_data(record),
            exclusion_reason=evaluate_exclusion_rule(record),
        )

    # ===================
    # PATCH DIFF
    # ===================

    def record_patch_diff(self, baseline_version: str, version: Optional[str] = None) -> PatchDiffSummary:
        """Store raw records that changed between baseline_version and version."""
        version = self.resolve_version(version)

        baseline = {
            riot_id: record.to_raw()
            for riot_id, record in self.riot.fetch_item_data(baseline_version).items()
        }
        current = {
            riot_id: record.to_raw()
            for riot_id, record in self.riot.fetch_item_data(version).items()
        }

        entries = self.patches.calculate_item_diff(baseline, current, version)
        self.patches.save_patch_items_diff(entries)

        return PatchDiffSummary(
            baseline_version=baseline_version,
            version=version,
            changed=len(entries),
            riot_ids=[entry.riot_id for entry in entries],
        )


# Singleton instance for convenience
_sync_service: Optional[SyncService] = None

def get_sync_service() -> SyncService:
    """Get or create SyncService instance."""
    global _sync_service
    if _sync_service is None:
        _sync_service = SyncService()
    return _sync_service
