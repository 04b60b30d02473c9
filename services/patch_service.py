"""
Patch version tracking.

The patch_versions table holds a single row: the patch the stored
items were last synced from, the newest version Data Dragon reported
and when it was last asked. Checks are rate limited through
last_checked_at.
"""

from datetime import datetime, timezone
from typing import Callable, Mapping, Optional
import structlog

from supabase import Client

from config import get_supabase_client, settings
from integrations.riot_client import RiotClient, get_riot_client
from models.patch import PatchVersionRecord, PatchCheckResult, PatchItemDiff
from exceptions import DatabaseError, RiotAPIError

logger = structlog.get_logger(__name__)

# Matches no real row; used to delete the single tracker row
_NIL_UUID = "00000000-0000-0000-0000-000000000000"


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class PatchService:
    """
    Version check and patch bookkeeping.

    clock is injectable so the rate limit can be tested without
    sleeping.
    """

    def __init__(
        self,
        riot_client: Optional[RiotClient] = None,
        client: Optional[Client] = None,
        clock: Callable[[], datetime] = _utc_now
    ):
        self.riot = riot_client or get_riot_client()
        self.db = client or get_supabase_client()
        self.clock = clock
        self.table = "patch_versions"
        self.diff_table = "patch_items_diff"
        self.interval_seconds = settings.patch_check_interval_seconds
        self.fallback_version = settings.fallback_patch_version

    # ===================
    # TRACKER ROW
    # ===================

    def get_patch_version(self) -> Optional[PatchVersionRecord]:
        """The tracker row, None when nothing was recorded yet."""
        try:
            result = self.db.table(self.table).select("*").limit(1).execute()
        except Exception as e:
            logger.error("get_patch_version_failed", error=str(e))
            raise DatabaseError("select", str(e))

        if not result.data:
            return None
        return PatchVersionRecord(**result.data[0])

    def _write_patch_version(
        self,
        current_patch: Optional[str],
        latest_patch: Optional[str],
        last_checked_at: datetime
    ) -> None:
        row = {
            "current_patch": current_patch,
            "latest_patch": latest_patch,
            "last_checked_at": last_checked_at.isoformat(),
            "updated_at": self.clock().isoformat(),
        }

        try:
            self.db.table(self.table).delete().neq("id", _NIL_UUID).execute()
            self.db.table(self.table).insert(row).execute()
        except Exception as e:
            logger.error("update_patch_version_failed", error=str(e))
            raise DatabaseError("update", str(e))

    # ===================
    # VERSION CHECK
    # ===================

    def should_fetch_latest(self, record: Optional[PatchVersionRecord] = None) -> bool:
        """True when no check was recorded or the last one is older than the interval."""
        if record is None:
            record = self.get_patch_version()
        if record is None:
            return True

        elapsed = self.clock() - _as_utc(record.last_checked_at)
        return elapsed.total_seconds() >= self.interval_seconds

    def check_for_updates(self) -> PatchCheckResult:
        """
        Compare the synced patch with Data Dragon's newest.

        Asks Data Dragon at most once per interval; inside the interval
        the newest version recorded by the last check is reused. Never
        raises: on any failure the fallback version is reported with
        the error text.
        """
        try:
            record = self.get_patch_version()
            current = record.current_patch if record else None

            if self.should_fetch_latest(record) or not record.latest_patch:
                latest = self.riot.get_latest_version()
                self._write_patch_version(current or latest, latest, self.clock())
                logger.info("latest_patch_fetched", latest=latest, current=current)
            else:
                latest = record.latest_patch
                logger.debug("patch_check_cached", latest=latest)

            return PatchCheckResult(
                current_patch=current,
                latest_patch=latest,
                should_update=current is not None and current != latest,
            )

        except Exception as e:
            logger.error("patch_check_failed", error=str(e))
            return PatchCheckResult(
                current_patch=None,
                latest_patch=self.fallback_version,
                should_update=False,
                error=str(e),
            )

    def get_latest_version(self) -> str:
        """
        Version a sync targets when none is given.

        Raises:
            RiotAPIError: If the newest version cannot be determined;
                the fallback version is never synced
        """
        check = self.check_for_updates()
        if check.error:
            raise RiotAPIError(f"Latest patch unavailable: {check.error}")
        return check.latest_patch

    def save_patch_version(self, version: str) -> PatchVersionRecord:
        """Record version as the synced patch; the last check is kept."""
        logger.info("saving_patch_version", version=version)

        record = self.get_patch_version()
        if record:
            self._write_patch_version(version, record.latest_patch, _as_utc(record.last_checked_at))
        else:
            self._write_patch_version(version, None, self.clock())
        return self.get_patch_version()

    # ===================
    # PER-PATCH RAW DIFF
    # ===================

    def calculate_item_diff(
        self,
        baseline_items: Mapping[str, dict],
        new_items: Mapping[str, dict],
        patch_version: str
    ) -> list[PatchItemDiff]:
        """Raw records that are new in, or differ in, new_items."""
        diff = []
        for riot_id, item_data in new_items.items():
            if baseline_items.get(riot_id) != item_data:
                diff.append(
                    PatchItemDiff(patch_version=patch_version, riot_id=riot_id, item_data=item_data)
                )

        logger.info("patch_item_diff_calculated", version=patch_version, changed=len(diff))

        return diff

    def save_patch_items_diff(self, entries: list[PatchItemDiff]) -> int:
        """Upsert diff entries keyed by (patch_version, riot_id)."""
        if not entries:
            return 0

        try:
            self.db.table(self.diff_table).upsert(
                [entry.model_dump(mode="json") for entry in entries],
                on_conflict="patch_version,riot_id"
            ).execute()
        except Exception as e:
            logger.error("save_patch_items_diff_failed", count=len(entries), error=str(e))
            raise DatabaseError("upsert", str(e))

        return len(entries)

    def get_items_diff_by_patch(self, patch_version: str) -> list[PatchItemDiff]:
        try:
            result = (
                self.db.table(self.diff_table)
                .select("*")
                .eq("patch_version", patch_version)
                .execute()
            )
        except Exception as e:
            logger.error("get_patch_items_diff_failed", version=patch_version, error=str(e))
            raise DatabaseError("select", str(e))

        return [PatchItemDiff(**row) for row in result.data]


# Singleton instance for convenience
_patch_service: Optional[PatchService] = None

def get_patch_service() -> PatchService:
    """Get or create PatchService instance."""
    global _patch_service
    if _patch_service is None:
        _patch_service = PatchService()
    return _patch_service
