"""
Manual setting service for the item_manual_settings table.

Manual settings are admin decisions; the sync engine reads them but
only this service writes them.
"""

from typing import Iterable, Optional
import structlog

from supabase import Client

from config import get_supabase_client
from models.manual_setting import ManualSetting, ManualSettingUpsert
from exceptions import ManualSettingNotFoundError, DatabaseError

logger = structlog.get_logger(__name__)


class ManualSettingService:
    """Manual availability overrides, one row per riot_id."""

    def __init__(self, client: Optional[Client] = None):
        self.db = client or get_supabase_client()
        self.table = "item_manual_settings"

    # ===================
    # READ OPERATIONS
    # ===================

    def get_all(self) -> list[ManualSetting]:
        """All manual settings ordered by riot_id."""
        try:
            result = self.db.table(self.table).select("*").order("riot_id").execute()
        except Exception as e:
            logger.error("get_manual_settings_failed", error=str(e))
            raise DatabaseError("select", str(e))

        return [ManualSetting(**row) for row in result.data]

    def get_map(self) -> dict[str, ManualSetting]:
        """Manual settings keyed by riot_id."""
        return {setting.riot_id: setting for setting in self.get_all()}

    def get(self, riot_id: str) -> ManualSetting:
        """
        Get the manual setting of one item.

        Raises:
            ManualSettingNotFoundError: If the item has none
        """
        try:
            result = (
                self.db.table(self.table)
                .select("*")
                .eq("riot_id", riot_id)
                .execute()
            )
        except Exception as e:
            logger.error("get_manual_setting_failed", riot_id=riot_id, error=str(e))
            raise DatabaseError("select", str(e))

        if not result.data:
            raise ManualSettingNotFoundError(riot_id)

        return ManualSetting(**result.data[0])

    # ===================
    # WRITE OPERATIONS
    # ===================

    def upsert(self, riot_id: str, data: ManualSettingUpsert) -> ManualSetting:
        """
        Create or replace the manual setting of an item.

        Args:
            riot_id: Item id
            data: Availability and reason

        Returns:
            Stored ManualSetting
        """
        logger.info(
            "upserting_manual_setting",
            riot_id=riot_id,
            is_available=data.is_available
        )

        row = {
            "riot_id": riot_id,
            "is_available": data.is_available,
            "reason": data.reason,
        }

        try:
            result = (
                self.db.table(self.table)
                .upsert(row, on_conflict="riot_id")
                .execute()
            )
        except Exception as e:
            logger.error("upsert_manual_setting_failed", riot_id=riot_id, error=str(e))
            raise DatabaseError("upsert", str(e))

        return ManualSetting(**(result.data[0] if result.data else row))

    def upsert_many(self, rows: list[dict]) -> int:
        """
        Upsert several settings given as {riot_id, is_available, reason}.

        Returns:
            Number of rows written
        """
        if not rows:
            return 0

        logger.info("upserting_manual_settings", count=len(rows))

        try:
            self.db.table(self.table).upsert(rows, on_conflict="riot_id").execute()
        except Exception as e:
            logger.error("upsert_manual_settings_failed", count=len(rows), error=str(e))
            raise DatabaseError("upsert", str(e))

        return len(rows)

    def update_reason(self, riot_id: str, reason: Optional[str]) -> ManualSetting:
        """
        Change only the reason of an existing setting.

        Raises:
            ManualSettingNotFoundError: If the item has none
        """
        self.get(riot_id)

        try:
            result = (
                self.db.table(self.table)
                .update({"reason": reason})
                .eq("riot_id", riot_id)
                .execute()
            )
        except Exception as e:
            logger.error("update_manual_setting_reason_failed", riot_id=riot_id, error=str(e))
            raise DatabaseError("update", str(e))

        logger.info("manual_setting_reason_updated", riot_id=riot_id)

        return ManualSetting(**result.data[0]) if result.data else self.get(riot_id)

    def delete(self, riot_id: str) -> bool:
        """
        Remove the manual setting of an item.

        Raises:
            ManualSettingNotFoundError: If the item has none
        """
        self.get(riot_id)

        try:
            self.db.table(self.table).delete().eq("riot_id", riot_id).execute()
        except Exception as e:
            logger.error("delete_manual_setting_failed", riot_id=riot_id, error=str(e))
            raise DatabaseError("delete", str(e))

        logger.info("manual_setting_deleted", riot_id=riot_id)

        return True

    def delete_not_in(self, keep_ids: Iterable[str]) -> list[str]:
        """
        Delete every setting whose riot_id is not in keep_ids.

        Returns:
            riot_ids that were deleted
        """
        keep = set(keep_ids)
        stale = sorted(set(self.get_map()) - keep)

        if not stale:
            return []

        try:
            self.db.table(self.table).delete().in_("riot_id", stale).execute()
        except Exception as e:
            logger.error("delete_stale_manual_settings_failed", count=len(stale), error=str(e))
            raise DatabaseError("delete", str(e))

        logger.info("stale_manual_settings_deleted", count=len(stale))

        return stale


# Singleton instance for convenience
_manual_setting_service: Optional[ManualSettingService] = None

def get_manual_setting_service() -> ManualSettingService:
    """Get or create ManualSettingService instance."""
    global _manual_setting_service
    if _manual_setting_service is None:
        _manual_setting_service = ManualSettingService()
    return _manual_setting_service
