"""
Item service for the items table.
"""

from datetime import datetime, timezone
from typing import Iterable, Optional
import structlog

from supabase import Client

from config import get_supabase_client
from models.item import ItemUpsert, ItemResponse
from exceptions import ItemNotFoundError, DatabaseError

logger = structlog.get_logger(__name__)


class ItemService:
    """
    Stored items.

    Rows are keyed by riot_id; every write is an upsert on that key so
    repeating a sync leaves one row per item.
    """

    def __init__(self, client: Optional[Client] = None):
        self.db = client or get_supabase_client()
        self.table = "items"

    # ===================
    # READ OPERATIONS
    # ===================

    def get_all(self, available_only: bool = False) -> list[ItemResponse]:
        """
        Get all stored items ordered by riot_id.

        Args:
            available_only: Only items flagged is_available

        Returns:
            List of ItemResponse
        """
        logger.info("getting_items", available_only=available_only)

        try:
            query = self.db.table(self.table).select("*")
            if available_only:
                query = query.eq("is_available", True)
            result = query.order("riot_id").execute()

            items = [ItemResponse(**row) for row in result.data]

            logger.info("items_retrieved", count=len(items))

            return items

        except Exception as e:
            logger.error("get_items_failed", error=str(e))
            raise DatabaseError("select", str(e))

    def get_by_riot_id(self, riot_id: str) -> ItemResponse:
        """
        Get one stored item.

        Raises:
            ItemNotFoundError: If no row has this riot_id
        """
        logger.debug("getting_item", riot_id=riot_id)

        try:
            result = (
                self.db.table(self.table)
                .select("*")
                .eq("riot_id", riot_id)
                .execute()
            )
        except Exception as e:
            logger.error("get_item_failed", riot_id=riot_id, error=str(e))
            raise DatabaseError("select", str(e))

        if not result.data:
            raise ItemNotFoundError(riot_id)

        return ItemResponse(**result.data[0])

    def get_ids(self) -> set[str]:
        """riot_ids of every stored item."""
        try:
            result = self.db.table(self.table).select("riot_id").execute()
            return {row["riot_id"] for row in result.data}
        except Exception as e:
            logger.error("get_item_ids_failed", error=str(e))
            raise DatabaseError("select", str(e))

    def get_rows(self) -> list[dict]:
        """Stored rows as plain dicts, for diffing."""
        try:
            result = self.db.table(self.table).select("*").execute()
            return list(result.data)
        except Exception as e:
            logger.error("get_item_rows_failed", error=str(e))
            raise DatabaseError("select", str(e))

    # ===================
    # WRITE OPERATIONS
    # ===================

    def upsert(self, item: ItemUpsert) -> ItemResponse:
        """
        Insert or replace one item keyed by riot_id.

        Returns:
            Stored ItemResponse
        """
        logger.debug("upserting_item", riot_id=item.riot_id)

        try:
            result = (
                self.db.table(self.table)
                .upsert(item.to_row(), on_conflict="riot_id")
                .execute()
            )
        except Exception as e:
            logger.error("upsert_item_failed", riot_id=item.riot_id, error=str(e))
            raise DatabaseError("upsert", str(e))

        if result.data:
            return ItemResponse(**result.data[0])
        return ItemResponse(**item.to_row())

    def upsert_many(self, items: list[ItemUpsert]) -> int:
        """
        Upsert several items in one request.

        Returns:
            Number of rows written
        """
        if not items:
            return 0

        logger.info("upserting_items", count=len(items))

        try:
            self.db.table(self.table).upsert(
                [item.to_row() for item in items],
                on_conflict="riot_id"
            ).execute()
        except Exception as e:
            logger.error("upsert_items_failed", count=len(items), error=str(e))
            raise DatabaseError("upsert", str(e))

        return len(items)

    def delete_not_in(self, keep_ids: Iterable[str]) -> list[str]:
        """
        Delete every stored item whose riot_id is not in keep_ids.

        Returns:
            riot_ids that were deleted
        """
        keep = set(keep_ids)
        stale = sorted(self.get_ids() - keep)

        if not stale:
            return []

        logger.info("deleting_stale_items", count=len(stale))

        try:
            self.db.table(self.table).delete().in_("riot_id", stale).execute()
        except Exception as e:
            logger.error("delete_stale_items_failed", count=len(stale), error=str(e))
            raise DatabaseError("delete", str(e))

        logger.info("stale_items_deleted", riot_ids=stale)

        return stale

    def delete(self, riot_id: str) -> bool:
        """
        Delete one stored item.

        Raises:
            ItemNotFoundError: If no row has this riot_id
        """
        logger.info("deleting_item", riot_id=riot_id)

        self.get_by_riot_id(riot_id)

        try:
            self.db.table(self.table).delete().eq("riot_id", riot_id).execute()
        except Exception as e:
            logger.error("delete_item_failed", riot_id=riot_id, error=str(e))
            raise DatabaseError("delete", str(e))

        return True

    def touch(self, riot_id: str) -> None:
        """Bump updated_at so clients reload the item's icon."""
        try:
            self.db.table(self.table).update(
                {"updated_at": datetime.now(timezone.utc).isoformat()}
            ).eq("riot_id", riot_id).execute()
        except Exception as e:
            logger.error("touch_item_failed", riot_id=riot_id, error=str(e))
            raise DatabaseError("update", str(e))


# Singleton instance for convenience
_item_service: Optional[ItemService] = None

def get_item_service() -> ItemService:
    """Get or create ItemService instance."""
    global _item_service
    if _item_service is None:
        _item_service = ItemService()
    return _item_service
