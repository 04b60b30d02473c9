"""
Hand-registered item metadata: additional search tags and role lists.
"""

from collections import defaultdict
from typing import Optional
import structlog

from supabase import Client

from config import get_supabase_client
from exceptions import DatabaseError

logger = structlog.get_logger(__name__)


class ItemMetadataService:
    """additional_tags and role_items tables."""

    def __init__(self, client: Optional[Client] = None):
        self.db = client or get_supabase_client()
        self.tags_table = "additional_tags"
        self.roles_table = "role_items"

    def _select(self, table: str, columns: str, riot_id: Optional[str] = None) -> list[dict]:
        try:
            query = self.db.table(table).select(columns)
            if riot_id is not None:
                query = query.eq("riot_id", riot_id)
            return list(query.execute().data)
        except Exception as e:
            logger.error("get_item_metadata_failed", table=table, error=str(e))
            raise DatabaseError("select", str(e))

    # ===================
    # ADDITIONAL TAGS
    # ===================

    def get_additional_tags_map(self) -> dict[str, list[str]]:
        """Additional tags of every item, keyed by riot_id."""
        tags: dict[str, list[str]] = defaultdict(list)
        for row in self._select(self.tags_table, "riot_id, tag"):
            if row["tag"] not in tags[row["riot_id"]]:
                tags[row["riot_id"]].append(row["tag"])
        return dict(tags)

    def get_additional_tags_by_item(self, riot_id: str) -> list[str]:
        """Additional tags of one item."""
        rows = self._select(self.tags_table, "tag", riot_id=riot_id)
        return list(dict.fromkeys(row["tag"] for row in rows))

    def add_additional_tag(self, riot_id: str, tag: str) -> None:
        logger.info("adding_additional_tag", riot_id=riot_id, tag=tag)
        try:
            self.db.table(self.tags_table).insert({"riot_id": riot_id, "tag": tag}).execute()
        except Exception as e:
            logger.error("add_additional_tag_failed", riot_id=riot_id, error=str(e))
            raise DatabaseError("insert", str(e))

    def remove_additional_tag(self, riot_id: str, tag: str) -> None:
        logger.info("removing_additional_tag", riot_id=riot_id, tag=tag)
        try:
            self.db.table(self.tags_table).delete().eq("riot_id", riot_id).eq("tag", tag).execute()
        except Exception as e:
            logger.error("remove_additional_tag_failed", riot_id=riot_id, error=str(e))
            raise DatabaseError("delete", str(e))

    # ===================
    # ROLES
    # ===================

    def get_roles_map(self) -> dict[str, list[str]]:
        """Roles of every item, keyed by riot_id."""
        roles: dict[str, list[str]] = defaultdict(list)
        for row in self._select(self.roles_table, "role, riot_id"):
            if row["role"] not in roles[row["riot_id"]]:
                roles[row["riot_id"]].append(row["role"])
        return dict(roles)

    def get_roles_by_item(self, riot_id: str) -> list[str]:
        """Roles of one item."""
        rows = self._select(self.roles_table, "role", riot_id=riot_id)
        return list(dict.fromkeys(row["role"] for row in rows))

    def add_role_item(self, role: str, riot_id: str) -> None:
        logger.info("adding_role_item", role=role, riot_id=riot_id)
        try:
            self.db.table(self.roles_table).insert({"role": role, "riot_id": riot_id}).execute()
        except Exception as e:
            logger.error("add_role_item_failed", riot_id=riot_id, error=str(e))
            raise DatabaseError("insert", str(e))

    def remove_role_item(self, role: str, riot_id: str) -> None:
        logger.info("removing_role_item", role=role, riot_id=riot_id)
        try:
            self.db.table(self.roles_table).delete().eq("role", role).eq("riot_id", riot_id).execute()
        except Exception as e:
            logger.error("remove_role_item_failed", riot_id=riot_id, error=str(e))
            raise DatabaseError("delete", str(e))


# Singleton instance for convenience
_item_metadata_service: Optional[ItemMetadataService] = None

def get_item_metadata_service() -> ItemMetadataService:
    """Get or create ItemMetadataService instance."""
    global _item_metadata_service
    if _item_metadata_service is None:
        _item_metadata_service = ItemMetadataService()
    return _item_metadata_service
