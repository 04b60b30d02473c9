"""
Item icon storage (Supabase Storage bucket).
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Union
import structlog

from supabase import Client

from config import settings, get_supabase_client, get_admin_client

logger = structlog.get_logger(__name__)

WEBP_CONTENT_TYPE = "image/webp"


@dataclass(frozen=True)
class UploadResult:
    """Either the stored path or the error message."""
    path: Optional[str] = None
    error: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.error is None


class ItemImageStorage:
    """
    Upload, remove and link item icons.

    Uploads overwrite: one object per item, keyed "{riot_id}.webp".
    """

    def __init__(
        self,
        client: Optional[Client] = None,
        bucket: Optional[str] = None,
        cache_control: Optional[str] = None
    ):
        # Writes need the service role when one is configured
        self.db = client or get_admin_client() or get_supabase_client()
        self.bucket_name = bucket or settings.storage_bucket
        self.cache_control = cache_control or settings.storage_cache_control

    @property
    def bucket(self):
        return self.db.storage.from_(self.bucket_name)

    def upload(self, key: str, data: bytes) -> UploadResult:
        """
        Upload bytes under key, replacing any existing object.

        Failures are returned, not raised, so a batch can keep going.
        """
        try:
            self.bucket.upload(
                key,
                data,
                file_options={
                    "content-type": WEBP_CONTENT_TYPE,
                    "cache-control": self.cache_control,
                    "upsert": "true",
                },
            )
        except Exception as e:
            logger.error("image_upload_failed", path=key, error=str(e))
            return UploadResult(error=str(e))

        logger.debug("image_uploaded", path=key, size=len(data))

        return UploadResult(path=key)

    def upload_item_image(self, riot_id: str, data: bytes) -> UploadResult:
        return self.upload(f"{riot_id}.webp", data)

    def remove(self, keys: list[str]) -> UploadResult:
        if not keys:
            return UploadResult()

        try:
            self.bucket.remove(keys)
        except Exception as e:
            logger.error("image_remove_failed", count=len(keys), error=str(e))
            return UploadResult(error=str(e))

        logger.info("images_removed", count=len(keys))

        return UploadResult()

    def get_public_url(self, path: str, cache_bust: Optional[Union[int, datetime]] = None) -> str:
        """
        Public URL of an object.

        Args:
            path: Object key, e.g. "3001.webp"
            cache_bust: Timestamp (ms) or datetime appended as ?t=
        """
        url = self.bucket.get_public_url(path)

        if cache_bust:
            if isinstance(cache_bust, datetime):
                cache_bust = int(cache_bust.timestamp() * 1000)
            url = f"{url}?t={cache_bust}"

        return url


# Singleton instance for convenience
_item_image_storage: Optional[ItemImageStorage] = None

def get_item_image_storage() -> ItemImageStorage:
    """Get or create ItemImageStorage instance."""
    global _item_image_storage
    if _item_image_storage is None:
        _item_image_storage = ItemImageStorage()
    return _item_image_storage
