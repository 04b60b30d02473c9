"""
Unit tests for icon storage.

Run: pytest tests/unit/test_storage.py -v
"""

import pytest
from datetime import datetime, timezone

from integrations.storage import ItemImageStorage


@pytest.fixture
def storage(mock_supabase) -> ItemImageStorage:
    return ItemImageStorage(client=mock_supabase, bucket="item-images", cache_control="604800")


@pytest.fixture
def bucket(mock_supabase):
    return mock_supabase.storage.from_("item-images")


class TestUpload:
    """Tests for ItemImageStorage.upload_item_image()"""

    def test_upload_overwrites_with_cache_headers(self, storage, bucket):
        # Arrange
        bucket.objects["3031.webp"] = b"old"

        # Act
        result = storage.upload_item_image("3031", b"new")

        # Assert
        assert result.success
        assert result.path == "3031.webp"
        assert bucket.objects["3031.webp"] == b"new"
        assert bucket.options["3031.webp"] == {
            "content-type": "image/webp",
            "cache-control": "604800",
            "upsert": "true",
        }

    def test_failure_returned_not_raised(self, storage, bucket):
        bucket.fail_paths["3031.webp"] = "Bucket not found"

        result = storage.upload_item_image("3031", b"data")

        assert not result.success
        assert result.error == "Bucket not found"
        assert result.path is None


class TestRemove:
    """Tests for ItemImageStorage.remove()"""

    def test_remove_objects(self, storage, bucket):
        bucket.objects.update({"1.webp": b"a", "2.webp": b"b"})

        result = storage.remove(["1.webp"])

        assert result.success
        assert list(bucket.objects) == ["2.webp"]

    def test_remove_nothing(self, storage):
        assert storage.remove([]).success


class TestPublicUrl:
    """Tests for ItemImageStorage.get_public_url()"""

    BASE = "https://test-project.supabase.co/storage/v1/object/public/item-images/3031.webp"

    def test_plain_url(self, storage):
        assert storage.get_public_url("3031.webp") == self.BASE

    def test_cache_bust_millis(self, storage):
        assert storage.get_public_url("3031.webp", cache_bust=1767873600000) == f"{self.BASE}?t=1767873600000"

    def test_cache_bust_datetime(self, storage):
        updated_at = datetime(2026, 1, 8, 12, 0, 0, tzinfo=timezone.utc)

        url = storage.get_public_url("3031.webp", cache_bust=updated_at)

        assert url == f"{self.BASE}?t={int(updated_at.timestamp() * 1000)}"
