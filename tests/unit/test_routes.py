"""
API tests for the items, manual settings and sync routers.

Route modules look their services up through get_*_service(); those
lookups are patched to services bound to the mock client.

Run: pytest tests/unit/test_routes.py -v
"""

import pytest
from unittest.mock import patch, MagicMock

from exceptions import RiotAPIError
from integrations.storage import ItemImageStorage
from services.item_service import ItemService
from services.manual_setting_service import ManualSettingService
from services.patch_service import PatchService
from tests.conftest import FakeRiotClient
from tests.factories import RiotItemFactory, StoredItemFactory

VERSION = "16.1.1"


@pytest.fixture
def client(test_client_with_mock_db, mock_supabase):
    """Test client with every route's services bound to the mock."""
    storage = ItemImageStorage(client=mock_supabase, bucket="item-images")

    with patch("routes.items.get_item_service", return_value=ItemService(client=mock_supabase)), \
         patch("routes.items.get_item_image_storage", return_value=storage), \
         patch("routes.manual_settings.get_manual_setting_service",
               return_value=ManualSettingService(client=mock_supabase)):
        yield test_client_with_mock_db


# ===================
# APP
# ===================

class TestApp:
    """Tests for the app-level endpoints."""

    def test_root_lists_endpoints(self, client):
        response = client.get("/")

        assert response.status_code == 200
        assert response.json()["endpoints"]["sync"] == "/api/sync"

    def test_health_reports_counts(self, client, mock_supabase):
        mock_supabase.set_table_data("items", [StoredItemFactory.create("1001")])

        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["database"]["items_count"] == 1


# ===================
# ITEMS
# ===================

class TestItemRoutes:
    """Tests for /api/items"""

    def test_list_items_with_image_urls(self, client, mock_supabase):
        # Arrange
        mock_supabase.set_table_data("items", [
            StoredItemFactory.create("3031", updated_at="2026-01-08T12:00:00+00:00"),
            StoredItemFactory.create("3599", is_available=False),
        ])

        # Act
        response = client.get("/api/items")

        # Assert
        assert response.status_code == 200
        body = response.json()
        assert body["total"] == 2
        assert body["data"][0]["image_url"] == (
            "https://test-project.supabase.co/storage/v1/object/public/item-images/3031.webp"
            "?t=1767873600000"
        )

    def test_list_available_only(self, client, mock_supabase):
        mock_supabase.set_table_data("items", [
            StoredItemFactory.create("3031"),
            StoredItemFactory.create("3599", is_available=False),
        ])

        response = client.get("/api/items?available_only=true")

        assert [item["riot_id"] for item in response.json()["data"]] == ["3031"]

    def test_get_item(self, client, mock_supabase):
        mock_supabase.set_table_data("items", [StoredItemFactory.create("3031", name_ja="インフィニティ・エッジ")])

        response = client.get("/api/items/3031")

        assert response.status_code == 200
        assert response.json()["name_ja"] == "インフィニティ・エッジ"

    def test_get_missing_item(self, client):
        response = client.get("/api/items/404")

        assert response.status_code == 404
        assert response.json()["error"]["code"] == "ITEM_NOT_FOUND"

    def test_database_error(self, client, mock_supabase):
        mock_supabase.fail("items", "select", "timeout")

        response = client.get("/api/items")

        assert response.status_code == 500
        assert response.json()["error"]["code"] == "DATABASE_ERROR"


# ===================
# MANUAL SETTINGS
# ===================

class TestManualSettingRoutes:
    """Tests for /api/manual-settings"""

    def test_put_then_list(self, client):
        # Act
        put = client.put("/api/manual-settings/3031", json={"is_available": False, "reason": "重複"})
        listing = client.get("/api/manual-settings")

        # Assert
        assert put.status_code == 200
        assert put.json()["reason"] == "重複"
        assert listing.json()["total"] == 1

    def test_patch_reason(self, client):
        client.put("/api/manual-settings/3031", json={"is_available": False, "reason": "a"})

        response = client.patch("/api/manual-settings/3031/reason", json={"reason": "b"})

        assert response.status_code == 200
        assert response.json()["reason"] == "b"

    def test_delete(self, client):
        client.put("/api/manual-settings/3031", json={"is_available": True})

        first = client.delete("/api/manual-settings/3031")
        second = client.delete("/api/manual-settings/3031")

        assert first.status_code == 204
        assert second.status_code == 404
        assert second.json()["error"]["code"] == "MANUAL_SETTING_NOT_FOUND"

    def test_invalid_body(self, client):
        response = client.put("/api/manual-settings/3031", json={"reason": "no flag"})

        assert response.status_code == 422


# ===================
# SYNC
# ===================

@pytest.fixture
def sync_client(client, sync_service_factory, mock_supabase, fixed_clock):
    """Client whose sync routes run against a FakeRiotClient."""
    items = RiotItemFactory.create_patch(3)
    items["3600"] = RiotItemFactory.create(riot_id="3600", required_champion="Kalista")
    riot = FakeRiotClient({VERSION: items}, latest=VERSION)
    service = sync_service_factory(riot)

    with patch("routes.sync.get_sync_service", return_value=service), \
         patch("routes.sync.get_patch_service", return_value=service.patches), \
         patch("routes.sync.get_riot_client", return_value=riot):
        yield client


class TestSyncRoutes:
    """Tests for /api/sync"""

    def test_versions(self, sync_client):
        response = sync_client.get("/api/sync/versions")

        assert response.json() == {"data": [VERSION], "latest": VERSION}

    def test_run_sync(self, sync_client, mock_supabase):
        # Act
        response = sync_client.post("/api/sync/run", json={"version": VERSION})

        # Assert
        assert response.status_code == 200
        body = response.json()
        assert body["total"] == 4
        assert body["success_count"] == 3
        assert body["skipped_count"] == 1
        assert body["failed_count"] == 0
        assert len(mock_supabase.rows("items")) == 3

    def test_run_partial_sync(self, sync_client, mock_supabase):
        response = sync_client.post("/api/sync/run", json={"version": VERSION, "item_ids": ["1002"]})

        assert response.json()["success_count"] == 1
        assert {row["riot_id"] for row in mock_supabase.rows("items")} == {"1002"}

    def test_diff(self, sync_client):
        response = sync_client.get(f"/api/sync/diff?version={VERSION}")

        assert response.status_code == 200
        assert response.json()["counts"]["new"] == 3

    def test_classification_round_trip(self, sync_client, mock_supabase):
        # Arrange
        loaded = sync_client.get(f"/api/sync/classification?version={VERSION}").json()

        # Act
        saved = sync_client.post("/api/sync/classification", json={
            "version": VERSION,
            "manual_settings": [{"riot_id": "3600", "is_available": True, "reason": None}],
        })

        # Assert
        assert loaded["counts"] == {"available": 3, "manualSettings": 0, "autoExcluded": 1}
        assert loaded["auto_excluded"][0]["riot_id"] == "3600"
        assert loaded["auto_excluded"][0]["is_new"] is True
        assert saved.status_code == 200
        assert saved.json()["saved_items"] == 4
        assert saved.json()["saved_manual_settings"] == 1

    def test_patch_check_never_fails(self, sync_client, mock_supabase):
        mock_supabase.fail("patch_versions", "select", "relation does not exist")

        response = sync_client.get("/api/sync/patch")

        assert response.status_code == 200
        assert response.json()["error"] is not None

    def test_save_patch(self, sync_client):
        response = sync_client.put("/api/sync/patch", json={"current_patch": "16.2.1"})

        assert response.status_code == 200
        assert response.json()["current_patch"] == "16.2.1"

    def test_raw_item(self, sync_client):
        response = sync_client.get(f"/api/sync/raw/3600?version={VERSION}")

        assert response.status_code == 200
        assert response.json()["exclusion_reason"] == "champion-exclusive item"

    def test_raw_item_missing(self, sync_client):
        response = sync_client.get(f"/api/sync/raw/404?version={VERSION}")

        assert response.status_code == 404

    def test_refresh_images_requires_ids(self, sync_client):
        response = sync_client.post("/api/sync/images/refresh", json={"item_ids": []})

        assert response.status_code == 422

    def test_refresh_images(self, sync_client):
        response = sync_client.post(
            "/api/sync/images/refresh", json={"version": VERSION, "item_ids": ["1001"]}
        )

        assert response.json()["success_count"] == 1

    def test_patch_diff(self, sync_client):
        response = sync_client.post(
            "/api/sync/patch/diff", json={"baseline_version": "16.0.1", "version": VERSION}
        )

        assert response.status_code == 200
        assert response.json()["changed"] == 4


class TestSyncRouteErrors:
    """Service failures map to error responses."""

    def test_item_data_unavailable(self, client):
        service = MagicMock()
        service.sync.side_effect = RiotAPIError("Data Dragon request failed: timeout")

        with patch("routes.sync.get_sync_service", return_value=service):
            response = client.post("/api/sync/run", json={})

        assert response.status_code == 503
        assert response.json()["error"]["code"] == "RIOT_API_ERROR"

    def test_unexpected_error(self, client):
        service = MagicMock()
        service.scan.side_effect = KeyError("riot_id")

        with patch("routes.sync.get_sync_service", return_value=service):
            response = client.get("/api/sync/diff")

        assert response.status_code == 500
        assert response.json()["error"]["code"] == "INTERNAL_ERROR"
