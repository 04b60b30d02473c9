"""
Unit tests for patch version tracking.

Run: pytest tests/unit/test_patch_service.py -v
"""

import pytest
from datetime import timedelta

from config import settings
from exceptions import DatabaseError, RiotAPIError
from services.patch_service import PatchService
from tests.conftest import FakeRiotClient


@pytest.fixture
def riot() -> FakeRiotClient:
    return FakeRiotClient(latest="16.2.1")


@pytest.fixture
def service(mock_supabase, riot, fixed_clock) -> PatchService:
    return PatchService(riot_client=riot, client=mock_supabase, clock=fixed_clock)


def _tracker_row(current_patch, checked_at, latest_patch=None):
    return {
        "id": "7d1c0c7e-0000-4000-8000-000000000001",
        "current_patch": current_patch,
        "latest_patch": latest_patch,
        "last_checked_at": checked_at.isoformat(),
        "updated_at": checked_at.isoformat(),
    }


# ===================
# TRACKER ROW
# ===================

class TestPatchVersionRow:
    """Tests for reading and writing the tracker row."""

    def test_no_row(self, service):
        assert service.get_patch_version() is None

    def test_save_replaces_single_row(self, service, mock_supabase, fixed_clock):
        mock_supabase.set_table_data("patch_versions", [_tracker_row("16.1.1", fixed_clock.now)])

        record = service.save_patch_version("16.2.1")

        assert record.current_patch == "16.2.1"
        assert len(mock_supabase.rows("patch_versions")) == 1

    def test_save_keeps_last_check(self, service, mock_supabase, fixed_clock):
        """Saving the synced patch does not reset the rate limit or the recorded newest version."""
        checked_at = fixed_clock.now - timedelta(seconds=30)
        mock_supabase.set_table_data(
            "patch_versions", [_tracker_row("16.1.1", checked_at, latest_patch="16.2.1")]
        )

        record = service.save_patch_version("16.2.1")

        assert record.latest_patch == "16.2.1"
        assert record.last_checked_at == checked_at

    def test_read_failure_raises_database_error(self, service, mock_supabase):
        mock_supabase.fail("patch_versions", "select", "connection reset")

        with pytest.raises(DatabaseError) as exc_info:
            service.get_patch_version()

        assert "connection reset" in exc_info.value.message


# ===================
# VERSION CHECK
# ===================

class TestCheckForUpdates:
    """Tests for check_for_updates()"""

    def test_first_check_fetches_and_records(self, service, riot, mock_supabase):
        """No tracker row: ask Data Dragon and record its answer."""
        result = service.check_for_updates()

        assert result.latest_patch == "16.2.1"
        assert result.current_patch is None
        assert result.should_update is False
        assert riot.version_calls == 1
        assert mock_supabase.rows("patch_versions")[0]["current_patch"] == "16.2.1"

    def test_recent_check_uses_cached_version(self, service, riot, mock_supabase, fixed_clock):
        """Inside the interval Data Dragon is not asked; the recorded newest version is reused."""
        checked_at = fixed_clock.now - timedelta(seconds=30)
        mock_supabase.set_table_data(
            "patch_versions", [_tracker_row("16.1.1", checked_at, latest_patch="16.2.1")]
        )

        result = service.check_for_updates()

        assert result.current_patch == "16.1.1"
        assert result.latest_patch == "16.2.1"
        assert result.should_update is True
        assert riot.version_calls == 0

    def test_recent_row_without_latest_fetches(self, service, riot, mock_supabase, fixed_clock):
        """A row that never recorded the newest version asks Data Dragon."""
        checked_at = fixed_clock.now - timedelta(seconds=30)
        mock_supabase.set_table_data("patch_versions", [_tracker_row("16.1.1", checked_at)])

        result = service.check_for_updates()

        assert result.latest_patch == "16.2.1"
        assert result.should_update is True
        assert riot.version_calls == 1
        assert mock_supabase.rows("patch_versions")[0]["latest_patch"] == "16.2.1"

    def test_stale_check_detects_new_patch(self, service, riot, mock_supabase, fixed_clock):
        """Past the interval: newer Data Dragon version means update needed."""
        checked_at = fixed_clock.now - timedelta(seconds=settings.patch_check_interval_seconds + 1)
        mock_supabase.set_table_data("patch_versions", [_tracker_row("16.1.1", checked_at)])

        result = service.check_for_updates()

        assert result.current_patch == "16.1.1"
        assert result.latest_patch == "16.2.1"
        assert result.should_update is True
        assert riot.version_calls == 1

        row = mock_supabase.rows("patch_versions")[0]
        assert row["current_patch"] == "16.1.1"
        assert row["latest_patch"] == "16.2.1"
        assert row["last_checked_at"] == fixed_clock.now.isoformat()

    def test_clock_advance_triggers_refetch(self, service, riot, fixed_clock):
        """Second check inside the interval is cached; after it, refetched."""
        service.check_for_updates()
        service.check_for_updates()
        assert riot.version_calls == 1

        fixed_clock.now = fixed_clock.now + timedelta(seconds=settings.patch_check_interval_seconds)
        service.check_for_updates()

        assert riot.version_calls == 2

    def test_failure_reports_fallback(self, service, riot):
        """Errors never escape; the fallback version is reported."""
        riot.fail_versions = "Data Dragon request failed: timeout"

        result = service.check_for_updates()

        assert result.latest_patch == settings.fallback_patch_version
        assert result.should_update is False
        assert "timeout" in result.error

    def test_get_latest_version(self, service):
        assert service.get_latest_version() == "16.2.1"

    def test_latest_version_after_check_is_newest(self, service, riot, mock_supabase, fixed_clock):
        """Right after a check reports an update, the newest patch is targeted, not the synced one."""
        # Arrange
        stale = fixed_clock.now - timedelta(seconds=settings.patch_check_interval_seconds + 1)
        mock_supabase.set_table_data("patch_versions", [_tracker_row("16.1.1", stale)])
        assert service.check_for_updates().should_update is True

        # Act
        latest = service.get_latest_version()

        # Assert
        assert latest == "16.2.1"
        assert riot.version_calls == 1

    def test_latest_version_never_falls_back(self, service, riot):
        """A failed check raises instead of handing out the fallback version."""
        riot.fail_versions = "Data Dragon request failed: 503 Server Error"

        with pytest.raises(RiotAPIError) as exc_info:
            service.get_latest_version()

        assert "503" in exc_info.value.message


# ===================
# PER-PATCH RAW DIFF
# ===================

class TestPatchItemsDiff:
    """Tests for the per-patch raw record diff."""

    def test_new_and_changed_records(self, service):
        baseline = {"1": {"name": "A"}, "2": {"name": "B"}, "3": {"name": "C"}}
        latest = {"1": {"name": "A"}, "2": {"name": "B2"}, "4": {"name": "D"}}

        diff = service.calculate_item_diff(baseline, latest, "16.2.1")

        assert [entry.riot_id for entry in diff] == ["2", "4"]
        assert diff[0].item_data == {"name": "B2"}

    def test_save_is_keyed_by_patch_and_item(self, service, mock_supabase):
        entries = service.calculate_item_diff({}, {"1": {"name": "A"}}, "16.2.1")

        service.save_patch_items_diff(entries)
        service.save_patch_items_diff(entries)

        assert len(mock_supabase.rows("patch_items_diff")) == 1
        assert service.get_items_diff_by_patch("16.2.1")[0].riot_id == "1"
        assert service.get_items_diff_by_patch("16.1.1") == []

    def test_save_nothing(self, service, mock_supabase):
        assert service.save_patch_items_diff([]) == 0
        assert ("patch_items_diff", "upsert") not in mock_supabase.calls
