"""
Shared test fixtures.

The Supabase client is replaced by an in-memory fake that keeps rows
per table, so services can be exercised end to end without a network.
"""

import os
import sys
from pathlib import Path

# Add project root to Python path
project_dir = Path(__file__).parent.parent
sys.path.insert(0, str(project_dir))

# Settings load at import time; give them a project to point at
os.environ.setdefault("SUPABASE_URL", "https://test-project.supabase.co")
os.environ.setdefault("SUPABASE_KEY", "test-anon-key")

import threading
import pytest
from datetime import datetime, timezone
from typing import Optional
from unittest.mock import patch
from uuid import uuid4

from models.item import RiotItemRecord


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


# ===================
# MOCK SUPABASE CLIENT
# ===================

class MockSupabaseResponse:
    """Mock Supabase query response."""

    def __init__(self, data=None, count: Optional[int] = None):
        self.data = data if data is not None else []
        self.count = count


class MockSupabaseQuery:
    """
    Chainable query builder over one in-memory table.

    Filters are collected and applied on execute().
    """

    def __init__(self, client: "MockSupabaseClient", table: str, operation: str, payload=None, **options):
        self._client = client
        self._table = table
        self._operation = operation
        self._payload = payload
        self._options = options
        self._filters = []
        self._order: Optional[tuple] = None
        self._limit: Optional[int] = None
        self._is_single = False
        self._negate_next = False

    # Filters

    def _add_filter(self, predicate):
        if self._negate_next:
            self._negate_next = False
            self._filters.append(lambda row: not predicate(row))
        else:
            self._filters.append(predicate)
        return self

    def eq(self, column, value):
        return self._add_filter(lambda row: row.get(column) == value)

    def neq(self, column, value):
        return self._add_filter(lambda row: row.get(column) != value)

    def in_(self, column, values):
        values = list(values)
        return self._add_filter(lambda row: row.get(column) in values)

    @property
    def not_(self):
        self._negate_next = True
        return self

    def order(self, column, desc: bool = False, **kwargs):
        self._order = (column, desc)
        return self

    def limit(self, count):
        self._limit = count
        return self

    def range(self, start, end):
        self._limit = end + 1
        return self

    def single(self):
        self._is_single = True
        return self

    def select(self, *args, **kwargs):
        return self

    def _matches(self, row: dict) -> bool:
        return all(predicate(row) for predicate in self._filters)

    # Execution

    def execute(self) -> MockSupabaseResponse:
        failure = self._client.failures.get((self._table, self._operation))
        if failure:
            raise Exception(failure)

        with self._client.lock:
            self._client.calls.append((self._table, self._operation))
            rows = self._client.tables.setdefault(self._table, [])

            if self._operation == "select":
                data = [dict(row) for row in rows if self._matches(row)]
                if self._order:
                    column, desc = self._order
                    data.sort(key=lambda row: (row.get(column) is None, row.get(column)), reverse=desc)
                if self._limit is not None:
                    data = data[:self._limit]
                count = len(data) if self._options.get("count") else None
                if self._is_single:
                    return MockSupabaseResponse(data[0] if data else None, count)
                return MockSupabaseResponse(data, count)

            if self._operation == "insert":
                inserted = []
                for item in self._as_list(self._payload):
                    row = {"id": str(uuid4()), "created_at": _now_iso(), "updated_at": _now_iso(), **item}
                    rows.append(row)
                    inserted.append(dict(row))
                return MockSupabaseResponse(inserted)

            if self._operation == "upsert":
                keys = [k.strip() for k in (self._options.get("on_conflict") or "id").split(",")]
                written = []
                for item in self._as_list(self._payload):
                    existing = next(
                        (row for row in rows if all(row.get(k) == item.get(k) for k in keys)),
                        None
                    )
                    if existing is None:
                        existing = {"id": str(uuid4()), "created_at": _now_iso()}
                        rows.append(existing)
                    existing.update(item)
                    existing.setdefault("updated_at", _now_iso())
                    written.append(dict(existing))
                return MockSupabaseResponse(written)

            if self._operation == "update":
                updated = []
                for row in rows:
                    if self._matches(row):
                        row.update(self._payload)
                        updated.append(dict(row))
                return MockSupabaseResponse(updated)

            if self._operation == "delete":
                removed = [dict(row) for row in rows if self._matches(row)]
                self._client.tables[self._table] = [row for row in rows if not self._matches(row)]
                return MockSupabaseResponse(removed)

        raise ValueError(f"Unknown operation {self._operation}")

    @staticmethod
    def _as_list(payload) -> list:
        return [payload] if isinstance(payload, dict) else list(payload)


class MockSupabaseTable:
    """Entry point of the query builder for one table."""

    def __init__(self, client: "MockSupabaseClient", name: str):
        self._client = client
        self._name = name

    def select(self, *args, **kwargs):
        return MockSupabaseQuery(self._client, self._name, "select", count=kwargs.get("count"))

    def insert(self, data):
        return MockSupabaseQuery(self._client, self._name, "insert", data)

    def upsert(self, data, on_conflict: Optional[str] = None, **kwargs):
        return MockSupabaseQuery(self._client, self._name, "upsert", data, on_conflict=on_conflict)

    def update(self, data):
        return MockSupabaseQuery(self._client, self._name, "update", data)

    def delete(self):
        return MockSupabaseQuery(self._client, self._name, "delete")


class MockStorageBucket:
    """One storage bucket; objects are kept as bytes by path."""

    def __init__(self, name: str):
        self.name = name
        self.objects: dict[str, bytes] = {}
        self.options: dict[str, dict] = {}
        self.fail_paths: dict[str, str] = {}

    def upload(self, path, file, file_options=None):
        if path in self.fail_paths:
            raise Exception(self.fail_paths[path])
        self.objects[path] = file
        self.options[path] = file_options or {}
        return {"path": path}

    def remove(self, paths):
        for path in paths:
            self.objects.pop(path, None)
        return [{"name": path} for path in paths]

    def get_public_url(self, path):
        return f"https://test-project.supabase.co/storage/v1/object/public/{self.name}/{path}"


class MockStorage:
    def __init__(self):
        self.buckets: dict[str, MockStorageBucket] = {}

    def from_(self, name: str) -> MockStorageBucket:
        return self.buckets.setdefault(name, MockStorageBucket(name))


class MockSupabaseClient:
    """
    Stateful mock Supabase client.

    Usage:
        mock_supabase.set_table_data("items", [{"riot_id": "3031", ...}])
        mock_supabase.fail("items", "upsert", "duplicate key value")
    """

    def __init__(self):
        self.tables: dict[str, list[dict]] = {}
        self.failures: dict[tuple, str] = {}
        self.calls: list[tuple] = []
        self.storage = MockStorage()
        self.lock = threading.Lock()

    def set_table_data(self, table_name: str, data: list):
        """Replace a table's rows."""
        self.tables[table_name] = [dict(row) for row in data]

    def rows(self, table_name: str) -> list[dict]:
        return self.tables.get(table_name, [])

    def fail(self, table_name: str, operation: str, message: str):
        """Make every <operation> on the table raise with message."""
        self.failures[(table_name, operation)] = message

    def table(self, name: str) -> MockSupabaseTable:
        return MockSupabaseTable(self, name)


# ===================
# FAKE DATA DRAGON
# ===================

class FakeRiotClient:
    """
    Data Dragon stand-in serving records per version.

    Usage:
        riot = FakeRiotClient({"16.1.1": {"3031": {...}}}, latest="16.1.1")
        riot.image_failures.add("3031")
    """

    def __init__(self, items_by_version: Optional[dict] = None, latest: str = "16.1.1"):
        self.items_by_version = items_by_version or {}
        self.versions = [latest] + [v for v in self.items_by_version if v != latest]
        self.image_failures: set[str] = set()
        self.version_calls = 0
        self.item_data_calls = 0
        self.fail_versions: Optional[str] = None

    def get_versions(self) -> list[str]:
        self.version_calls += 1
        if self.fail_versions:
            from exceptions import RiotAPIError
            raise RiotAPIError(self.fail_versions)
        return list(self.versions)

    def get_latest_version(self) -> str:
        return self.get_versions()[0]

    def fetch_item_data(self, version: str, locale: Optional[str] = None) -> dict:
        self.item_data_calls += 1
        data = self.items_by_version.get(version, {})
        return {riot_id: RiotItemRecord.from_riot(riot_id, item) for riot_id, item in data.items()}

    def get_item_image_url(self, version: str, riot_id: str) -> str:
        return f"https://ddragon.test/cdn/{version}/img/item/{riot_id}.png"

    def fetch_image(self, url: str) -> bytes:
        riot_id = url.rsplit("/", 1)[-1].split(".")[0]
        if riot_id in self.image_failures:
            from exceptions import RiotAPIError
            raise RiotAPIError("Data Dragon request failed: 404 Client Error", url=url)
        return f"png:{riot_id}".encode()


def fake_webp(data: bytes) -> bytes:
    """Image processor stand-in; avoids decoding real images."""
    return b"webp:" + data


# ===================
# FIXTURES
# ===================

@pytest.fixture
def mock_supabase() -> MockSupabaseClient:
    """
    Create a mock Supabase client.

    Usage:
        def test_something(mock_supabase):
            mock_supabase.set_table_data("items", [...])
    """
    return MockSupabaseClient()


@pytest.fixture
def fake_riot() -> FakeRiotClient:
    """Data Dragon stand-in with no items."""
    return FakeRiotClient()


@pytest.fixture
def fixed_clock():
    """
    Controllable clock.

    Usage:
        fixed_clock.now = fixed_clock.now + timedelta(seconds=61)
    """
    class Clock:
        def __init__(self):
            self.now = datetime(2026, 1, 8, 12, 0, 0, tzinfo=timezone.utc)

        def __call__(self) -> datetime:
            return self.now

    return Clock()


@pytest.fixture
def sync_service_factory(mock_supabase, fixed_clock):
    """
    Build a SyncService wired to the mock client and a FakeRiotClient.

    Usage:
        service = sync_service_factory(riot)
    """
    from integrations.storage import ItemImageStorage
    from services.item_service import ItemService
    from services.item_metadata_service import ItemMetadataService
    from services.manual_setting_service import ManualSettingService
    from services.patch_service import PatchService
    from services.sync_service import SyncService

    def build(riot: FakeRiotClient, batch_size: int = 5) -> SyncService:
        return SyncService(
            riot_client=riot,
            item_service=ItemService(client=mock_supabase),
            manual_setting_service=ManualSettingService(client=mock_supabase),
            metadata_service=ItemMetadataService(client=mock_supabase),
            patch_service=PatchService(riot_client=riot, client=mock_supabase, clock=fixed_clock),
            storage=ItemImageStorage(client=mock_supabase, bucket="item-images", cache_control="604800"),
            image_processor=fake_webp,
            batch_size=batch_size,
        )

    return build


# ===================
# API TEST CLIENT
# ===================

@pytest.fixture
def test_client_with_mock_db(mock_supabase):
    """
    Create FastAPI test client with mocked database.

    check_connection runs on startup; it is pointed at the mock.
    """
    from fastapi.testclient import TestClient
    from main import app

    with patch("config.database.get_supabase_client", return_value=mock_supabase):
        yield TestClient(app)
