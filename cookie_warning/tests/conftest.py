"""Shared fixtures for Cookie Warning tests.

Provides:
- fake_db: patches supabase_client with an in-memory fake
- make_client: builds a TestClient for an app with the given settings
- StubGeoLocation and make_config helpers
"""

import os
import uuid
from collections import defaultdict
from unittest.mock import patch, MagicMock

import pytest

# Set env vars before any cookie_warning imports
os.environ.setdefault("SUPABASE_URL", "https://fake.supabase.co")
os.environ.setdefault("SUPABASE_SERVICE_KEY", "fake-key")

from cookie_warning.config import CookieWarningConfig, GeoLookupMode
from cookie_warning.context import RequestContext, User
from cookie_warning.services.geolocation import GeoLocation, UNKNOWN_REGION


# ---------------------------------------------------------------------------
# In-memory fake Supabase
# ---------------------------------------------------------------------------

class FakeQueryResult:
    def __init__(self, data=None, count=None):
        self.data = data or []
        self.count = count


class FakeQueryBuilder:
    """Mimics the supabase-py query builder chain."""

    def __init__(self, store, table_name):
        self._store = store
        self._table = table_name
        self._filters = []
        self._limit_val = None
        self._upsert_data = None
        self._upsert_conflict = None

    def select(self, columns="*", count=None):
        return self

    def upsert(self, data, on_conflict=None):
        self._upsert_data = data
        self._upsert_conflict = on_conflict
        return self

    def eq(self, col, val):
        self._filters.append((col, val))
        return self

    def limit(self, n):
        self._limit_val = n
        return self

    def _match(self, row):
        return all(row.get(col) == val for col, val in self._filters)

    def execute(self):
        table = self._store[self._table]

        if self._upsert_data is not None:
            row = dict(self._upsert_data)
            if "id" not in row:
                row["id"] = str(uuid.uuid4())
            if self._upsert_conflict:
                conflict_cols = [c.strip() for c in self._upsert_conflict.split(",")]
                for existing in table:
                    if all(existing.get(c) == row.get(c) for c in conflict_cols):
                        row.pop("id")
                        existing.update(row)
                        return FakeQueryResult(data=[existing])
            table.append(row)
            return FakeQueryResult(data=[row])

        rows = [r for r in table if self._match(r)]
        if self._limit_val is not None:
            rows = rows[:self._limit_val]
        return FakeQueryResult(data=rows)


class FakeDB:
    """In-memory store keyed by table name."""

    def __init__(self):
        self.store = defaultdict(list)

    def table(self, name):
        return FakeQueryBuilder(self.store, name)


@pytest.fixture
def fake_db():
    """Provides a clean in-memory DB and patches supabase_client._table."""
    db = FakeDB()

    with patch("cookie_warning.supabase_client._table", side_effect=db.table):
        with patch("cookie_warning.supabase_client.get_client", return_value=MagicMock()):
            yield db


# ---------------------------------------------------------------------------
# Geolocation stub and factories
# ---------------------------------------------------------------------------

class StubGeoLocation(GeoLocation):
    """Resolves every address to a fixed region and records the calls."""

    def __init__(self, region=UNKNOWN_REGION):
        self.region = region
        self.calls = []

    def locate(self, ip):
        self.calls.append(ip)
        return self.region


def make_config(**overrides):
    defaults = {
        "enabled": True,
        "more_info_url": None,
        "geo_service_url": None,
        "geo_lookup_mode": GeoLookupMode.NONE,
        "country_allow_list": {},
        "mobile_detect_ua": True,
    }
    defaults.update(overrides)
    return CookieWarningConfig(**defaults)


def make_context(**overrides):
    defaults = {
        "method": "GET",
        "url": "/wiki/Main_Page",
        "ip": "8.8.8.8",
        "user": User(),
        "cookies": {},
        "form": {},
        "is_mobile": False,
    }
    defaults.update(overrides)
    return RequestContext(**defaults)


@pytest.fixture
def make_client(fake_db):
    """Factory for a TestClient around an app built from the given settings."""
    from fastapi.testclient import TestClient

    from cookie_warning.app import create_app
    from cookie_warning.services.messages import MessageSource

    clients = []

    def _make(geolocation=None, messages=None, **config_overrides):
        app = create_app(
            config=make_config(**config_overrides),
            geolocation=geolocation or StubGeoLocation(),
            messages=messages or MessageSource(),
        )
        c = TestClient(app)
        clients.append(c)
        return c

    yield _make

    for c in clients:
        c.close()
