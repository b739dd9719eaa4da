"""Supabase connection and query helpers for the user preference table."""

import threading
from datetime import datetime, timezone

from supabase import Client, create_client

from cookie_warning.config import SUPABASE_SERVICE_KEY, SUPABASE_URL

PREFERENCES_TABLE = "cookiewarning_user_preferences"

_client: Client | None = None
_client_lock = threading.Lock()


def get_client() -> Client:
    """Return the Supabase client singleton (thread-safe)."""
    global _client
    if _client is None:
        with _client_lock:
            if _client is None:
                if not SUPABASE_URL or not SUPABASE_SERVICE_KEY:
                    raise RuntimeError("SUPABASE_URL and SUPABASE_SERVICE_KEY must be set")
                _client = create_client(SUPABASE_URL, SUPABASE_SERVICE_KEY)
    return _client


# ---------------------------------------------------------------------------
# Generic helpers
# ---------------------------------------------------------------------------

def _table(name: str):
    """Return a table query builder."""
    return get_client().table(name)


def upsert(table: str, data: dict, on_conflict: str = "") -> dict:
    """Upsert a row and return it."""
    if on_conflict:
        q = _table(table).upsert(data, on_conflict=on_conflict)
    else:
        q = _table(table).upsert(data)
    result = q.execute()
    return result.data[0] if result.data else {}


def select(table: str, columns: str = "*", match: dict | None = None,
           limit: int | None = None) -> list[dict]:
    """Select rows with optional filtering."""
    q = _table(table).select(columns)
    if match:
        for k, v in match.items():
            q = q.eq(k, v)
    if limit:
        q = q.limit(limit)
    result = q.execute()
    return result.data or []


def select_one(table: str, columns: str = "*", match: dict | None = None) -> dict | None:
    """Select a single row."""
    rows = select(table, columns, match, limit=1)
    return rows[0] if rows else None


# ---------------------------------------------------------------------------
# User preferences
# ---------------------------------------------------------------------------

def get_user_preferences(user_name: str) -> dict[str, str]:
    """All stored preferences of a user, as name -> value."""
    rows = select(PREFERENCES_TABLE, match={"user_name": user_name})
    return {row["name"]: row["value"] for row in rows}


def get_user_preference(user_name: str, name: str) -> str | None:
    row = select_one(PREFERENCES_TABLE, match={"user_name": user_name, "name": name})
    return row["value"] if row else None


def set_user_preference(user_name: str, name: str, value: str) -> dict:
    """Create or overwrite a single preference."""
    return upsert(PREFERENCES_TABLE, {
        "user_name": user_name,
        "name": name,
        "value": value,
        "updated_at": datetime.now(timezone.utc).isoformat(),
    }, on_conflict="user_name,name")
