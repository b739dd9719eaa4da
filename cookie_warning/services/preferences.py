"""Per-user preferences backed by Supabase."""

import logging

from cookie_warning import supabase_client as db
from cookie_warning.config import DISMISSED_NAME
from cookie_warning.context import User

logger = logging.getLogger(__name__)

# Registered preferences and their defaults
DEFAULT_PREFERENCES = {
    DISMISSED_NAME: "0",
}


class PreferenceStoreError(Exception):
    """Reading or writing a user preference failed."""


def is_truthy(value: str | None) -> bool:
    return value not in (None, "", "0", "false")


class PreferenceStore:
    def get_all(self, user: User) -> dict[str, str]:
        """Stored preferences merged over the registered defaults."""
        prefs = dict(DEFAULT_PREFERENCES)
        if not user.is_logged_in:
            return prefs
        try:
            prefs.update(db.get_user_preferences(user.name))
        except Exception as e:
            raise PreferenceStoreError(f"Could not read preferences of {user.name}: {e}") from e
        return prefs

    def get(self, user: User, name: str) -> str | None:
        if not user.is_logged_in:
            return DEFAULT_PREFERENCES.get(name)
        try:
            value = db.get_user_preference(user.name, name)
        except Exception as e:
            raise PreferenceStoreError(f"Could not read {name} of {user.name}: {e}") from e
        return DEFAULT_PREFERENCES.get(name) if value is None else value

    def is_set(self, user: User, name: str) -> bool:
        return is_truthy(self.get(user, name))

    def save(self, user: User, name: str, value: str) -> None:
        if not user.is_logged_in:
            raise PreferenceStoreError("Anonymous users have no stored preferences")
        try:
            db.set_user_preference(user.name, name, value)
        except Exception as e:
            raise PreferenceStoreError(f"Could not save {name} for {user.name}: {e}") from e
        logger.info("Saved preference %s=%s for %s", name, value, user.name)
