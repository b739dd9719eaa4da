"""Cookie Warning configuration — loaded from environment variables."""

import enum
import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

load_dotenv(Path(__file__).resolve().parent.parent / ".env")

PACKAGE_DIR = Path(__file__).resolve().parent

# Jinja2 templates and client assets for the page pipeline
WEB_TEMPLATES_DIR = PACKAGE_DIR / "templates"
STATIC_DIR = PACKAGE_DIR / "static"
MESSAGES_DIR = PACKAGE_DIR / "messages"

# Supabase (per-user preferences)
SUPABASE_URL = os.environ.get("SUPABASE_URL", "")
SUPABASE_SERVICE_KEY = os.environ.get("SUPABASE_SERVICE_KEY", "")

# Header set by the fronting proxy once it has authenticated the user
AUTH_USER_HEADER = os.environ.get("AUTH_USER_HEADER", "X-Remote-User")

# Server
HOST = os.environ.get("HOST", "0.0.0.0")
PORT = int(os.environ.get("PORT", "8000"))
LOG_LEVEL = os.environ.get("LOG_LEVEL", "info")

# Cookie / preference name shared by the dismissal handler and the decisions
DISMISSED_NAME = "cookiewarning_dismissed"

# Form field posted by the banner's dismiss button
DISMISS_FIELD = "disablecookiewarning"

ONE_YEAR = 365 * 24 * 60 * 60


class GeoLookupMode(str, enum.Enum):
    NONE = "none"
    HTTP = "http"


@dataclass(frozen=True)
class CookieWarningConfig:
    """Typed settings for the cookie warning feature."""

    enabled: bool = False
    more_info_url: str | None = None
    geo_service_url: str | None = None
    geo_lookup_mode: GeoLookupMode = GeoLookupMode.NONE
    country_allow_list: dict[str, str] = field(default_factory=dict)
    geo_cache_ttl: int = 3600
    geo_timeout: float = 1.0
    cookie_max_age: int = ONE_YEAR
    messages_path: Path | None = None
    mobile_detect_ua: bool = True

    @property
    def geo_targeting(self) -> bool:
        return bool(self.country_allow_list)


def _env_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    value = raw.strip().lower()
    if value in ("1", "true", "yes", "on"):
        return True
    if value in ("0", "false", "no", "off"):
        return False
    logger.warning("Ignoring invalid boolean for %s: %r", name, raw)
    return default


def _env_number(name: str, default, cast):
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        value = cast(raw)
    except ValueError:
        logger.warning("Ignoring invalid number for %s: %r", name, raw)
        return default
    if value < 0:
        logger.warning("Ignoring negative value for %s: %r", name, raw)
        return default
    return value


def _env_country_codes(name: str) -> dict[str, str]:
    """Parse the allow-list, a JSON object of region code -> label."""
    raw = os.environ.get(name, "").strip()
    if not raw:
        return {}
    try:
        parsed = json.loads(raw)
    except json.JSONDecodeError:
        logger.warning("Ignoring %s: not valid JSON", name)
        return {}
    # The wiki convention of "false" for "not configured"
    if parsed is False or parsed is None:
        return {}
    if not isinstance(parsed, dict):
        logger.warning("Ignoring %s: expected a JSON object", name)
        return {}
    return {str(code).upper(): str(label) for code, label in parsed.items()}


def _env_lookup_mode(name: str) -> GeoLookupMode:
    raw = os.environ.get(name, "").strip().lower()
    if not raw:
        return GeoLookupMode.NONE
    try:
        return GeoLookupMode(raw)
    except ValueError:
        logger.warning("Unknown geolocation lookup mode %r, using 'none'", raw)
        return GeoLookupMode.NONE


def load_config() -> CookieWarningConfig:
    """Build the config from the current environment."""
    messages_path = os.environ.get("COOKIE_WARNING_MESSAGES_PATH", "").strip()
    return CookieWarningConfig(
        enabled=_env_bool("COOKIE_WARNING_ENABLED", False),
        more_info_url=os.environ.get("COOKIE_WARNING_MORE_URL", "").strip() or None,
        geo_service_url=(
            os.environ.get("COOKIE_WARNING_GEOIP_SERVICE_URL", "").strip().rstrip("/") or None
        ),
        geo_lookup_mode=_env_lookup_mode("COOKIE_WARNING_GEOIP_LOOKUP"),
        country_allow_list=_env_country_codes("COOKIE_WARNING_FOR_COUNTRY_CODES"),
        geo_cache_ttl=_env_number("COOKIE_WARNING_GEO_CACHE_TTL", 3600, int),
        geo_timeout=_env_number("COOKIE_WARNING_GEO_TIMEOUT", 1.0, float),
        cookie_max_age=_env_number("COOKIE_WARNING_COOKIE_MAX_AGE", ONE_YEAR, int),
        messages_path=Path(messages_path) if messages_path else None,
        mobile_detect_ua=_env_bool("COOKIE_WARNING_MOBILE_DETECT_UA", True),
    )
