"""GeoLocation — map a visitor's IP address to a region code.

Lookups never raise: anything that goes wrong yields UNKNOWN_REGION, which
never matches a configured country allow-list.
"""

import abc
import logging
import threading
import time

import requests

from cookie_warning.config import CookieWarningConfig, GeoLookupMode

logger = logging.getLogger(__name__)

UNKNOWN_REGION = "unknown"


class TTLCache:
    """Tiny in-process key -> value cache with per-entry expiry.

    Expired entries are swept on write, at most once per ttl, so addresses
    that are never looked up again do not pile up.
    """

    def __init__(self, ttl: float, clock=time.monotonic):
        self.ttl = ttl
        self._clock = clock
        self._entries: dict[str, tuple[float, str]] = {}
        self._lock = threading.Lock()
        self._next_sweep = clock() + ttl

    def get(self, key: str) -> str | None:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            expires_at, value = entry
            if self._clock() >= expires_at:
                del self._entries[key]
                return None
            return value

    def set(self, key: str, value: str) -> None:
        with self._lock:
            now = self._clock()
            if now >= self._next_sweep:
                self._sweep(now)
            self._entries[key] = (now + self.ttl, value)

    def _sweep(self, now: float) -> None:
        expired = [k for k, (expires_at, _) in self._entries.items() if now >= expires_at]
        for k in expired:
            del self._entries[k]
        self._next_sweep = now + self.ttl

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


class GeoLocation(abc.ABC):
    @abc.abstractmethod
    def locate(self, ip: str) -> str:
        """Region code for the address, UNKNOWN_REGION when it cannot be resolved."""


class NoopGeoLocation(GeoLocation):
    """Used when no lookup backend is configured."""

    def locate(self, ip: str) -> str:
        return UNKNOWN_REGION


class HttpGeoLocation(GeoLocation):
    """Asks a freegeoip-style service: GET {service_url}/{ip} -> {"country_code": ...}."""

    def __init__(self, service_url: str, timeout: float = 1.0, cache: TTLCache | None = None):
        self.service_url = service_url.rstrip("/")
        self.timeout = timeout
        self.cache = cache if cache is not None else TTLCache(3600)

    def locate(self, ip: str) -> str:
        if not ip:
            return UNKNOWN_REGION

        cached = self.cache.get(ip)
        if cached is not None:
            return cached

        code = self._lookup(ip)
        if code != UNKNOWN_REGION:
            self.cache.set(ip, code)
        return code

    def _lookup(self, ip: str) -> str:
        url = f"{self.service_url}/{ip}"
        try:
            resp = requests.get(url, timeout=self.timeout)
            resp.raise_for_status()
            data = resp.json()
        except requests.RequestException as e:
            logger.warning("GeoIP lookup for %s failed: %s", ip, e)
            return UNKNOWN_REGION
        except ValueError as e:
            logger.warning("GeoIP service returned invalid JSON for %s: %s", ip, e)
            return UNKNOWN_REGION

        code = data.get("country_code") if isinstance(data, dict) else None
        if not isinstance(code, str) or not code.strip():
            logger.debug("GeoIP response for %s has no country_code", ip)
            return UNKNOWN_REGION
        return code.strip().upper()


def make_geolocation(config: CookieWarningConfig) -> GeoLocation:
    """Pick the resolver for this deployment."""
    if config.geo_lookup_mode == GeoLookupMode.HTTP and config.geo_service_url:
        return HttpGeoLocation(
            config.geo_service_url,
            timeout=config.geo_timeout,
            cache=TTLCache(config.geo_cache_ttl),
        )
    if config.geo_lookup_mode == GeoLookupMode.HTTP:
        logger.warning("GeoIP lookup mode is 'http' but no service URL is set; lookups disabled")
    return NoopGeoLocation()
