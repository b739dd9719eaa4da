"""FastAPI application factory."""

import logging

from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles

from cookie_warning.config import STATIC_DIR, CookieWarningConfig, load_config
from cookie_warning.lifecycle import CookieWarningLifecycle, RequestLifecycle
from cookie_warning.middleware import LifecycleMiddleware
from cookie_warning.routers import pages, preferences
from cookie_warning.services.banner import BannerRenderer
from cookie_warning.services.decisions import Decisions
from cookie_warning.services.dismissal import DismissalHandler
from cookie_warning.services.geolocation import GeoLocation, make_geolocation
from cookie_warning.services.messages import MessageSource
from cookie_warning.services.preferences import PreferenceStore

logger = logging.getLogger(__name__)


def build_lifecycle(config: CookieWarningConfig, geolocation: GeoLocation,
                    prefs: PreferenceStore, messages: MessageSource) -> RequestLifecycle:
    """Wire the services together once, at startup."""
    return CookieWarningLifecycle(
        config,
        Decisions(config, geolocation, prefs),
        BannerRenderer(config, messages),
        DismissalHandler(prefs),
    )


def create_app(config: CookieWarningConfig | None = None,
               geolocation: GeoLocation | None = None,
               prefs: PreferenceStore | None = None,
               messages: MessageSource | None = None) -> FastAPI:
    config = config or load_config()
    geolocation = geolocation or make_geolocation(config)
    prefs = prefs or PreferenceStore()
    messages = messages or MessageSource(config.messages_path)

    app = FastAPI(
        title="Cookie Warning",
        description="Cookie notice banner for the wiki, with per-user dismissal.",
        version="1.0.0",
        docs_url="/api/v1/docs",
        redoc_url=None,
        openapi_url="/api/v1/openapi.json",
    )

    app.state.config = config
    app.state.preferences = prefs
    app.state.lifecycle = build_lifecycle(config, geolocation, prefs, messages)

    logger.info(
        "Cookie warning %s (geo-targeting: %s, lookup: %s)",
        "enabled" if config.enabled else "disabled",
        ", ".join(sorted(config.country_allow_list)) or "off",
        type(geolocation).__name__,
    )

    app.add_middleware(LifecycleMiddleware)

    # Static files
    app.mount("/static", StaticFiles(directory=str(STATIC_DIR)), name="static")

    @app.get("/health", include_in_schema=False)
    async def health():
        return {"status": "ok"}

    app.include_router(pages.router, include_in_schema=False)
    app.include_router(preferences.router)

    return app
