"""Request lifecycle — the two stages the host pipeline calls on every request.

on_request_start runs before any route and may end the request early;
on_render runs while the page is rendered and returns what to add to it.
"""

import abc
from dataclasses import dataclass, field

from cookie_warning.config import CookieWarningConfig
from cookie_warning.context import RequestContext
from cookie_warning.services.banner import BannerRenderer
from cookie_warning.services.decisions import Decisions
from cookie_warning.services.dismissal import DismissalHandler, DismissalResult

SCRIPT_MODULE = "ext.CookieWarning"
STYLE_MODULE = "ext.CookieWarning.styles"
MOBILE_STYLE_MODULE = "ext.CookieWarning.mobile.styles"
GEO_SCRIPT_MODULE = "ext.CookieWarning.geolocation"
GEO_STYLE_MODULE = "ext.CookieWarning.geolocation.styles"

# Module name -> file under /static
MODULE_FILES = {
    SCRIPT_MODULE: "cookie_warning.js",
    STYLE_MODULE: "cookie_warning.css",
    MOBILE_STYLE_MODULE: "cookie_warning.mobile.css",
    GEO_SCRIPT_MODULE: "geolocation.js",
    GEO_STYLE_MODULE: "geolocation.css",
}


@dataclass
class PageAdditions:
    """Markup and assets to splice into a rendered page."""

    site_notice: str = ""
    scripts: list[str] = field(default_factory=list)
    styles: list[str] = field(default_factory=list)
    config_vars: dict = field(default_factory=dict)


class RequestLifecycle(abc.ABC):
    @abc.abstractmethod
    def on_request_start(self, ctx: RequestContext) -> DismissalResult | None:
        """Return a result to short-circuit the request, None to carry on."""

    @abc.abstractmethod
    def on_render(self, ctx: RequestContext) -> PageAdditions:
        """What this feature adds to the page being rendered."""


class CookieWarningLifecycle(RequestLifecycle):
    def __init__(self, config: CookieWarningConfig, decisions: Decisions,
                 renderer: BannerRenderer, dismissal: DismissalHandler):
        self.config = config
        self.decisions = decisions
        self.renderer = renderer
        self.dismissal = dismissal

    def on_request_start(self, ctx: RequestContext) -> DismissalResult | None:
        return self.dismissal.handle(ctx)

    def on_render(self, ctx: RequestContext) -> PageAdditions:
        verdict = self.decisions.verdict(ctx)
        additions = PageAdditions(config_vars=self.client_config_vars())
        if not verdict.show:
            return additions

        additions.site_notice = self.renderer.render(ctx, ctx.is_mobile)
        additions.scripts, additions.styles = self.page_modules(ctx, verdict.enable_geo_script)
        return additions

    def page_modules(self, ctx: RequestContext, geo: bool) -> tuple[list[str], list[str]]:
        scripts = [SCRIPT_MODULE]
        styles = [MOBILE_STYLE_MODULE if ctx.is_mobile else STYLE_MODULE]
        if geo:
            scripts.append(GEO_SCRIPT_MODULE)
            styles.append(GEO_STYLE_MODULE)
        return scripts, styles

    def client_config_vars(self) -> dict:
        """Values the client geolocation script needs, when it is shipped."""
        if not self.decisions.should_add_client_components():
            return {}
        return {
            "wgCookieWarningGeoIPServiceURL": self.config.geo_service_url or "",
            "wgCookieWarningForCountryCodes": dict(self.config.country_allow_list),
        }
