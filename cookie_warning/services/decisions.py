"""Should this request see the cookie warning?"""

import logging
from dataclasses import dataclass

from cookie_warning.config import DISMISSED_NAME, CookieWarningConfig
from cookie_warning.context import RequestContext
from cookie_warning.services.geolocation import GeoLocation
from cookie_warning.services.preferences import PreferenceStore, PreferenceStoreError, is_truthy

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Verdict:
    show: bool
    enable_geo_script: bool


class Decisions:
    def __init__(self, config: CookieWarningConfig, geolocation: GeoLocation,
                 preferences: PreferenceStore):
        self.config = config
        self.geolocation = geolocation
        self.preferences = preferences

    def should_show_cookie_warning(self, ctx: RequestContext) -> bool:
        if not self.config.enabled:
            return False

        if self._is_dismissed(ctx):
            return False

        if self.config.geo_targeting:
            region = self.geolocation.locate(ctx.ip)
            return region in self.config.country_allow_list

        return True

    def should_add_client_components(self) -> bool:
        """Ship the client-side geolocation check only when geo-targeting is on."""
        return self.config.geo_targeting

    def verdict(self, ctx: RequestContext) -> Verdict:
        return Verdict(
            show=self.should_show_cookie_warning(ctx),
            enable_geo_script=self.should_add_client_components(),
        )

    def _is_dismissed(self, ctx: RequestContext) -> bool:
        if is_truthy(ctx.cookies.get(DISMISSED_NAME)):
            return True
        if not ctx.user.is_logged_in:
            return False
        try:
            return self.preferences.is_set(ctx.user, DISMISSED_NAME)
        except PreferenceStoreError as e:
            # Hide rather than nag a user whose dismissal we cannot read
            logger.warning("Treating cookie warning as dismissed: %s", e)
            return True
