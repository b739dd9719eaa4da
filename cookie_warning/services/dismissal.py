"""Record that a visitor closed the cookie warning."""

import logging
from dataclasses import dataclass

from cookie_warning.config import DISMISS_FIELD, DISMISSED_NAME
from cookie_warning.context import RequestContext
from cookie_warning.services.preferences import PreferenceStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DismissalResult:
    """What the host must send back: a redirect, plus a cookie for anonymous visitors."""

    redirect_url: str
    set_cookie: bool = False


class DismissalHandler:
    def __init__(self, preferences: PreferenceStore):
        self.preferences = preferences

    def is_dismiss_request(self, ctx: RequestContext) -> bool:
        return ctx.was_posted and bool(ctx.form.get(DISMISS_FIELD))

    def handle(self, ctx: RequestContext) -> DismissalResult | None:
        """Returns None when the request is not a dismissal.

        Raises PreferenceStoreError when a logged-in user's choice cannot be saved.
        """
        if not self.is_dismiss_request(ctx):
            return None

        if ctx.user.is_logged_in:
            self.preferences.save(ctx.user, DISMISSED_NAME, "1")
            return DismissalResult(redirect_url=ctx.url)

        logger.debug("Anonymous dismissal from %s", ctx.ip)
        return DismissalResult(redirect_url=ctx.url, set_cookie=True)
