"""Banner markup for the site notice area.

The class names and the dismiss field name are relied on by the skin
styles, the client scripts and the dismissal handler. Keep them stable.
"""

from html import escape

from cookie_warning.config import DISMISS_FIELD, CookieWarningConfig
from cookie_warning.context import RequestContext
from cookie_warning.services.messages import MessageSource

NBSP = "\u00a0"
COOKIE = "\U0001f36a"

# Checked in this order after the config value
MORE_LINK_MESSAGES = ("cookiewarning-more-link", "cookie-policy-link")


def _attrs(attrs: dict[str, str]) -> str:
    return "".join(f' {name}="{escape(value)}"' for name, value in attrs.items())


def element(tag: str, attrs: dict[str, str] | None = None, text: str = "") -> str:
    return f"<{tag}{_attrs(attrs or {})}>{escape(text, quote=False)}</{tag}>"


class BannerRenderer:
    def __init__(self, config: CookieWarningConfig, messages: MessageSource):
        self.config = config
        self.messages = messages

    def get_more_link(self) -> str | None:
        """Target of the "More information" link, or None when nothing is set."""
        if self.config.more_info_url:
            return self.config.more_info_url
        for key in MORE_LINK_MESSAGES:
            msg = self.messages.get(key)
            if msg.exists() and not msg.is_disabled():
                return msg.text()
        return None

    def render(self, ctx: RequestContext | None = None, is_mobile: bool | None = None) -> str:
        """Banner markup. is_mobile defaults to the request's mobile view."""
        if is_mobile is None:
            is_mobile = bool(ctx and ctx.is_mobile)

        more_link = self.get_more_link()
        more = ""
        if more_link:
            more = NBSP + element(
                "a", {"href": more_link}, self.messages.text("cookiewarning-moreinfo-label"),
            )

        submit = "<input" + _attrs({
            "name": DISMISS_FIELD,
            "class": "mw-cookiewarning-dismiss mw-ui-button",
            "type": "submit",
            "value": self.messages.text("cookiewarning-ok-label"),
        }) + "/>"
        form = '<form method="POST">' + submit + "</form>"

        image = element("div", {"class": "mw-cookiewarning-cimage"}, COOKIE) if is_mobile else ""

        # banner-container marks this as a banner for mobile skins
        return (
            '<div class="mw-cookiewarning-container banner-container">'
            '<div class="mw-cookiewarning-text">'
            + image
            + element("span", {}, self.messages.text("cookiewarning-info"))
            + more
            + "</div>"
            + form
            + "</div>"
        )
