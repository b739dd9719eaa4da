"""Per-request context handed to the cookie warning services.

Built once per request by the host adapter from the Starlette request, so the
services never touch the web framework directly.
"""

import re
from dataclasses import dataclass, field

from starlette.requests import Request

from cookie_warning.config import AUTH_USER_HEADER

_MOBILE_UA_RE = re.compile(r"Mobi|Android|iPhone|iPod|Opera Mini|IEMobile", re.IGNORECASE)


@dataclass(frozen=True)
class User:
    name: str | None = None

    @property
    def is_logged_in(self) -> bool:
        return bool(self.name)


ANONYMOUS = User()


@dataclass
class RequestContext:
    method: str = "GET"
    url: str = "/"
    ip: str = ""
    user: User = ANONYMOUS
    cookies: dict[str, str] = field(default_factory=dict)
    form: dict[str, str] = field(default_factory=dict)
    is_mobile: bool = False

    @property
    def was_posted(self) -> bool:
        return self.method.upper() == "POST"


def request_url(request: Request) -> str:
    """Path plus query string, as the browser asked for it."""
    url = request.url.path
    if request.url.query:
        url += "?" + request.url.query
    return url


def is_mobile_view(request: Request, detect_ua: bool = True) -> bool:
    """Mobile view: explicit useformat, the sticky mf_useformat cookie, or the UA."""
    useformat = request.query_params.get("useformat", "").lower()
    if useformat:
        return useformat == "mobile"
    if request.cookies.get("mf_useformat") == "true":
        return True
    if detect_ua:
        return bool(_MOBILE_UA_RE.search(request.headers.get("user-agent", "")))
    return False


def build_context(request: Request, form: dict[str, str] | None = None,
                  detect_ua: bool = True) -> RequestContext:
    user_name = request.headers.get(AUTH_USER_HEADER, "").strip()
    return RequestContext(
        method=request.method,
        url=request_url(request),
        ip=request.client.host if request.client else "",
        user=User(user_name) if user_name else ANONYMOUS,
        cookies=dict(request.cookies),
        form=form or {},
        is_mobile=is_mobile_view(request, detect_ua),
    )
