"""Runs the request-start stage before any route sees the request."""

import logging

from fastapi.responses import PlainTextResponse, RedirectResponse
from starlette.concurrency import run_in_threadpool
from starlette.exceptions import HTTPException
from starlette.formparsers import MultiPartException
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

from cookie_warning.config import DISMISSED_NAME
from cookie_warning.context import build_context
from cookie_warning.services.preferences import PreferenceStoreError

logger = logging.getLogger(__name__)

_FORM_TYPES = ("application/x-www-form-urlencoded", "multipart/form-data")


async def _read_form(request: Request) -> dict[str, str]:
    if request.method != "POST":
        return {}
    content_type = request.headers.get("content-type", "")
    if not content_type.startswith(_FORM_TYPES):
        return {}
    # Cache the body first so the route can still read it after us
    await request.body()
    try:
        form = await request.form()
    except (HTTPException, MultiPartException) as e:
        logger.debug("Ignoring unparseable form body on %s: %s", request.url.path, e)
        return {}
    return {k: v for k, v in form.items() if isinstance(v, str)}


class LifecycleMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        if request.url.path.startswith("/static"):
            return await call_next(request)

        lifecycle = request.app.state.lifecycle
        config = request.app.state.config
        ctx = build_context(request, await _read_form(request), config.mobile_detect_ua)

        try:
            result = await run_in_threadpool(lifecycle.on_request_start, ctx)
        except PreferenceStoreError as e:
            logger.error("Cookie warning dismissal failed: %s", e)
            return PlainTextResponse("Could not save your choice, please try again.",
                                     status_code=500)

        if result is None:
            return await call_next(request)

        # 303 so the browser follows up with a plain GET
        response = RedirectResponse(result.redirect_url, status_code=303)
        if result.set_cookie:
            response.set_cookie(
                DISMISSED_NAME, "true",
                max_age=config.cookie_max_age,
                path="/",
                httponly=True,
                samesite="lax",
            )
        return response
