"""Preferences API — GET /api/v1/preferences for the current user."""

import logging

from fastapi import APIRouter, HTTPException, Request

from cookie_warning.context import build_context
from cookie_warning.services.preferences import PreferenceStoreError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1")


@router.get("/preferences")
def get_preferences(request: Request):
    ctx = build_context(request)
    if not ctx.user.is_logged_in:
        raise HTTPException(status_code=401, detail="Not logged in")

    try:
        prefs = request.app.state.preferences.get_all(ctx.user)
    except PreferenceStoreError as e:
        logger.error("Preference lookup failed: %s", e)
        raise HTTPException(status_code=503, detail="Preferences unavailable")

    return {"user": ctx.user.name, "preferences": prefs}
