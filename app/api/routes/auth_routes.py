"""
OAuth Routes

GET /auth/google - Redirect to Google's consent screen
GET /auth/google/callback - Finish Google login and redirect to the frontend
GET /auth/status - Which providers are configured
"""

import logging
import secrets
from typing import Optional

from fastapi import APIRouter, Request
from fastapi.responses import RedirectResponse

from app.core.auth import start_session
from app.core.config import get_settings
from app.core.errors import AppError, ValidationError, ok
from app.services.oauth_service import get_google_client, get_provider_status, handle_oauth_login

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["OAuth"])

settings = get_settings()

STATE_KEY = "oauth_state"


def _failure_redirect() -> RedirectResponse:
    return RedirectResponse(f"{settings.frontend_url}/login?error=oauth_failed", status_code=302)


@router.get("/google")
async def google_login(request: Request):
    """Start the Google authorization-code flow."""
    if not settings.google_configured:
        raise ValidationError("Google OAuth is not configured", code="OAUTH_NOT_CONFIGURED")
    state = secrets.token_urlsafe(24)
    request.session[STATE_KEY] = state
    return RedirectResponse(get_google_client().authorization_url(state), status_code=302)


@router.get("/google/callback")
async def google_callback(
    request: Request,
    code: Optional[str] = None,
    state: Optional[str] = None,
    error: Optional[str] = None,
):
    expected = request.session.pop(STATE_KEY, None)
    if error or not code or not state or not expected or not secrets.compare_digest(state, expected):
        logger.warning("Rejected Google OAuth callback (error=%s)", error)
        return _failure_redirect()

    try:
        profile = await get_google_client().fetch_profile(code)
        result = handle_oauth_login(**profile)
    except AppError as e:
        logger.error("Google OAuth login failed: %s", e.message)
        return _failure_redirect()

    start_session(request, result["user"]["id"], result["user"]["email"])
    return RedirectResponse(
        f"{settings.frontend_url}/dashboard?oauth=success&provider=google", status_code=302
    )


@router.get("/status")
async def oauth_status():
    return ok(get_provider_status())
