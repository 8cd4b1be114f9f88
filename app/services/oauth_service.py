"""
OAuth Service - Google sign-in and account linking.

handle_oauth_login resolves a provider identity to a local user:
1. known provider account  -> refresh stored tokens and profile JSON
2. known email             -> link a new provider account, import profile gaps
3. otherwise               -> create a password-less user, account and profile
"""

import json
import logging
from typing import Any, Dict, Optional
from urllib.parse import urlencode

import httpx
from sqlalchemy import text

from app.core.config import DEFAULT_PROFILE_PICTURE, get_settings
from app.core.errors import AuthenticationError
from app.db.postgres import get_db_session
from app.utils.records import new_id

logger = logging.getLogger(__name__)

GOOGLE_AUTH_URL = "https://accounts.google.com/o/oauth2/v2/auth"
GOOGLE_TOKEN_URL = "https://oauth2.googleapis.com/token"
GOOGLE_USERINFO_URL = "https://openidconnect.googleapis.com/v1/userinfo"


# ============================================================
# ACCOUNT RESOLUTION
# ============================================================

def _get_oauth_account(db, provider: str, provider_user_id: str) -> Optional[dict]:
    result = db.execute(
        text("SELECT id, user_id FROM oauth_accounts WHERE provider = :provider AND provider_user_id = :pid"),
        {"provider": provider, "pid": provider_user_id}
    )
    row = result.mappings().fetchone()
    return dict(row) if row else None


def _create_oauth_account(db, user_id: str, provider: str, provider_user_id: str,
                          access_token: Optional[str], refresh_token: Optional[str], profile_data: dict) -> None:
    db.execute(
        text("""
            INSERT INTO oauth_accounts (id, user_id, provider, provider_user_id, access_token, refresh_token, profile_data)
            VALUES (:id, :uid, :provider, :pid, :access, :refresh, :profile)
        """),
        {
            "id": new_id(),
            "uid": user_id,
            "provider": provider,
            "pid": provider_user_id,
            "access": access_token,
            "refresh": refresh_token,
            "profile": json.dumps(profile_data),
        }
    )


def _import_profile(db, user_id: str, first_name: Optional[str], last_name: Optional[str],
                    bio: Optional[str], picture: Optional[str]) -> None:
    """Fill only the profile fields that are still empty."""
    result = db.execute(
        text("SELECT first_name, last_name, bio, pfp_link FROM profiles WHERE user_id = :uid"),
        {"uid": user_id}
    )
    profile = result.mappings().fetchone()

    if not profile:
        db.execute(
            text("""
                INSERT INTO profiles (user_id, first_name, last_name, bio, pfp_link)
                VALUES (:uid, :first_name, :last_name, :bio, :pfp)
            """),
            {"uid": user_id, "first_name": first_name or None, "last_name": last_name or None,
             "bio": bio or None, "pfp": picture or DEFAULT_PROFILE_PICTURE}
        )
        return

    updates = {}
    if not profile["first_name"] and first_name:
        updates["first_name"] = first_name
    if not profile["last_name"] and last_name:
        updates["last_name"] = last_name
    if not profile["bio"] and bio:
        updates["bio"] = bio
    if picture and profile["pfp_link"] in (None, "", DEFAULT_PROFILE_PICTURE):
        updates["pfp_link"] = picture

    if updates:
        assignments = ", ".join(f"{column} = :{column}" for column in updates)
        db.execute(text(f"UPDATE profiles SET {assignments} WHERE user_id = :uid"), {**updates, "uid": user_id})


def handle_oauth_login(
    provider: str,
    provider_user_id: str,
    email: str,
    first_name: Optional[str] = None,
    last_name: Optional[str] = None,
    bio: Optional[str] = None,
    picture: Optional[str] = None,
    access_token: Optional[str] = None,
    refresh_token: Optional[str] = None,
    profile_data: Optional[dict] = None,
) -> Dict[str, Any]:
    """
    Resolve a provider login to a local user.

    Returns:
        {"user": {"id", "email"}, "isNewUser": bool, "profileImported": bool}
    """
    if not provider_user_id or not email:
        raise AuthenticationError("OAuth profile is missing an id or email", code="OAUTH_FAILED")

    email = email.lower()
    profile_data = profile_data or {}

    with get_db_session() as db:
        account = _get_oauth_account(db, provider, provider_user_id)
        if account:
            db.execute(
                text("""
                    UPDATE oauth_accounts
                    SET access_token = :access, refresh_token = :refresh, profile_data = :profile,
                        updated_at = CURRENT_TIMESTAMP
                    WHERE id = :id
                """),
                {"access": access_token, "refresh": refresh_token,
                 "profile": json.dumps(profile_data), "id": account["id"]}
            )
            row = db.execute(
                text("SELECT u_id, email FROM users WHERE u_id = :id"), {"id": account["user_id"]}
            ).fetchone()
            logger.info("OAuth login via %s for existing account %s", provider, row[0])
            return {"user": {"id": row[0], "email": row[1]}, "isNewUser": False, "profileImported": False}

        row = db.execute(
            text("SELECT u_id, email FROM users WHERE LOWER(email) = :email"), {"email": email}
        ).fetchone()
        if row:
            user_id = row[0]
            _create_oauth_account(db, user_id, provider, provider_user_id, access_token, refresh_token, profile_data)
            _import_profile(db, user_id, first_name, last_name, bio, picture)
            logger.info("Linked %s account to existing user %s", provider, user_id)
            return {"user": {"id": user_id, "email": row[1]}, "isNewUser": False, "profileImported": True}

        user_id = new_id()
        db.execute(
            text("""
                INSERT INTO users (u_id, email, password, oauth_provider, oauth_provider_id)
                VALUES (:id, :email, NULL, :provider, :pid)
            """),
            {"id": user_id, "email": email, "provider": provider, "pid": provider_user_id}
        )
        _create_oauth_account(db, user_id, provider, provider_user_id, access_token, refresh_token, profile_data)
        _import_profile(db, user_id, first_name, last_name, bio, picture)
        logger.info("Created user %s from %s login", user_id, provider)
        return {"user": {"id": user_id, "email": email}, "isNewUser": True, "profileImported": True}


def get_provider_status() -> dict:
    settings = get_settings()
    return {
        "googleConfigured": settings.google_configured,
        "linkedinConfigured": False,
        "githubConfigured": False,
    }


# ============================================================
# GOOGLE CLIENT
# ============================================================

class GoogleOAuthClient:
    """Authorization-code flow against Google's OpenID endpoints."""

    def __init__(self, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.settings = get_settings()
        self.transport = transport

    def authorization_url(self, state: str) -> str:
        params = {
            "client_id": self.settings.google_client_id,
            "redirect_uri": self.settings.google_callback_url,
            "response_type": "code",
            "scope": "openid email profile",
            "state": state,
            "access_type": "offline",
            "prompt": "select_account",
        }
        return f"{GOOGLE_AUTH_URL}?{urlencode(params)}"

    async def fetch_profile(self, code: str) -> dict:
        """
        Exchange the code and fetch userinfo.

        Returns the keyword arguments for handle_oauth_login.
        """
        try:
            async with httpx.AsyncClient(timeout=10.0, transport=self.transport) as client:
                token_response = await client.post(GOOGLE_TOKEN_URL, data={
                    "code": code,
                    "client_id": self.settings.google_client_id,
                    "client_secret": self.settings.google_client_secret,
                    "redirect_uri": self.settings.google_callback_url,
                    "grant_type": "authorization_code",
                })
                if token_response.status_code != 200:
                    logger.error("Google token exchange failed: %s", token_response.text)
                    raise AuthenticationError("OAuth token exchange failed", code="OAUTH_FAILED")
                tokens = token_response.json()

                info_response = await client.get(
                    GOOGLE_USERINFO_URL,
                    headers={"Authorization": f"Bearer {tokens['access_token']}"}
                )
                if info_response.status_code != 200:
                    logger.error("Google userinfo request failed: %s", info_response.text)
                    raise AuthenticationError("OAuth profile request failed", code="OAUTH_FAILED")
                info = info_response.json()
        except httpx.RequestError as e:
            logger.error("Could not reach Google OAuth: %s", e)
            raise AuthenticationError("OAuth provider unavailable", code="OAUTH_FAILED")

        return {
            "provider": "google",
            "provider_user_id": info.get("sub"),
            "email": info.get("email"),
            "first_name": info.get("given_name"),
            "last_name": info.get("family_name"),
            "picture": info.get("picture"),
            "access_token": tokens.get("access_token"),
            "refresh_token": tokens.get("refresh_token"),
            "profile_data": info,
        }


def get_google_client() -> GoogleOAuthClient:
    return GoogleOAuthClient()
