import asyncio

import httpx
import pytest
from sqlalchemy import text

from app.core.errors import AuthenticationError
from app.db.postgres import get_db_session
from app.services.oauth_service import (
    GOOGLE_TOKEN_URL, GOOGLE_USERINFO_URL, GoogleOAuthClient, handle_oauth_login,
)
from conftest import register

GOOGLE_PROFILE = dict(
    provider="google",
    provider_user_id="google-123",
    email="Jane@Example.com",
    first_name="Janet",
    last_name="Doe",
    picture="https://lh3.googleusercontent.com/a/photo.jpg",
    access_token="access-1",
    refresh_token="refresh-1",
    profile_data={"sub": "google-123"},
)


def fetch_row(sql, **params):
    with get_db_session() as db:
        return db.execute(text(sql), params).mappings().fetchone()


def test_first_login_creates_user_without_password():
    result = handle_oauth_login(**GOOGLE_PROFILE)
    assert result["isNewUser"] is True
    assert result["profileImported"] is True
    assert result["user"]["email"] == "jane@example.com"

    user = fetch_row("SELECT * FROM users WHERE u_id = :id", id=result["user"]["id"])
    assert user["password"] is None
    assert user["oauth_provider"] == "google"

    profile = fetch_row("SELECT * FROM profiles WHERE user_id = :id", id=result["user"]["id"])
    assert profile["first_name"] == "Janet"
    assert profile["pfp_link"] == GOOGLE_PROFILE["picture"]
    assert profile["state"] is None


def test_login_links_existing_email_and_fills_gaps(client):
    user_id = register(client, firstName="Jane").json()["data"]["user"]["id"]

    result = handle_oauth_login(**GOOGLE_PROFILE)
    assert result == {"user": {"id": user_id, "email": "jane@example.com"},
                      "isNewUser": False, "profileImported": True}

    profile = fetch_row("SELECT * FROM profiles WHERE user_id = :id", id=user_id)
    assert profile["first_name"] == "Jane"
    assert profile["last_name"] == "Doe"
    assert profile["pfp_link"] == GOOGLE_PROFILE["picture"]

    account = fetch_row("SELECT * FROM oauth_accounts WHERE user_id = :id", id=user_id)
    assert account["provider_user_id"] == "google-123"


def test_repeat_login_refreshes_tokens():
    first = handle_oauth_login(**GOOGLE_PROFILE)
    second = handle_oauth_login(**{**GOOGLE_PROFILE, "access_token": "access-2"})

    assert second == {"user": first["user"], "isNewUser": False, "profileImported": False}
    account = fetch_row("SELECT access_token FROM oauth_accounts WHERE provider_user_id = 'google-123'")
    assert account["access_token"] == "access-2"


def test_missing_email_rejected():
    with pytest.raises(AuthenticationError) as exc_info:
        handle_oauth_login(**{**GOOGLE_PROFILE, "email": None})
    assert exc_info.value.code == "OAUTH_FAILED"


def test_oauth_user_cannot_use_password_login(client):
    handle_oauth_login(**GOOGLE_PROFILE)
    response = client.post("/api/users/login", json={"email": "jane@example.com", "password": "Secret123"})
    assert response.status_code == 401


def test_fetch_profile_maps_userinfo():
    def handler(request: httpx.Request) -> httpx.Response:
        if str(request.url) == GOOGLE_TOKEN_URL:
            return httpx.Response(200, json={"access_token": "tok", "refresh_token": "ref"})
        if str(request.url) == GOOGLE_USERINFO_URL:
            assert request.headers["Authorization"] == "Bearer tok"
            return httpx.Response(200, json={
                "sub": "g-1", "email": "sam@example.com", "given_name": "Sam", "family_name": "Lee",
            })
        return httpx.Response(404)

    profile = asyncio.run(GoogleOAuthClient(transport=httpx.MockTransport(handler)).fetch_profile("code"))
    assert profile["provider_user_id"] == "g-1"
    assert profile["first_name"] == "Sam"
    assert profile["access_token"] == "tok"


def test_fetch_profile_token_failure():
    transport = httpx.MockTransport(lambda request: httpx.Response(400, json={"error": "invalid_grant"}))
    with pytest.raises(AuthenticationError):
        asyncio.run(GoogleOAuthClient(transport=transport).fetch_profile("bad"))


def test_status_and_unconfigured_google(client):
    status = client.get("/api/auth/status").json()["data"]
    assert status == {"googleConfigured": False, "linkedinConfigured": False, "githubConfigured": False}

    start = client.get("/api/auth/google")
    assert start.status_code == 400
    assert start.json()["error"]["code"] == "OAUTH_NOT_CONFIGURED"


def test_callback_without_state_redirects_to_login(client):
    response = client.get("/api/auth/google/callback", params={"code": "abc", "state": "xyz"},
                          follow_redirects=False)
    assert response.status_code == 302
    assert response.headers["location"].endswith("/login?error=oauth_failed")
