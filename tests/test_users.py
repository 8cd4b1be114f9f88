"""Registration, sessions, passwords, account deletion and the dashboard."""

import io
import os

from PIL import Image
import pytest
from sqlalchemy import text
from sqlalchemy.exc import IntegrityError

from app.db import mongodb
from app.db.postgres import get_db_session
from app.services import user_service
from conftest import PASSWORD, attach_csrf, register


class RecordingEmailService:
    def __init__(self):
        self.resets = []
        self.deletions = []

    def send_password_reset(self, email, token):
        self.resets.append((email, token))
        return f"http://localhost:3000/reset-password?token={token}"

    def send_account_deletion_confirmation(self, email):
        self.deletions.append(email)


def png_bytes():
    buffer = io.BytesIO()
    Image.new("RGB", (400, 400), (10, 120, 200)).save(buffer, format="PNG")
    return buffer.getvalue()


# ============================================================
# REGISTRATION / LOGIN
# ============================================================

def test_register_starts_session(client):
    response = register(client, email="Jane@Example.com")
    assert response.status_code == 201
    body = response.json()
    assert body["ok"] is True
    assert body["data"]["user"]["email"] == "jane@example.com"

    me = client.get("/api/users/profile")
    assert me.status_code == 200
    assert me.json()["data"]["user"]["id"] == body["data"]["user"]["id"]


def test_register_duplicate_email(client):
    register(client)
    response = register(client, email="JANE@example.com")
    assert response.status_code == 409
    assert response.json()["error"]["code"] == "USER_EXISTS"


def test_register_weak_password(client):
    response = register(client, password="password")
    assert response.status_code == 400
    error = response.json()["error"]
    assert error["code"] == "VALIDATION_ERROR"
    assert "uppercase" in error["message"]


def test_register_creates_profile_with_default_picture(client):
    register(client, firstName="Jane", lastName="Doe")
    profile = client.get("/api/profile").json()["data"]["profile"]
    assert profile["fullName"] == "Jane Doe"
    assert profile["pfpLink"].startswith("https://")


def test_login_and_logout(client):
    register(client)
    client.post("/api/users/logout")
    assert client.get("/api/users/profile").status_code == 401

    bad = client.post("/api/users/login", json={"email": "jane@example.com", "password": "Wrong1234"})
    assert bad.status_code == 401
    assert bad.json()["error"]["code"] == "INVALID_CREDENTIALS"

    good = client.post("/api/users/login", json={"email": "JANE@example.com", "password": PASSWORD})
    assert good.status_code == 200
    assert client.get("/api/users/profile").status_code == 200


def test_protected_route_requires_session(client):
    response = client.get("/api/users/dashboard")
    assert response.status_code == 401
    assert response.json() == {
        "ok": False,
        "error": {"code": "UNAUTHORIZED", "message": "Authentication required"},
    }


# ============================================================
# CSRF / PASSWORDS
# ============================================================

def test_change_password_requires_csrf(client):
    register(client)
    response = client.put("/api/users/change-password",
                          json={"currentPassword": PASSWORD, "newPassword": "Newpass123"})
    assert response.status_code == 403
    assert response.json()["error"]["code"] == "CSRF_INVALID"


def test_change_password(auth_client):
    wrong = auth_client.put("/api/users/change-password",
                            json={"currentPassword": "Nope12345", "newPassword": "Newpass123"})
    assert wrong.status_code == 401
    assert wrong.json()["error"]["code"] == "INVALID_PASSWORD"

    response = auth_client.put("/api/users/change-password",
                               json={"currentPassword": PASSWORD, "newPassword": "Newpass123"})
    assert response.status_code == 200

    auth_client.post("/api/users/logout")
    login = auth_client.post("/api/users/login", json={"email": "jane@example.com", "password": "Newpass123"})
    assert login.status_code == 200


def test_csrf_token_is_stable_within_session(client):
    register(client)
    first = attach_csrf(client)
    second = client.get("/api/users/csrf-token").json()["data"]["csrfToken"]
    assert first == second


def test_forgot_password_same_answer_for_unknown_email(client, monkeypatch):
    emails = RecordingEmailService()
    monkeypatch.setattr(user_service, "get_email_service", lambda: emails)
    register(client)

    known = client.post("/api/users/forgot-password", json={"email": "jane@example.com"})
    unknown = client.post("/api/users/forgot-password", json={"email": "nobody@example.com"})

    assert known.status_code == unknown.status_code == 200
    assert known.json()["data"] == unknown.json()["data"]
    assert len(emails.resets) == 1


def test_reset_password_token_is_single_use(client, monkeypatch):
    emails = RecordingEmailService()
    monkeypatch.setattr(user_service, "get_email_service", lambda: emails)
    register(client)
    client.post("/api/users/forgot-password", json={"email": "jane@example.com"})
    _, token = emails.resets[0]

    response = client.post("/api/users/reset-password", json={"token": token, "newPassword": "Reset1234"})
    assert response.status_code == 200

    reused = client.post("/api/users/reset-password", json={"token": token, "newPassword": "Again1234"})
    assert reused.status_code == 400
    assert reused.json()["error"]["code"] == "INVALID_TOKEN"

    login = client.post("/api/users/login", json={"email": "jane@example.com", "password": "Reset1234"})
    assert login.status_code == 200


def test_reset_password_rejects_garbage_token(client):
    response = client.post("/api/users/reset-password", json={"token": "not-a-token", "newPassword": "Reset1234"})
    assert response.status_code == 400
    assert response.json()["error"]["code"] == "INVALID_TOKEN"


# ============================================================
# ACCOUNT DELETION
# ============================================================

def test_delete_account_requires_password(auth_client):
    missing = auth_client.request("DELETE", "/api/users/account", json={})
    assert missing.status_code == 400
    assert missing.json()["error"]["code"] == "PASSWORD_REQUIRED"

    wrong = auth_client.request("DELETE", "/api/users/account", json={"password": "Wrong1234"})
    assert wrong.status_code == 401


def test_delete_account_removes_everything(auth_client, upload_dir, monkeypatch):
    emails = RecordingEmailService()
    monkeypatch.setattr(user_service, "get_email_service", lambda: emails)

    auth_client.post("/api/jobs", json={"title": "Engineer", "company": "Acme", "startDate": "2020-01-01"})
    auth_client.post("/api/skills", json={"skillName": "Python", "proficiency": "Expert"})
    auth_client.post("/api/applications", json={"position": "Engineer", "company": "Acme"})
    upload = auth_client.post("/api/files/profile-picture",
                              files={"profilePicture": ("me.png", png_bytes(), "image/png")})
    assert upload.status_code == 201
    picture_path = upload.json()["data"]["filePath"]
    disk_file = os.path.join(upload_dir, picture_path[len("/uploads/"):])
    assert os.path.exists(disk_file)

    response = auth_client.request("DELETE", "/api/users/account", json={"password": PASSWORD})
    assert response.status_code == 200

    assert not os.path.exists(disk_file)
    with get_db_session() as db:
        for table in ("profiles", "jobs", "skills", "files"):
            assert db.execute(text(f"SELECT COUNT(*) FROM {table}")).scalar() == 0
    assert mongodb._db["applications"].count_documents({"user_id": auth_client.user_id}) == 0
    assert emails.deletions == ["jane@example.com"]
    assert auth_client.get("/api/users/profile").status_code == 401

    login = auth_client.post("/api/users/login", json={"email": "jane@example.com", "password": PASSWORD})
    assert login.status_code == 401


def test_failed_account_delete_keeps_files(auth_client, upload_dir):
    upload = auth_client.post("/api/files/profile-picture",
                              files={"profilePicture": ("me.png", png_bytes(), "image/png")})
    disk_file = os.path.join(upload_dir, upload.json()["data"]["filePath"][len("/uploads/"):])

    with get_db_session() as db:
        db.execute(text(
            "CREATE TRIGGER block_user_delete BEFORE DELETE ON users "
            "BEGIN SELECT RAISE(ABORT, 'user delete blocked'); END"
        ))
    try:
        with pytest.raises(IntegrityError):
            user_service.get_user_service().delete_account(auth_client.user_id, PASSWORD)
    finally:
        with get_db_session() as db:
            db.execute(text("DROP TRIGGER block_user_delete"))

    assert os.path.exists(disk_file)
    with get_db_session() as db:
        assert db.execute(text("SELECT COUNT(*) FROM files")).scalar() == 1
    assert auth_client.get("/api/users/profile").status_code == 200


# ============================================================
# DASHBOARD / HEALTH
# ============================================================

def test_dashboard_counts_and_completeness(auth_client):
    empty = auth_client.get("/api/users/dashboard").json()["data"]
    assert empty["counts"] == {"jobs": 0, "education": 0, "skills": 0, "certifications": 0, "projects": 0}
    # first and last name out of 15 checks
    assert empty["profileCompleteness"] == 13
    assert empty["user"]["firstName"] == "Jane"

    auth_client.post("/api/jobs", json={"title": "Engineer", "company": "Acme", "startDate": "2020-01-01"})
    auth_client.post("/api/skills", json={"skillName": "Python", "proficiency": "Expert"})

    data = auth_client.get("/api/users/dashboard").json()["data"]
    assert data["counts"]["jobs"] == 1
    assert data["counts"]["skills"] == 1
    assert data["profileCompleteness"] == 27


def test_profile_completeness_calculation():
    profile = {column: "x" for column, _ in user_service.BASIC_PROFILE_FIELDS}
    profile["pfp_link"] = "/uploads/profile-pics/profile_1.jpg"
    counts = {section: 1 for section in user_service.CONTENT_SECTIONS}
    assert user_service.calculate_profile_completeness(profile, counts) == 100
    assert user_service.calculate_profile_completeness(None, {}) == 0


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["status"] == "healthy"
    assert data["postgres"] == "connected"
