"""
Shared fixtures.

The app runs against in-memory SQLite, mongomock and a temporary upload
directory. Environment variables must be set before app modules import
their settings.
"""

import os
import shutil
import tempfile

UPLOAD_DIR = tempfile.mkdtemp(prefix="ats-uploads-")

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["UPLOAD_DIR"] = UPLOAD_DIR
os.environ["SESSION_SECRET"] = "test-session-secret"
os.environ["RESET_TOKEN_SECRET"] = "test-reset-secret"
os.environ["AUTO_CREATE_SCHEMA"] = "true"
os.environ["GOOGLE_CLIENT_ID"] = ""
os.environ["GOOGLE_CLIENT_SECRET"] = ""

import mongomock  # noqa: E402
import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import text  # noqa: E402

from app.db import mongodb  # noqa: E402

mongodb._client = mongomock.MongoClient()
mongodb._db = mongodb._client["ats_test"]

from app.db.postgres import get_db_session, init_schema  # noqa: E402
from app.main import app  # noqa: E402

TABLES = ["oauth_accounts", "files", "projects", "certifications", "skills",
          "educations", "jobs", "profiles", "users"]

PASSWORD = "Secret123"


@pytest.fixture(autouse=True)
def clean_state():
    init_schema()
    yield
    with get_db_session() as db:
        for table in TABLES:
            db.execute(text(f"DELETE FROM {table}"))
    mongodb._db["applications"].delete_many({})
    for entry in os.listdir(UPLOAD_DIR):
        shutil.rmtree(os.path.join(UPLOAD_DIR, entry), ignore_errors=True)


@pytest.fixture
def client():
    with TestClient(app) as c:
        yield c


def register(client, email="jane@example.com", password=PASSWORD, **extra):
    return client.post("/api/users/register", json={"email": email, "password": password, **extra})


def attach_csrf(client):
    token = client.get("/api/users/csrf-token").json()["data"]["csrfToken"]
    client.headers["X-CSRF-Token"] = token
    return token


@pytest.fixture
def auth_client(client):
    """Logged-in client with a CSRF header for protected routes."""
    response = register(client, firstName="Jane", lastName="Doe")
    assert response.status_code == 201
    client.user_id = response.json()["data"]["user"]["id"]
    attach_csrf(client)
    return client


@pytest.fixture
def upload_dir():
    return UPLOAD_DIR
