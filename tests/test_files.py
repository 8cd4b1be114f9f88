"""Uploads, listing, serving and deletion of user files."""

import io
import os

from fastapi.testclient import TestClient
from PIL import Image

from app.core.config import DEFAULT_PROFILE_PICTURE
from app.main import app
from conftest import attach_csrf, register

PDF_BYTES = b"%PDF-1.4\n1 0 obj\n<<>>\nendobj\ntrailer\n<<>>\n%%EOF\n"


def png_bytes(size=(640, 480)):
    buffer = io.BytesIO()
    Image.new("RGB", size, (30, 160, 90)).save(buffer, format="PNG")
    return buffer.getvalue()


def on_disk(upload_dir, public_path):
    return os.path.join(upload_dir, public_path[len("/uploads/"):])


def upload_picture(client, name="me.png"):
    return client.post("/api/files/profile-picture", files={"profilePicture": (name, png_bytes(), "image/png")})


# ============================================================
# PROFILE PICTURES
# ============================================================

def test_profile_picture_upload(auth_client, upload_dir):
    response = upload_picture(auth_client)
    assert response.status_code == 201
    data = response.json()["data"]

    assert data["fileType"] == "profile_pic"
    assert data["mimeType"] == "image/jpeg"
    assert data["filePath"].startswith("/uploads/profile-pics/profile_")
    assert data["filePath"].endswith(".jpg")
    assert data["originalName"] == "me.png"
    assert os.path.exists(on_disk(upload_dir, data["filePath"]))
    assert os.path.exists(on_disk(upload_dir, data["thumbnailPath"]))

    with Image.open(on_disk(upload_dir, data["filePath"])) as img:
        assert img.size == (300, 300)

    profile = auth_client.get("/api/profile").json()["data"]["profile"]
    assert profile["pfpLink"] == data["filePath"]

    current = auth_client.get("/api/files/profile-picture").json()["data"]
    assert current["fileId"] == data["fileId"]
    assert current["isDefault"] is False


def test_reupload_replaces_previous_picture(auth_client, upload_dir):
    first = upload_picture(auth_client).json()["data"]
    second = upload_picture(auth_client, name="new.png").json()["data"]

    assert not os.path.exists(on_disk(upload_dir, first["filePath"]))
    assert not os.path.exists(on_disk(upload_dir, first["thumbnailPath"]))
    assert os.path.exists(on_disk(upload_dir, second["filePath"]))

    pictures = auth_client.get("/api/files", params={"fileType": "profile_pic"}).json()["data"]["files"]
    assert [p["fileId"] for p in pictures] == [second["fileId"]]


def test_default_picture_when_none_uploaded(auth_client):
    data = auth_client.get("/api/files/profile-picture").json()["data"]
    assert data == {"filePath": DEFAULT_PROFILE_PICTURE, "thumbnailPath": None, "isDefault": True}


def test_invalid_uploads(auth_client):
    missing = auth_client.post("/api/files/profile-picture")
    assert missing.status_code == 400
    assert missing.json()["error"]["message"] == "No file provided"

    wrong_type = auth_client.post("/api/files/profile-picture",
                                  files={"profilePicture": ("cv.pdf", PDF_BYTES, "application/pdf")})
    assert wrong_type.status_code == 400

    not_an_image = auth_client.post("/api/files/profile-picture",
                                    files={"profilePicture": ("me.png", b"garbage", "image/png")})
    assert not_an_image.status_code == 400
    assert not_an_image.json()["error"]["message"] == "Invalid image file"


def test_uploads_require_csrf(auth_client):
    del auth_client.headers["X-CSRF-Token"]
    response = upload_picture(auth_client)
    assert response.status_code == 403
    assert response.json()["error"]["code"] == "CSRF_INVALID"


# ============================================================
# RESUMES / DOCUMENTS
# ============================================================

def test_resume_and_document_uploads(auth_client):
    resume = auth_client.post("/api/files/resume", files={"resume": ("cv.pdf", PDF_BYTES, "application/pdf")})
    assert resume.status_code == 201
    assert resume.json()["data"]["filePath"].startswith("/uploads/resumes/resume_")

    image_resume = auth_client.post("/api/files/resume", files={"resume": ("cv.png", png_bytes(), "image/png")})
    assert image_resume.status_code == 400

    document = auth_client.post(
        "/api/files/document",
        files={"document": ("transcript.pdf", PDF_BYTES, "application/pdf")},
        data={"documentType": "transcript"},
    )
    assert document.status_code == 201
    assert document.json()["data"]["documentType"] == "transcript"

    reserved = auth_client.post(
        "/api/files/document",
        files={"document": ("x.pdf", PDF_BYTES, "application/pdf")},
        data={"documentType": "resume"},
    )
    assert reserved.status_code == 400

    resumes = auth_client.get("/api/files/resumes").json()["data"]["files"]
    assert [r["fileId"] for r in resumes] == [resume.json()["data"]["fileId"]]

    transcripts = auth_client.get("/api/files/documents", params={"documentType": "transcript"}).json()["data"]
    assert len(transcripts["files"]) == 1
    assert len(auth_client.get("/api/files/documents").json()["data"]["files"]) == 1


DOCX_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"


def test_profile_picture_with_huge_dimensions(auth_client):
    buffer = io.BytesIO()
    Image.new("1", (14000, 14000)).save(buffer, format="PNG")
    response = auth_client.post(
        "/api/files/profile-picture",
        files={"profilePicture": ("huge.png", buffer.getvalue(), "image/png")},
    )
    assert response.status_code == 400
    assert response.json()["error"]["message"] == "Invalid image file"


def test_overlong_document_type_is_rejected(auth_client, upload_dir):
    response = auth_client.post(
        "/api/files/document",
        files={"document": ("letter.docx", b"PK\x03\x04docx", DOCX_TYPE)},
        data={"documentType": "cover-letter-" + "x" * 120},
    )
    assert response.status_code == 400
    assert response.json()["error"]["code"] == "VALIDATION_ERROR"
    assert "Invalid document type" in response.json()["error"]["message"]
    assert auth_client.get("/api/files").json()["data"]["files"] == []


def test_document_metadata_too_long_to_store(auth_client, upload_dir):
    # escaped non-ASCII text overflows the file_data column
    response = auth_client.post(
        "/api/files/document",
        files={"document": ("letter.docx", b"PK\x03\x04docx", DOCX_TYPE)},
        data={"documentType": "\u00e9" * 50},
    )
    assert response.status_code == 400
    assert response.json()["error"]["message"] == "File details are too long to store"
    documents = os.path.join(upload_dir, "documents")
    assert not os.path.isdir(documents) or os.listdir(documents) == []


def test_statistics(auth_client):
    upload_picture(auth_client)
    auth_client.post("/api/files/resume", files={"resume": ("cv.pdf", PDF_BYTES, "application/pdf")})
    auth_client.post("/api/files/document", files={"document": ("a.pdf", PDF_BYTES, "application/pdf")})

    stats = auth_client.get("/api/files/statistics").json()["data"]
    assert stats["totalFiles"] == 3
    assert stats["profilePics"] == 1
    assert stats["resumes"] == 1
    assert stats["documents"] == 1
    assert stats["totalSize"] > 2 * len(PDF_BYTES)
    assert stats["limits"]["document"]["maxSizeMb"] == 10


# ============================================================
# SERVING / DELETING
# ============================================================

def test_content_endpoint(auth_client):
    uploaded = auth_client.post("/api/files/resume",
                                files={"resume": ("My CV.pdf", PDF_BYTES, "application/pdf")}).json()["data"]

    response = auth_client.get(f"/api/files/{uploaded['fileId']}/content")
    assert response.status_code == 200
    assert response.content == PDF_BYTES
    assert response.headers["content-type"] == "application/pdf"
    assert response.headers["content-disposition"] == 'inline; filename="My CV.pdf"'

    static = auth_client.get(uploaded["filePath"])
    assert static.status_code == 200
    assert static.content == PDF_BYTES


def test_files_are_private(auth_client):
    uploaded = auth_client.post("/api/files/resume",
                                files={"resume": ("cv.pdf", PDF_BYTES, "application/pdf")}).json()["data"]

    with TestClient(app) as other:
        register(other, email="sam@example.com")
        attach_csrf(other)
        assert other.get(f"/api/files/{uploaded['fileId']}").status_code == 404
        assert other.delete(f"/api/files/{uploaded['fileId']}").status_code == 404
        assert other.get("/api/files").json()["data"]["files"] == []


def test_delete_file(auth_client, upload_dir):
    uploaded = auth_client.post("/api/files/resume",
                                files={"resume": ("cv.pdf", PDF_BYTES, "application/pdf")}).json()["data"]

    response = auth_client.delete(f"/api/files/{uploaded['fileId']}")
    assert response.status_code == 200
    assert not os.path.exists(on_disk(upload_dir, uploaded["filePath"]))
    assert auth_client.get(f"/api/files/{uploaded['fileId']}").status_code == 404


def test_deleting_current_picture_restores_default(auth_client):
    picture = upload_picture(auth_client).json()["data"]
    auth_client.delete(f"/api/files/{picture['fileId']}")

    profile = auth_client.get("/api/profile").json()["data"]["profile"]
    assert profile["pfpLink"] == DEFAULT_PROFILE_PICTURE
