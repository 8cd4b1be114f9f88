"""
File Routes

POST /files/profile-picture - Upload profile picture (CSRF)
POST /files/document - Upload document (CSRF)
POST /files/resume - Upload resume (CSRF)
GET /files - List files, optional fileType filter
GET /files/statistics - File counts and total size
GET /files/profile-picture - Current picture (default when none)
GET /files/resumes - Resumes
GET /files/documents - Documents, optional documentType filter
GET /files/{file_id} - File metadata
GET /files/{file_id}/content - File bytes
DELETE /files/{file_id} - Delete file (CSRF)
"""

from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile
from fastapi.responses import Response

from app.core.auth import csrf_protect, get_current_user
from app.core.errors import ok
from app.services.file_service import RESUME, get_file_service
from app.utils.file_upload import get_upload_limits, read_upload

router = APIRouter(prefix="/files", tags=["Files"])


@router.post("/profile-picture", status_code=201, dependencies=[Depends(csrf_protect)])
async def upload_profile_picture(
    profilePicture: Optional[UploadFile] = File(None, description="JPEG, PNG or GIF, max 5MB"),
    user: dict = Depends(get_current_user),
):
    """
    Upload a profile picture.

    The image is cropped to 300x300 with a 150x150 thumbnail and replaces
    any previous picture.
    """
    incoming = await read_upload(profilePicture)
    return ok(get_file_service().upload_profile_picture(user["user_id"], incoming), status_code=201)


@router.post("/document", status_code=201, dependencies=[Depends(csrf_protect)])
async def upload_document(
    document: Optional[UploadFile] = File(None, description="PDF, DOC, DOCX, JPEG or PNG, max 10MB"),
    documentType: str = Form("general"),
    user: dict = Depends(get_current_user),
):
    incoming = await read_upload(document)
    return ok(get_file_service().upload_document(user["user_id"], incoming, documentType), status_code=201)


@router.post("/resume", status_code=201, dependencies=[Depends(csrf_protect)])
async def upload_resume(
    resume: Optional[UploadFile] = File(None, description="PDF, DOC or DOCX, max 5MB"),
    user: dict = Depends(get_current_user),
):
    incoming = await read_upload(resume)
    return ok(get_file_service().upload_resume(user["user_id"], incoming), status_code=201)


@router.get("")
async def list_files(fileType: Optional[str] = Query(None), user: dict = Depends(get_current_user)):
    files = get_file_service().get_user_files(user["user_id"], fileType)
    return ok({"files": [f.to_dict() for f in files]})


@router.get("/statistics")
async def file_statistics(user: dict = Depends(get_current_user)):
    return ok({**get_file_service().get_statistics(user["user_id"]), "limits": get_upload_limits()})


@router.get("/profile-picture")
async def get_profile_picture(user: dict = Depends(get_current_user)):
    return ok(get_file_service().get_profile_picture(user["user_id"]))


@router.get("/resumes")
async def list_resumes(user: dict = Depends(get_current_user)):
    files = get_file_service().get_user_files(user["user_id"], RESUME)
    return ok({"files": [f.to_dict() for f in files]})


@router.get("/documents")
async def list_documents(documentType: Optional[str] = Query(None), user: dict = Depends(get_current_user)):
    files = get_file_service().get_documents(user["user_id"], documentType)
    return ok({"files": [f.to_dict() for f in files]})


@router.get("/{file_id}")
async def get_file(file_id: str, user: dict = Depends(get_current_user)):
    return ok({"file": get_file_service().get_file(file_id, user["user_id"]).to_dict()})


@router.get("/{file_id}/content")
async def get_file_content(file_id: str, user: dict = Depends(get_current_user)):
    """Serve the stored bytes with the recorded content type."""
    record, content = get_file_service().read_content(file_id, user["user_id"])
    filename = (record.original_name or record.file_name or "file").replace('"', "")
    return Response(
        content=content,
        media_type=record.mime_type or "application/octet-stream",
        headers={"Content-Disposition": f'inline; filename="{filename}"'},
    )


@router.delete("/{file_id}", dependencies=[Depends(csrf_protect)])
async def delete_file(file_id: str, user: dict = Depends(get_current_user)):
    return ok(get_file_service().delete_file(file_id, user["user_id"]))
