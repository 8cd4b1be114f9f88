"""
Application Routes (legacy, MongoDB)

GET /applications - List applications (status, search, pagination)
GET /applications/stats - Counts per status
GET /applications/{application_id} - Application details
POST /applications - Track a new application
PUT /applications/{application_id} - Update application
DELETE /applications/{application_id} - Delete application
POST /applications/{application_id}/archive - Archive
POST /applications/{application_id}/restore - Restore from archive
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from app.core.auth import get_current_user
from app.core.errors import ok
from app.schemas.schemas import ApplicationCreate, ApplicationUpdate
from app.services.application_service import get_application_service

router = APIRouter(prefix="/applications", tags=["Applications"])


@router.get("")
async def list_applications(
    status: Optional[str] = None,
    search: Optional[str] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    user: dict = Depends(get_current_user),
):
    return ok(get_application_service().list_applications(
        user["user_id"], status=status, search=search, page=page, limit=limit
    ))


@router.get("/stats")
async def application_stats(user: dict = Depends(get_current_user)):
    return ok({"stats": get_application_service().stats(user["user_id"])})


@router.get("/{application_id}")
async def get_application(application_id: str, user: dict = Depends(get_current_user)):
    return ok({"application": get_application_service().get(user["user_id"], application_id)})


@router.post("", status_code=201)
async def create_application(data: ApplicationCreate, user: dict = Depends(get_current_user)):
    application = get_application_service().create(user["user_id"], data.model_dump())
    return ok({"application": application, "message": "Application created successfully"}, status_code=201)


@router.put("/{application_id}")
async def update_application(application_id: str, data: ApplicationUpdate, user: dict = Depends(get_current_user)):
    application = get_application_service().update(user["user_id"], application_id, data.changes())
    return ok({"application": application, "message": "Application updated successfully"})


@router.delete("/{application_id}")
async def delete_application(application_id: str, user: dict = Depends(get_current_user)):
    get_application_service().delete(user["user_id"], application_id)
    return ok({"message": "Application deleted successfully"})


@router.post("/{application_id}/archive")
async def archive_application(application_id: str, user: dict = Depends(get_current_user)):
    application = get_application_service().set_archived(user["user_id"], application_id, True)
    return ok({"application": application, "message": "Application archived"})


@router.post("/{application_id}/restore")
async def restore_application(application_id: str, user: dict = Depends(get_current_user)):
    application = get_application_service().set_archived(user["user_id"], application_id, False)
    return ok({"application": application, "message": "Application restored"})
