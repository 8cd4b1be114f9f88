"""
Project Routes

POST /projects - Add project
GET /projects - List projects with filters and sorting
GET /projects/search?q= - Search projects
GET /projects/statistics - Counts by status, unique technologies
GET /projects/{project_id} - Project details
PUT /projects/{project_id} - Update project
DELETE /projects/{project_id} - Delete project
"""

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query

from app.core.auth import get_current_user
from app.core.errors import ok
from app.schemas.schemas import ProjectCreate, ProjectUpdate
from app.services.project_service import get_project_service

router = APIRouter(prefix="/projects", tags=["Projects"])


@router.post("", status_code=201)
async def create_project(data: ProjectCreate, user: dict = Depends(get_current_user)):
    project = get_project_service().create_project(user["user_id"], data.model_dump())
    return ok({"project": project, "message": "Project created successfully"}, status_code=201)


@router.get("")
async def list_projects(
    status: Optional[str] = None,
    industry: Optional[str] = None,
    technology: Optional[str] = None,
    start_date_from: Optional[date] = Query(None, alias="startDateFrom"),
    start_date_to: Optional[date] = Query(None, alias="startDateTo"),
    sort_by: str = Query("start_date", alias="sortBy"),
    sort_order: str = Query("DESC", alias="sortOrder"),
    user: dict = Depends(get_current_user),
):
    projects = get_project_service().list_projects(
        user["user_id"],
        status=status,
        industry=industry,
        technology=technology,
        start_date_from=start_date_from,
        start_date_to=start_date_to,
        sort_by=sort_by,
        sort_order=sort_order,
    )
    return ok({"projects": projects})


@router.get("/search")
async def search_projects(q: str = Query(..., min_length=1), user: dict = Depends(get_current_user)):
    return ok({"projects": get_project_service().search_projects(user["user_id"], q)})


@router.get("/statistics")
async def project_statistics(user: dict = Depends(get_current_user)):
    return ok(get_project_service().get_statistics(user["user_id"]))


@router.get("/{project_id}")
async def get_project(project_id: str, user: dict = Depends(get_current_user)):
    return ok({"project": get_project_service().get_project(project_id, user["user_id"])})


@router.put("/{project_id}")
async def update_project(project_id: str, data: ProjectUpdate, user: dict = Depends(get_current_user)):
    project = get_project_service().update_project(project_id, user["user_id"], data.changes())
    return ok({"project": project, "message": "Project updated successfully"})


@router.delete("/{project_id}")
async def delete_project(project_id: str, user: dict = Depends(get_current_user)):
    return ok(get_project_service().delete_project(project_id, user["user_id"]))
