"""
Job Routes

POST /jobs - Add a job
GET /jobs - List jobs (sort, limit, offset)
GET /jobs/current - Current job
GET /jobs/history - Full employment history
GET /jobs/statistics - Job counts and date range
GET /jobs/{job_id} - Job details
PUT /jobs/{job_id} - Update job
DELETE /jobs/{job_id} - Delete job
"""

from fastapi import APIRouter, Depends, Query

from app.core.auth import get_current_user
from app.core.errors import ok
from app.schemas.schemas import JobCreate, JobUpdate
from app.services.job_service import get_job_service

router = APIRouter(prefix="/jobs", tags=["Jobs"])


@router.post("", status_code=201)
async def create_job(data: JobCreate, user: dict = Depends(get_current_user)):
    """Marking a job current clears the flag on every other job."""
    job = get_job_service().create_job(user["user_id"], data.model_dump())
    return ok({"job": job, "message": "Job created successfully"}, status_code=201)


@router.get("")
async def list_jobs(
    sort: str = Query("-start_date", pattern="^-?start_date$"),
    limit: int = Query(50, ge=1, le=100),
    offset: int = Query(0, ge=0),
    user: dict = Depends(get_current_user),
):
    return ok(get_job_service().list_jobs(user["user_id"], sort=sort, limit=limit, offset=offset))


@router.get("/current")
async def current_job(user: dict = Depends(get_current_user)):
    return ok({"job": get_job_service().get_current_job(user["user_id"])})


@router.get("/history")
async def job_history(user: dict = Depends(get_current_user)):
    return ok({"jobs": get_job_service().get_job_history(user["user_id"])})


@router.get("/statistics")
async def job_statistics(user: dict = Depends(get_current_user)):
    return ok(get_job_service().get_statistics(user["user_id"]))


@router.get("/{job_id}")
async def get_job(job_id: str, user: dict = Depends(get_current_user)):
    return ok({"job": get_job_service().get_job(job_id, user["user_id"])})


@router.put("/{job_id}")
async def update_job(job_id: str, data: JobUpdate, user: dict = Depends(get_current_user)):
    job = get_job_service().update_job(job_id, user["user_id"], data.changes())
    return ok({"job": job, "message": "Job updated successfully"})


@router.delete("/{job_id}")
async def delete_job(job_id: str, user: dict = Depends(get_current_user)):
    return ok(get_job_service().delete_job(job_id, user["user_id"]))
