"""
Certification Routes

POST /certifications - Add certification
GET /certifications - List certifications
GET /certifications/current - Not yet expired
GET /certifications/history - Expired
GET /certifications/statistics - Counts by expiration state
GET /certifications/expiring?days=30 - Expiring within N days
GET /certifications/search?q= - Search name and organization
GET /certifications/organization?name= - Filter by organization
GET /certifications/{certification_id} - Certification details
PUT /certifications/{certification_id} - Update certification
DELETE /certifications/{certification_id} - Delete certification
"""

from fastapi import APIRouter, Depends, Query

from app.core.auth import get_current_user
from app.core.errors import ok
from app.schemas.schemas import CertificationCreate, CertificationUpdate
from app.services.certification_service import get_certification_service

router = APIRouter(prefix="/certifications", tags=["Certifications"])


@router.post("", status_code=201)
async def create_certification(data: CertificationCreate, user: dict = Depends(get_current_user)):
    certification = get_certification_service().create_certification(user["user_id"], data.model_dump())
    return ok({"certification": certification, "message": "Certification created successfully"}, status_code=201)


@router.get("")
async def list_certifications(user: dict = Depends(get_current_user)):
    return ok({"certifications": get_certification_service().list_certifications(user["user_id"])})


@router.get("/current")
async def current_certifications(user: dict = Depends(get_current_user)):
    return ok({"certifications": get_certification_service().get_current(user["user_id"])})


@router.get("/history")
async def certification_history(user: dict = Depends(get_current_user)):
    return ok({"certifications": get_certification_service().get_history(user["user_id"])})


@router.get("/statistics")
async def certification_statistics(user: dict = Depends(get_current_user)):
    return ok(get_certification_service().get_statistics(user["user_id"]))


@router.get("/expiring")
async def expiring_certifications(days: int = Query(30, ge=0, le=3650), user: dict = Depends(get_current_user)):
    return ok({"certifications": get_certification_service().get_expiring(user["user_id"], days)})


@router.get("/search")
async def search_certifications(q: str = Query(..., min_length=1), user: dict = Depends(get_current_user)):
    return ok({"certifications": get_certification_service().search(user["user_id"], q)})


@router.get("/organization")
async def certifications_by_organization(name: str = Query(..., min_length=1), user: dict = Depends(get_current_user)):
    return ok({"certifications": get_certification_service().get_by_organization(user["user_id"], name)})


@router.get("/{certification_id}")
async def get_certification(certification_id: str, user: dict = Depends(get_current_user)):
    return ok({"certification": get_certification_service().get_certification(certification_id, user["user_id"])})


@router.put("/{certification_id}")
async def update_certification(certification_id: str, data: CertificationUpdate,
                               user: dict = Depends(get_current_user)):
    certification = get_certification_service().update_certification(
        certification_id, user["user_id"], data.changes()
    )
    return ok({"certification": certification, "message": "Certification updated successfully"})


@router.delete("/{certification_id}")
async def delete_certification(certification_id: str, user: dict = Depends(get_current_user)):
    return ok(get_certification_service().delete_certification(certification_id, user["user_id"]))
