"""
Education Routes

POST /education - Add education
GET /education - List education (enrolled first)
GET /education/{education_id} - Education details
PUT /education/{education_id} - Update education
DELETE /education/{education_id} - Delete education
"""

from fastapi import APIRouter, Depends

from app.core.auth import get_current_user
from app.core.errors import ok
from app.schemas.schemas import EducationCreate, EducationUpdate
from app.services.education_service import get_education_service

router = APIRouter(prefix="/education", tags=["Education"])


@router.post("", status_code=201)
async def create_education(data: EducationCreate, user: dict = Depends(get_current_user)):
    education = get_education_service().create_education(user["user_id"], data.model_dump())
    return ok({"education": education, "message": "Education created successfully"}, status_code=201)


@router.get("")
async def list_education(user: dict = Depends(get_current_user)):
    return ok({"educations": get_education_service().list_educations(user["user_id"])})


@router.get("/{education_id}")
async def get_education(education_id: str, user: dict = Depends(get_current_user)):
    return ok({"education": get_education_service().get_education(education_id, user["user_id"])})


@router.put("/{education_id}")
async def update_education(education_id: str, data: EducationUpdate, user: dict = Depends(get_current_user)):
    education = get_education_service().update_education(education_id, user["user_id"], data.changes())
    return ok({"education": education, "message": "Education updated successfully"})


@router.delete("/{education_id}")
async def delete_education(education_id: str, user: dict = Depends(get_current_user)):
    return ok(get_education_service().delete_education(education_id, user["user_id"]))
