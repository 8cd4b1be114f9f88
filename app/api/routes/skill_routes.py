"""
Skill Routes

POST /skills - Add skill (409 if the name already exists)
GET /skills - List skills, optional category filter
GET /skills/categories - Skills grouped by category
GET /skills/{skill_id} - Skill details
PUT /skills/{skill_id} - Update proficiency, category or badge
DELETE /skills/{skill_id} - Remove skill
"""

from typing import Optional

from fastapi import APIRouter, Depends

from app.core.auth import get_current_user
from app.core.errors import ok
from app.schemas.schemas import SkillCreate, SkillUpdate
from app.services.skill_service import get_skill_service

router = APIRouter(prefix="/skills", tags=["Skills"])


@router.post("", status_code=201)
async def create_skill(data: SkillCreate, user: dict = Depends(get_current_user)):
    skill = get_skill_service().create_skill(user["user_id"], data.model_dump())
    return ok({"skill": skill, "message": "Skill created successfully"}, status_code=201)


@router.get("")
async def list_skills(category: Optional[str] = None, user: dict = Depends(get_current_user)):
    return ok({"skills": get_skill_service().list_skills(user["user_id"], category)})


@router.get("/categories")
async def skills_by_category(user: dict = Depends(get_current_user)):
    return ok(get_skill_service().get_skills_by_category(user["user_id"]))


@router.get("/{skill_id}")
async def get_skill(skill_id: str, user: dict = Depends(get_current_user)):
    return ok({"skill": get_skill_service().get_skill(skill_id, user["user_id"])})


@router.put("/{skill_id}")
async def update_skill(skill_id: str, data: SkillUpdate, user: dict = Depends(get_current_user)):
    skill = get_skill_service().update_skill(skill_id, user["user_id"], data.changes())
    return ok({"skill": skill, "message": "Skill updated successfully"})


@router.delete("/{skill_id}")
async def delete_skill(skill_id: str, user: dict = Depends(get_current_user)):
    return ok(get_skill_service().delete_skill(skill_id, user["user_id"]))
