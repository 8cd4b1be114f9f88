"""
Profile Routes

GET /profile - Get own profile
POST /profile - Create profile, or update it if it exists
PUT /profile - Update profile (only provided fields)
GET /profile/picture - Get profile picture link
PUT /profile/picture - Set profile picture link
GET /profile/statistics - Profile completeness
"""

from fastapi import APIRouter, Depends

from app.core.auth import get_current_user
from app.core.errors import NotFoundError, ok
from app.schemas.schemas import ProfilePictureUpdate, ProfileUpdate
from app.services.profile_service import get_profile_service

router = APIRouter(prefix="/profile", tags=["Profile"])


@router.get("")
async def get_profile(user: dict = Depends(get_current_user)):
    profile = get_profile_service().get_profile(user["user_id"])
    if not profile:
        raise NotFoundError("Profile not found")
    return ok({"profile": profile})


@router.post("")
async def save_profile(data: ProfileUpdate, user: dict = Depends(get_current_user)):
    """First save creates the profile (firstName, lastName and state required)."""
    profile, created = get_profile_service().create_or_update(user["user_id"], data.changes())
    if created:
        return ok({"profile": profile, "message": "Profile created successfully"}, status_code=201)
    return ok({"profile": profile, "message": "Profile updated successfully"})


@router.put("")
async def update_profile(data: ProfileUpdate, user: dict = Depends(get_current_user)):
    profile = get_profile_service().update_profile(user["user_id"], data.changes())
    return ok({"profile": profile, "message": "Profile updated successfully"})


@router.get("/picture")
async def get_picture(user: dict = Depends(get_current_user)):
    return ok(get_profile_service().get_picture(user["user_id"]))


@router.put("/picture")
async def set_picture(data: ProfilePictureUpdate, user: dict = Depends(get_current_user)):
    profile = get_profile_service().set_picture(user["user_id"], data.file_path)
    return ok({"profile": profile, "message": "Profile picture updated successfully"})


@router.get("/statistics")
async def profile_statistics(user: dict = Depends(get_current_user)):
    return ok(get_profile_service().get_statistics(user["user_id"]))
