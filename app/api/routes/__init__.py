"""
API Routes - Combines all route modules into single router.
"""

from fastapi import APIRouter

from app.api.routes.user_routes import router as user_router
from app.api.routes.auth_routes import router as auth_router
from app.api.routes.profile_routes import router as profile_router
from app.api.routes.job_routes import router as job_router
from app.api.routes.education_routes import router as education_router
from app.api.routes.skill_routes import router as skill_router
from app.api.routes.certification_routes import router as certification_router
from app.api.routes.project_routes import router as project_router
from app.api.routes.file_routes import router as file_router
from app.api.routes.application_routes import router as application_router

# Main API router
api_router = APIRouter()

# Include all sub-routers
api_router.include_router(user_router)
api_router.include_router(auth_router)
api_router.include_router(profile_router)
api_router.include_router(job_router)
api_router.include_router(education_router)
api_router.include_router(skill_router)
api_router.include_router(certification_router)
api_router.include_router(project_router)
api_router.include_router(file_router)
api_router.include_router(application_router)
