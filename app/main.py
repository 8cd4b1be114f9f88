"""
ATS Tracker - Main Application

FastAPI backend with:
- PostgreSQL for profile data
- MongoDB for legacy application tracking
- Session cookie authentication with CSRF tokens
- Google OAuth sign-in
- Local file storage for uploads

Run: uvicorn app.main:app --reload
"""

import logging
import os
from datetime import datetime, timezone

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from starlette.middleware.sessions import SessionMiddleware

from app import __version__
from app.api.routes import api_router
from app.core.config import get_settings
from app.core.errors import ok, register_error_handlers
from app.db.mongodb import init_mongo_indexes, test_mongo_connection
from app.db.postgres import init_schema, test_postgres_connection
from app.services.file_service import get_file_service

settings = get_settings()

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

os.makedirs(settings.upload_dir, exist_ok=True)

# Create FastAPI app
app = FastAPI(
    title="ATS Tracker",
    description="""
    Personal job-search tracker.

    ## Features
    - **Users**: Session login, password reset, account deletion, dashboard
    - **Profile**: Basic information and profile picture
    - **Jobs / Education / Skills / Certifications / Projects**: Profile sections
    - **Files**: Resume, document and profile picture uploads
    - **Applications**: Legacy application tracking (MongoDB)
    """,
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc"
)

# CORS: the frontend sends the session cookie, so the origin must be explicit
app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.frontend_url],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_middleware(
    SessionMiddleware,
    secret_key=settings.session_secret,
    session_cookie="ats_session",
    max_age=settings.session_max_age,
    same_site="lax",
    https_only=settings.https_only_cookies,
)

register_error_handlers(app)

# Include API routes
app.include_router(api_router, prefix="/api")

# Uploaded files are served by their public /uploads/... path
app.mount("/uploads", StaticFiles(directory=settings.upload_dir), name="uploads")


# Startup event
@app.on_event("startup")
async def startup_event():
    """Create tables, upload folders and MongoDB indexes."""
    if settings.auto_create_schema:
        init_schema()
    get_file_service().ensure_directories()
    try:
        init_mongo_indexes()
    except Exception as e:
        logger.warning("MongoDB index initialization failed: %s", e)


@app.get("/health", tags=["Health"])
async def health_check():
    """Detailed health check."""
    return ok({
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "version": __version__,
        "postgres": "connected" if test_postgres_connection() else "disconnected",
        "mongodb": "connected" if test_mongo_connection() else "disconnected",
    })
