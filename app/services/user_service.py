"""
User Service - accounts, credentials and the dashboard summary.
"""

import logging
from typing import Optional

from sqlalchemy import text

from app.core.auth import (
    create_reset_token, decode_reset_token, hash_password, reset_token_matches, verify_password,
)
from app.core.config import DEFAULT_PROFILE_PICTURE
from app.core.errors import AuthenticationError, ConflictError, NotFoundError, ValidationError
from app.db.postgres import get_db_session
from app.services.application_service import get_application_service
from app.services.email_service import get_email_service
from app.services.file_service import get_file_service
from app.utils.records import new_id

logger = logging.getLogger(__name__)

# Fields counted by the dashboard completeness score
BASIC_PROFILE_FIELDS = [
    ("first_name", "firstName"),
    ("last_name", "lastName"),
    ("phone", "phone"),
    ("city", "city"),
    ("state", "state"),
    ("job_title", "jobTitle"),
    ("bio", "bio"),
    ("industry", "industry"),
    ("exp_level", "expLevel"),
]
CONTENT_SECTIONS = {
    "jobs": "jobs",
    "education": "educations",
    "skills": "skills",
    "certifications": "certifications",
    "projects": "projects",
}

RESET_MESSAGE = "If an account exists with that email, a password reset link has been sent"


def format_user(row) -> dict:
    return {
        "id": row["u_id"],
        "email": row["email"],
        "createdAt": row["created_at"],
        "updatedAt": row["updated_at"],
    }


class UserService:

    # ============================================================
    # LOOKUPS
    # ============================================================

    def get_user_by_email(self, email: str) -> Optional[dict]:
        with get_db_session() as db:
            result = db.execute(
                text("SELECT u_id, email, password, created_at, updated_at FROM users WHERE LOWER(email) = LOWER(:email)"),
                {"email": email}
            )
            row = result.mappings().fetchone()
        return dict(row) if row else None

    def get_user_by_id(self, user_id: str) -> Optional[dict]:
        with get_db_session() as db:
            result = db.execute(
                text("SELECT u_id, email, password, created_at, updated_at FROM users WHERE u_id = :id"),
                {"id": user_id}
            )
            row = result.mappings().fetchone()
        return dict(row) if row else None

    # ============================================================
    # REGISTRATION / LOGIN
    # ============================================================

    def create_user(self, email: str, password: str, first_name: Optional[str] = None,
                    last_name: Optional[str] = None) -> dict:
        """Create the user row and an empty profile with the default picture."""
        email = email.lower()
        if self.get_user_by_email(email):
            raise ConflictError("User with this email already exists", code="USER_EXISTS")

        user_id = new_id()
        with get_db_session() as db:
            db.execute(
                text("INSERT INTO users (u_id, email, password) VALUES (:id, :email, :password)"),
                {"id": user_id, "email": email, "password": hash_password(password)}
            )
            db.execute(
                text("""
                    INSERT INTO profiles (user_id, first_name, last_name, pfp_link)
                    VALUES (:id, :first_name, :last_name, :pfp)
                """),
                {"id": user_id, "first_name": first_name or None, "last_name": last_name or None,
                 "pfp": DEFAULT_PROFILE_PICTURE}
            )

        logger.info("Registered user %s", user_id)
        return format_user(self.get_user_by_id(user_id))

    def authenticate(self, email: str, password: str) -> dict:
        user = self.get_user_by_email(email)
        if not user or not verify_password(password, user["password"]):
            raise AuthenticationError("Invalid email or password", code="INVALID_CREDENTIALS")
        return format_user(user)

    # ============================================================
    # PASSWORDS
    # ============================================================

    def change_password(self, user_id: str, current_password: str, new_password: str) -> None:
        user = self.get_user_by_id(user_id)
        if not user:
            raise NotFoundError("User not found")
        if not verify_password(current_password, user["password"]):
            raise AuthenticationError("Current password is incorrect", code="INVALID_PASSWORD")
        self._set_password(user_id, new_password)

    def _set_password(self, user_id: str, new_password: str) -> None:
        with get_db_session() as db:
            db.execute(
                text("UPDATE users SET password = :password, updated_at = CURRENT_TIMESTAMP WHERE u_id = :id"),
                {"password": hash_password(new_password), "id": user_id}
            )

    def request_password_reset(self, email: str) -> dict:
        """Same answer whether or not the account exists."""
        user = self.get_user_by_email(email)
        if user:
            token = create_reset_token(user["u_id"], user["password"])
            get_email_service().send_password_reset(user["email"], token)
        else:
            logger.info("Password reset requested for unknown email")
        return {"message": RESET_MESSAGE}

    def reset_password(self, token: str, new_password: str) -> None:
        payload = decode_reset_token(token)
        user = self.get_user_by_id(payload["sub"]) if payload else None
        if not user or not reset_token_matches(payload, user["password"]):
            raise ValidationError("Invalid or expired reset token", code="INVALID_TOKEN")
        self._set_password(user["u_id"], new_password)
        logger.info("Password reset for user %s", user["u_id"])

    # ============================================================
    # ACCOUNT DELETION
    # ============================================================

    def delete_account(self, user_id: str, password: Optional[str]) -> None:
        """
        Delete a user and everything they own.

        Database cascades cover profile, jobs, education, skills,
        certifications, projects and OAuth accounts. File records carry no
        foreign key, so they and the legacy applications are removed here
        once the user row is gone.
        """
        user = self.get_user_by_id(user_id)
        if not user:
            raise NotFoundError("User not found")
        if user["password"]:
            if not password:
                raise ValidationError("Password is required to delete your account", code="PASSWORD_REQUIRED")
            if not verify_password(password, user["password"]):
                raise AuthenticationError("Password is incorrect", code="INVALID_PASSWORD")

        with get_db_session() as db:
            db.execute(text("DELETE FROM users WHERE u_id = :id"), {"id": user_id})

        removed_files = get_file_service().delete_user_files(user_id)

        try:
            get_application_service().delete_for_user(user_id)
        except Exception as e:
            logger.warning("Could not remove legacy applications for user %s: %s", user_id, e)

        logger.info("Deleted account %s (%d files removed)", user_id, removed_files)
        get_email_service().send_account_deletion_confirmation(user["email"])

    # ============================================================
    # DASHBOARD
    # ============================================================

    def get_dashboard(self, user_id: str) -> dict:
        with get_db_session() as db:
            result = db.execute(
                text("""
                    SELECT u.u_id, u.email, p.first_name, p.last_name, p.phone, p.city, p.state,
                           p.job_title, p.bio, p.industry, p.exp_level, p.pfp_link
                    FROM users u LEFT JOIN profiles p ON p.user_id = u.u_id
                    WHERE u.u_id = :id
                """),
                {"id": user_id}
            )
            user = result.mappings().fetchone()
            if not user:
                raise NotFoundError("User not found")

            counts = {}
            for key, table in CONTENT_SECTIONS.items():
                counts[key] = db.execute(
                    text(f"SELECT COUNT(*) FROM {table} WHERE user_id = :id"),
                    {"id": user_id}
                ).scalar()

        return {
            "user": {
                "id": user["u_id"],
                "email": user["email"],
                "firstName": user["first_name"],
                "lastName": user["last_name"],
                "jobTitle": user["job_title"],
                "industry": user["industry"],
                "pfpLink": user["pfp_link"] or DEFAULT_PROFILE_PICTURE,
            },
            "counts": counts,
            "profileCompleteness": calculate_profile_completeness(user, counts),
        }


def calculate_profile_completeness(profile, counts: dict) -> int:
    """
    Rounded percentage over 15 checks: the nine basic profile fields,
    a non-default picture and one per non-empty content section.
    """
    checks = []
    for column, _ in BASIC_PROFILE_FIELDS:
        value = profile.get(column) if profile else None
        checks.append(bool(value and str(value).strip()))

    pfp = profile.get("pfp_link") if profile else None
    checks.append(bool(pfp) and pfp != DEFAULT_PROFILE_PICTURE)

    for section in CONTENT_SECTIONS:
        checks.append(counts.get(section, 0) > 0)

    return round(sum(checks) / len(checks) * 100)


def get_user_service() -> UserService:
    return UserService()
