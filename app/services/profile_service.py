"""
Profile Service - one profile per user, created lazily on first save.
"""

import logging
from typing import Optional

from sqlalchemy import text

from app.core.config import DEFAULT_PROFILE_PICTURE
from app.core.errors import NotFoundError, ValidationError
from app.db.postgres import get_db_session

logger = logging.getLogger(__name__)

# column -> response key
PROFILE_FIELDS = {
    "first_name": "firstName",
    "middle_name": "middleName",
    "last_name": "lastName",
    "phone": "phone",
    "city": "city",
    "state": "state",
    "job_title": "jobTitle",
    "bio": "bio",
    "industry": "industry",
    "exp_level": "expLevel",
    "pfp_link": "pfpLink",
}


def full_name(row) -> Optional[str]:
    parts = [row.get("first_name"), row.get("middle_name"), row.get("last_name")]
    name = " ".join(p for p in parts if p)
    return name or None


def format_profile(row) -> dict:
    profile = {key: row[column] for column, key in PROFILE_FIELDS.items()}
    profile.update({
        "userId": row["user_id"],
        "email": row["email"],
        "fullName": full_name(row),
        "createdAt": row["created_at"],
        "updatedAt": row["updated_at"],
    })
    return profile


class ProfileService:

    def get_profile(self, user_id: str) -> Optional[dict]:
        with get_db_session() as db:
            result = db.execute(
                text("""
                    SELECT p.*, u.email, u.created_at, u.updated_at
                    FROM profiles p JOIN users u ON p.user_id = u.u_id
                    WHERE p.user_id = :id
                """),
                {"id": user_id}
            )
            row = result.mappings().fetchone()
        return format_profile(row) if row else None

    def create_or_update(self, user_id: str, changes: dict) -> tuple:
        """Returns (profile, created)."""
        if self.get_profile(user_id):
            return self.update_profile(user_id, changes), False
        return self.create_profile(user_id, changes), True

    @staticmethod
    def _require_create_fields(changes: dict) -> None:
        if not changes.get("first_name") or not changes.get("last_name"):
            raise ValidationError("First name and last name are required")
        if not changes.get("state"):
            raise ValidationError("State is required")

    def create_profile(self, user_id: str, changes: dict) -> dict:
        self._require_create_fields(changes)
        values = {column: (changes.get(column) or None) for column in PROFILE_FIELDS if column != "pfp_link"}
        values.update({"user_id": user_id, "pfp_link": DEFAULT_PROFILE_PICTURE})
        columns = ", ".join(values)
        params = ", ".join(f":{c}" for c in values)
        with get_db_session() as db:
            db.execute(text(f"INSERT INTO profiles ({columns}) VALUES ({params})"), values)
        logger.info("Created profile for user %s", user_id)
        return self.get_profile(user_id)

    def update_profile(self, user_id: str, changes: dict) -> dict:
        """Partial update. Empty strings clear a field."""
        updates = []
        params = {"id": user_id}
        for column in PROFILE_FIELDS:
            if column == "pfp_link" or column not in changes:
                continue
            updates.append(f"{column} = :{column}")
            params[column] = changes[column] or None

        if updates:
            with get_db_session() as db:
                result = db.execute(
                    text(f"UPDATE profiles SET {', '.join(updates)} WHERE user_id = :id"),
                    params
                )
                if result.rowcount == 0:
                    raise NotFoundError("Profile not found")

        profile = self.get_profile(user_id)
        if not profile:
            raise NotFoundError("Profile not found")
        return profile

    def get_picture(self, user_id: str) -> dict:
        profile = self.get_profile(user_id)
        if not profile:
            raise NotFoundError("Profile not found")
        link = profile["pfpLink"] or DEFAULT_PROFILE_PICTURE
        return {"pfpLink": link, "isDefault": link == DEFAULT_PROFILE_PICTURE}

    def set_picture(self, user_id: str, file_path: Optional[str]) -> dict:
        if not file_path:
            raise ValidationError("File path is required")
        with get_db_session() as db:
            result = db.execute(
                text("UPDATE profiles SET pfp_link = :link WHERE user_id = :id"),
                {"link": file_path, "id": user_id}
            )
            if result.rowcount == 0:
                raise NotFoundError("Profile not found")
        return self.get_profile(user_id)

    def get_statistics(self, user_id: str) -> dict:
        total = len(PROFILE_FIELDS)
        profile = self.get_profile(user_id)
        if not profile:
            return {"hasProfile": False, "completeness": 0, "fieldsCompleted": 0, "totalFields": total}

        completed = sum(1 for key in PROFILE_FIELDS.values() if profile.get(key) not in (None, ""))
        return {
            "hasProfile": True,
            "completeness": round(completed / total * 100),
            "fieldsCompleted": completed,
            "totalFields": total,
            "profile": profile,
        }


def get_profile_service() -> ProfileService:
    return ProfileService()
