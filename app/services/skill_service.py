"""
Skill Service - skills are unique per user by name.
"""

from typing import List, Optional

from sqlalchemy import text
from sqlalchemy.exc import IntegrityError

from app.core.errors import ConflictError, NotFoundError
from app.db.postgres import get_db_session
from app.utils.records import new_id

UNCATEGORIZED = "Uncategorized"


def format_skill(row) -> dict:
    return {
        "id": row["id"],
        "userId": row["user_id"],
        "skillName": row["skill_name"],
        "proficiency": row["proficiency"],
        "category": row["category"],
        "skillBadge": row["skill_badge"],
    }


class SkillService:

    def _find_by_name(self, user_id: str, skill_name: str) -> Optional[dict]:
        with get_db_session() as db:
            result = db.execute(
                text("SELECT * FROM skills WHERE user_id = :uid AND LOWER(skill_name) = LOWER(:name)"),
                {"uid": user_id, "name": skill_name}
            )
            row = result.mappings().fetchone()
        return format_skill(row) if row else None

    def create_skill(self, user_id: str, data: dict) -> dict:
        if self._find_by_name(user_id, data["skill_name"]):
            raise ConflictError("Skill already exists for this user", code="DUPLICATE_SKILL")

        skill_id = new_id()
        try:
            with get_db_session() as db:
                db.execute(
                    text("""
                        INSERT INTO skills (id, user_id, skill_name, proficiency, category, skill_badge)
                        VALUES (:id, :uid, :name, :proficiency, :category, :badge)
                    """),
                    {
                        "id": skill_id,
                        "uid": user_id,
                        "name": data["skill_name"],
                        "proficiency": data["proficiency"],
                        "category": data.get("category"),
                        "badge": data.get("skill_badge") or None,
                    }
                )
        except IntegrityError:
            # Concurrent insert of the same name
            raise ConflictError("Skill already exists for this user", code="DUPLICATE_SKILL")
        return self.get_skill(skill_id, user_id)

    def list_skills(self, user_id: str, category: Optional[str] = None) -> List[dict]:
        query = "SELECT * FROM skills WHERE user_id = :uid"
        params = {"uid": user_id}
        if category:
            query += " AND category = :category ORDER BY skill_name ASC"
            params["category"] = category
        else:
            query += " ORDER BY category ASC, skill_name ASC"
        with get_db_session() as db:
            result = db.execute(text(query), params)
            return [format_skill(r) for r in result.mappings().fetchall()]

    def get_skills_by_category(self, user_id: str) -> dict:
        skills_by_category = {}
        for skill in self.list_skills(user_id):
            skills_by_category.setdefault(skill["category"] or UNCATEGORIZED, []).append(skill)
        return {
            "skillsByCategory": skills_by_category,
            "categoryCounts": {name: len(items) for name, items in skills_by_category.items()},
        }

    def get_skill(self, skill_id: str, user_id: str) -> dict:
        with get_db_session() as db:
            result = db.execute(
                text("SELECT * FROM skills WHERE id = :id AND user_id = :uid"),
                {"id": skill_id, "uid": user_id}
            )
            row = result.mappings().fetchone()
        if not row:
            raise NotFoundError("Skill not found")
        return format_skill(row)

    def update_skill(self, skill_id: str, user_id: str, changes: dict) -> dict:
        self.get_skill(skill_id, user_id)
        updates, params = [], {"id": skill_id, "uid": user_id}
        for column in ("proficiency", "category", "skill_badge"):
            if column in changes:
                if column == "proficiency" and not changes[column]:
                    continue
                updates.append(f"{column} = :{column}")
                params[column] = changes[column] or None
        if updates:
            with get_db_session() as db:
                db.execute(
                    text(f"UPDATE skills SET {', '.join(updates)} WHERE id = :id AND user_id = :uid"),
                    params
                )
        return self.get_skill(skill_id, user_id)

    def delete_skill(self, skill_id: str, user_id: str) -> dict:
        with get_db_session() as db:
            result = db.execute(
                text("DELETE FROM skills WHERE id = :id AND user_id = :uid"),
                {"id": skill_id, "uid": user_id}
            )
            if result.rowcount == 0:
                raise NotFoundError("Skill not found")
        return {"id": skill_id, "message": "Skill deleted successfully"}


def get_skill_service() -> SkillService:
    return SkillService()
