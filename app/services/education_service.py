"""
Education Service - schools, degrees and enrollment.
"""

from typing import List

from sqlalchemy import text

from app.core.errors import NotFoundError, ValidationError
from app.db.postgres import get_db_session
from app.utils.records import as_bool, as_date, as_float, new_id

# attribute -> column
EDUCATION_COLUMNS = {
    "school": "school",
    "degree_type": "degree_type",
    "field": "field",
    "gpa": "gpa",
    "is_enrolled": "is_enrolled",
    "honors": "honors",
    "start_date": "startdate",
    "end_date": "graddate",
}


def format_education(row) -> dict:
    return {
        "id": row["id"],
        "userId": row["user_id"],
        "school": row["school"],
        "degreeType": row["degree_type"],
        "field": row["field"],
        "gpa": as_float(row["gpa"]),
        "isEnrolled": as_bool(row["is_enrolled"]),
        "honors": row["honors"],
        "startDate": as_date(row["startdate"]),
        "endDate": as_date(row["graddate"]),
    }


class EducationService:

    def create_education(self, user_id: str, data: dict) -> dict:
        education_id = new_id()
        params = {attr: data.get(attr) for attr in EDUCATION_COLUMNS}
        params.update({"id": education_id, "user_id": user_id, "is_enrolled": bool(data.get("is_enrolled"))})
        for attr in ("field", "honors"):
            params[attr] = params[attr] or None
        with get_db_session() as db:
            db.execute(
                text("""
                    INSERT INTO educations (id, user_id, school, degree_type, field, gpa, is_enrolled, honors, startdate, graddate)
                    VALUES (:id, :user_id, :school, :degree_type, :field, :gpa, :is_enrolled, :honors, :start_date, :end_date)
                """),
                params
            )
        return self.get_education(education_id, user_id)

    def list_educations(self, user_id: str) -> List[dict]:
        """Enrolled first, then most recent graduation, then most recent start."""
        with get_db_session() as db:
            result = db.execute(
                text("""
                    SELECT * FROM educations WHERE user_id = :uid
                    ORDER BY
                        CASE WHEN is_enrolled = TRUE THEN 0 ELSE 1 END,
                        COALESCE(graddate, '9999-12-31') DESC,
                        COALESCE(startdate, '1900-01-01') DESC
                """),
                {"uid": user_id}
            )
            return [format_education(r) for r in result.mappings().fetchall()]

    def get_education(self, education_id: str, user_id: str) -> dict:
        with get_db_session() as db:
            result = db.execute(
                text("SELECT * FROM educations WHERE id = :id AND user_id = :uid"),
                {"id": education_id, "uid": user_id}
            )
            row = result.mappings().fetchone()
        if not row:
            raise NotFoundError("Education not found")
        return format_education(row)

    def update_education(self, education_id: str, user_id: str, changes: dict) -> dict:
        existing = self.get_education(education_id, user_id)

        start = changes["start_date"] if "start_date" in changes else existing["startDate"]
        end = changes["end_date"] if "end_date" in changes else existing["endDate"]
        if start and end and end < start:
            raise ValidationError("End date cannot be before start date")

        updates, params = [], {"id": education_id, "uid": user_id}
        for attr, column in EDUCATION_COLUMNS.items():
            if attr not in changes:
                continue
            value = changes[attr]
            if attr in ("school", "degree_type") and not value:
                raise ValidationError("School and degree type are required")
            if attr == "is_enrolled":
                value = bool(value)
            updates.append(f"{column} = :{attr}")
            params[attr] = value

        if updates:
            with get_db_session() as db:
                db.execute(
                    text(f"UPDATE educations SET {', '.join(updates)} WHERE id = :id AND user_id = :uid"),
                    params
                )
        return self.get_education(education_id, user_id)

    def delete_education(self, education_id: str, user_id: str) -> dict:
        with get_db_session() as db:
            result = db.execute(
                text("DELETE FROM educations WHERE id = :id AND user_id = :uid"),
                {"id": education_id, "uid": user_id}
            )
            if result.rowcount == 0:
                raise NotFoundError("Education not found")
        return {"id": education_id, "message": "Education deleted successfully"}


def get_education_service() -> EducationService:
    return EducationService()
