"""
Project Service - portfolio projects with filtering and search.
"""

from typing import List, Optional

from sqlalchemy import text

from app.core.errors import NotFoundError, ValidationError
from app.db.postgres import execute_raw_sql, get_db_session
from app.utils.records import as_date, contains, new_id

PROJECT_FIELDS = (
    "name", "link", "description", "start_date", "end_date",
    "technologies", "collaborators", "status", "industry",
)
SORT_FIELDS = ("start_date", "end_date", "name", "status", "industry")
SORT_ORDERS = ("ASC", "DESC")


def format_project(row) -> dict:
    return {
        "id": row["id"],
        "userId": row["user_id"],
        "name": row["name"],
        "link": row["link"],
        "description": row["description"],
        "startDate": as_date(row["start_date"]),
        "endDate": as_date(row["end_date"]),
        "technologies": row["technologies"],
        "collaborators": row["collaborators"],
        "status": row["status"],
        "industry": row["industry"],
    }


class ProjectService:

    def create_project(self, user_id: str, data: dict) -> dict:
        project_id = new_id()
        params = {field: data.get(field) for field in PROJECT_FIELDS}
        for field in ("link", "description", "technologies", "collaborators", "industry"):
            params[field] = params[field] or None
        params.update({"id": project_id, "uid": user_id})
        with get_db_session() as db:
            db.execute(
                text("""
                    INSERT INTO projects (id, user_id, name, link, description, start_date, end_date,
                                          technologies, collaborators, status, industry)
                    VALUES (:id, :uid, :name, :link, :description, :start_date, :end_date,
                            :technologies, :collaborators, :status, :industry)
                """),
                params
            )
        return self.get_project(project_id, user_id)

    def list_projects(
        self,
        user_id: str,
        status: Optional[str] = None,
        industry: Optional[str] = None,
        technology: Optional[str] = None,
        start_date_from=None,
        start_date_to=None,
        sort_by: str = "start_date",
        sort_order: str = "DESC",
    ) -> List[dict]:
        query = "SELECT * FROM projects WHERE user_id = :uid"
        params = {"uid": user_id}

        if status:
            query += " AND status = :status"
            params["status"] = status
        if industry:
            query += " AND industry = :industry"
            params["industry"] = industry
        if technology:
            query += " AND LOWER(technologies) LIKE LOWER(:technology)"
            params["technology"] = contains(technology)
        if start_date_from:
            query += " AND start_date >= :start_from"
            params["start_from"] = start_date_from
        if start_date_to:
            query += " AND start_date <= :start_to"
            params["start_to"] = start_date_to

        # Column names can't be bound; only whitelisted values reach the SQL
        sort_order = (sort_order or "DESC").upper()
        if sort_by in SORT_FIELDS and sort_order in SORT_ORDERS:
            query += f" ORDER BY {sort_by} {sort_order}"
        else:
            query += " ORDER BY start_date DESC"

        with get_db_session() as db:
            result = db.execute(text(query), params)
            return [format_project(r) for r in result.mappings().fetchall()]

    def search_projects(self, user_id: str, term: str) -> List[dict]:
        with get_db_session() as db:
            result = db.execute(
                text("""
                    SELECT * FROM projects
                    WHERE user_id = :uid AND (
                        LOWER(name) LIKE LOWER(:term)
                        OR LOWER(description) LIKE LOWER(:term)
                        OR LOWER(technologies) LIKE LOWER(:term)
                        OR LOWER(collaborators) LIKE LOWER(:term)
                        OR LOWER(industry) LIKE LOWER(:term)
                    )
                    ORDER BY start_date DESC
                """),
                {"uid": user_id, "term": contains(term)}
            )
            return [format_project(r) for r in result.mappings().fetchall()]

    def get_project(self, project_id: str, user_id: str) -> dict:
        with get_db_session() as db:
            result = db.execute(
                text("SELECT * FROM projects WHERE id = :id AND user_id = :uid"),
                {"id": project_id, "uid": user_id}
            )
            row = result.mappings().fetchone()
        if not row:
            raise NotFoundError("Project not found")
        return format_project(row)

    def update_project(self, project_id: str, user_id: str, changes: dict) -> dict:
        existing = self.get_project(project_id, user_id)

        start = changes.get("start_date") or existing["startDate"]
        end = changes["end_date"] if "end_date" in changes else existing["endDate"]
        if end and start and end < start:
            raise ValidationError("End date cannot be before start date")

        updates, params = [], {"id": project_id, "uid": user_id}
        for field in PROJECT_FIELDS:
            if field not in changes:
                continue
            if field in ("name", "start_date", "status") and not changes[field]:
                raise ValidationError("Name, start date, and status are required")
            updates.append(f"{field} = :{field}")
            params[field] = changes[field] if changes[field] != "" else None

        if updates:
            with get_db_session() as db:
                db.execute(
                    text(f"UPDATE projects SET {', '.join(updates)} WHERE id = :id AND user_id = :uid"),
                    params
                )
        return self.get_project(project_id, user_id)

    def delete_project(self, project_id: str, user_id: str) -> dict:
        with get_db_session() as db:
            result = db.execute(
                text("DELETE FROM projects WHERE id = :id AND user_id = :uid"),
                {"id": project_id, "uid": user_id}
            )
            if result.rowcount == 0:
                raise NotFoundError("Project not found")
        return {"id": project_id, "message": "Project deleted successfully"}

    def get_statistics(self, user_id: str) -> dict:
        by_status = execute_raw_sql(
            "SELECT status, COUNT(*) AS count FROM projects WHERE user_id = :uid GROUP BY status",
            {"uid": user_id}
        )
        with get_db_session() as db:
            tech_rows = db.execute(
                text("SELECT technologies FROM projects WHERE user_id = :uid AND technologies IS NOT NULL"),
                {"uid": user_id}
            ).fetchall()

        technologies = set()
        for (value,) in tech_rows:
            technologies.update(t.strip().lower() for t in value.split(",") if t.strip())

        status_counts = {row["status"]: int(row["count"]) for row in by_status}
        return {
            "total": sum(status_counts.values()),
            "byStatus": status_counts,
            "uniqueTechnologies": len(technologies),
        }


def get_project_service() -> ProjectService:
    return ProjectService()
