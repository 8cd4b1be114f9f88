"""
Job Service - employment history.

At most one job per user is current. Setting isCurrent clears the flag
on the user's other jobs in the same transaction, and the partial unique
index uq_jobs_one_current rejects anything that slips past.
"""

import logging
from typing import List, Optional

from sqlalchemy import text

from app.core.errors import NotFoundError, ValidationError
from app.db.postgres import get_db_session
from app.utils.records import as_bool, as_date, new_id

logger = logging.getLogger(__name__)

JOB_COLUMNS = "id, user_id, title, company, location, start_date, end_date, is_current, description"
SORT_ORDERS = {
    "start_date": "start_date ASC",
    "-start_date": "start_date DESC",
}


def format_job(row) -> dict:
    return {
        "id": row["id"],
        "userId": row["user_id"],
        "title": row["title"],
        "company": row["company"],
        "location": row["location"],
        "startDate": as_date(row["start_date"]),
        "endDate": as_date(row["end_date"]),
        "isCurrent": as_bool(row["is_current"]),
        "description": row["description"],
    }


def check_job_dates(start_date, end_date, is_current: bool) -> None:
    if is_current and end_date:
        raise ValidationError("Current job cannot have an end date")
    if start_date and end_date and end_date <= start_date:
        raise ValidationError("End date must be after start date")


def _clear_current(db, user_id: str, exclude_job_id: Optional[str] = None) -> None:
    db.execute(
        text("""
            UPDATE jobs SET is_current = FALSE
            WHERE user_id = :uid AND is_current = TRUE AND id != :exclude
        """),
        {"uid": user_id, "exclude": exclude_job_id or ""}
    )


class JobService:

    def create_job(self, user_id: str, data: dict) -> dict:
        check_job_dates(data["start_date"], data.get("end_date"), data.get("is_current", False))
        job_id = new_id()
        with get_db_session() as db:
            if data.get("is_current"):
                _clear_current(db, user_id)
            db.execute(
                text("""
                    INSERT INTO jobs (id, user_id, title, company, location, start_date, end_date, is_current, description)
                    VALUES (:id, :user_id, :title, :company, :location, :start_date, :end_date, :is_current, :description)
                """),
                {
                    "id": job_id,
                    "user_id": user_id,
                    "title": data["title"],
                    "company": data["company"],
                    "location": data.get("location") or None,
                    "start_date": data["start_date"],
                    "end_date": data.get("end_date"),
                    "is_current": bool(data.get("is_current")),
                    "description": data.get("description") or None,
                }
            )
        return self.get_job(job_id, user_id)

    def get_job(self, job_id: str, user_id: str) -> dict:
        with get_db_session() as db:
            result = db.execute(
                text(f"SELECT {JOB_COLUMNS} FROM jobs WHERE id = :id AND user_id = :uid"),
                {"id": job_id, "uid": user_id}
            )
            row = result.mappings().fetchone()
        if not row:
            raise NotFoundError("Job not found")
        return format_job(row)

    def list_jobs(self, user_id: str, sort: str = "-start_date", limit: int = 50, offset: int = 0) -> dict:
        order = SORT_ORDERS.get(sort, SORT_ORDERS["-start_date"])
        with get_db_session() as db:
            total = db.execute(
                text("SELECT COUNT(*) FROM jobs WHERE user_id = :uid"), {"uid": user_id}
            ).scalar()
            result = db.execute(
                text(f"""
                    SELECT {JOB_COLUMNS} FROM jobs WHERE user_id = :uid
                    ORDER BY {order}, id
                    LIMIT :limit OFFSET :offset
                """),
                {"uid": user_id, "limit": limit, "offset": offset}
            )
            rows = result.mappings().fetchall()
        return {
            "jobs": [format_job(r) for r in rows],
            "pagination": {"total": total, "limit": limit, "offset": offset},
        }

    def get_current_job(self, user_id: str) -> Optional[dict]:
        with get_db_session() as db:
            result = db.execute(
                text(f"SELECT {JOB_COLUMNS} FROM jobs WHERE user_id = :uid AND is_current = TRUE"),
                {"uid": user_id}
            )
            row = result.mappings().fetchone()
        return format_job(row) if row else None

    def get_job_history(self, user_id: str) -> List[dict]:
        """Start date desc, then end date desc with open-ended jobs last."""
        with get_db_session() as db:
            result = db.execute(
                text(f"""
                    SELECT {JOB_COLUMNS} FROM jobs WHERE user_id = :uid
                    ORDER BY start_date DESC, CASE WHEN end_date IS NULL THEN 1 ELSE 0 END, end_date DESC
                """),
                {"uid": user_id}
            )
            return [format_job(r) for r in result.mappings().fetchall()]

    def update_job(self, job_id: str, user_id: str, changes: dict) -> dict:
        existing = self.get_job(job_id, user_id)

        # A job marked current loses its end date unless one was sent explicitly
        if changes.get("is_current") and "end_date" not in changes:
            changes["end_date"] = None

        is_current = changes.get("is_current", existing["isCurrent"])
        start_date = changes.get("start_date") or existing["startDate"]
        end_date = changes["end_date"] if "end_date" in changes else existing["endDate"]
        check_job_dates(start_date, end_date, is_current)

        allowed = ("title", "company", "location", "start_date", "end_date", "is_current", "description")
        updates, params = [], {"id": job_id, "uid": user_id}
        for column in allowed:
            if column in changes:
                if column in ("title", "company", "start_date") and changes[column] is None:
                    raise ValidationError(f"{column.replace('_', ' ').capitalize()} cannot be empty")
                updates.append(f"{column} = :{column}")
                value = changes[column]
                params[column] = bool(value) if column == "is_current" else value

        if not updates:
            return existing

        with get_db_session() as db:
            if changes.get("is_current"):
                _clear_current(db, user_id, exclude_job_id=job_id)
            db.execute(
                text(f"UPDATE jobs SET {', '.join(updates)} WHERE id = :id AND user_id = :uid"),
                params
            )
        return self.get_job(job_id, user_id)

    def delete_job(self, job_id: str, user_id: str) -> dict:
        with get_db_session() as db:
            result = db.execute(
                text("DELETE FROM jobs WHERE id = :id AND user_id = :uid"),
                {"id": job_id, "uid": user_id}
            )
            if result.rowcount == 0:
                raise NotFoundError("Job not found")
        return {"id": job_id, "message": "Job deleted successfully"}

    def get_statistics(self, user_id: str) -> dict:
        with get_db_session() as db:
            result = db.execute(
                text("""
                    SELECT
                        COUNT(*) AS total_jobs,
                        SUM(CASE WHEN is_current = TRUE THEN 1 ELSE 0 END) AS current_jobs,
                        SUM(CASE WHEN is_current = FALSE THEN 1 ELSE 0 END) AS past_jobs,
                        MIN(start_date) AS earliest_start,
                        MAX(CASE WHEN is_current = FALSE THEN end_date END) AS latest_end
                    FROM jobs WHERE user_id = :uid
                """),
                {"uid": user_id}
            )
            stats = result.mappings().fetchone()
        return {
            "totalJobs": int(stats["total_jobs"] or 0),
            "currentJobs": int(stats["current_jobs"] or 0),
            "pastJobs": int(stats["past_jobs"] or 0),
            "earliestStart": as_date(stats["earliest_start"]),
            "latestEnd": as_date(stats["latest_end"]),
        }


def get_job_service() -> JobService:
    return JobService()
