"""
Application Service - legacy job applications stored in MongoDB.

Collection:
1. applications - one document per tracked application

WHY MongoDB for these?
- Contacts and tags are nested lists
- Each application is self-contained, no joins needed
- Predates the relational tracker and is kept for existing data

Documents are stored with snake_case keys and rendered to camelCase,
with the derived statusText / fullLocation / salaryRange fields added.
"""

import math
import re
from datetime import datetime
from typing import Optional

from bson import ObjectId
from bson.errors import InvalidId
from pymongo.collection import Collection

from app.core.errors import NotFoundError
from app.db.mongodb import COLLECTIONS, get_collection

STATUS_TEXT = {
    "pending": "Pending Review",
    "reviewed": "Under Review",
    "interview": "Interview Scheduled",
    "offer": "Offer Received",
    "rejected": "Not Selected",
    "withdrawn": "Withdrawn",
}

PERIOD_TEXT = {"yearly": "year", "monthly": "month", "hourly": "hour"}

# Writable document keys (same as the request attribute names)
APPLICATION_FIELDS = {
    "position",
    "company",
    "company_website",
    "location",
    "salary",
    "employment_type",
    "status",
    "source",
    "job_description",
    "notes",
    "applied_date",
    "next_follow_up",
    "contacts",
    "tags",
}


# ============================================================
# HELPER: Convert documents for JSON responses
# ============================================================

def serialize_doc(doc: dict) -> dict:
    """Convert MongoDB document to JSON-serializable dict."""
    if doc is None:
        return None
    if "_id" in doc:
        doc["_id"] = str(doc["_id"])
    return doc


def _money(value: float) -> str:
    return f"{value:,.0f}" if float(value).is_integer() else f"{value:,.2f}"


def salary_range(salary: Optional[dict]) -> Optional[str]:
    salary = salary or {}
    low, high = salary.get("min"), salary.get("max")
    if not low and not high:
        return None
    period = PERIOD_TEXT.get(salary.get("period") or "yearly", "year")
    if low and high:
        return f"${_money(low)} - ${_money(high)} per {period}"
    if low:
        return f"${_money(low)}+ per {period}"
    return f"Up to ${_money(high)} per {period}"


def full_location(location: Optional[dict]) -> str:
    location = location or {}
    parts = [location.get("city"), location.get("state")]
    country = location.get("country")
    if country and country != "US":
        parts.append(country)
    return ", ".join(p for p in parts if p)


def format_application(doc: dict) -> dict:
    doc = serialize_doc(doc)
    location = doc.get("location") or {}
    salary = doc.get("salary") or {}
    return {
        "id": doc["_id"],
        "userId": doc.get("user_id"),
        "position": doc.get("position"),
        "company": doc.get("company"),
        "companyWebsite": doc.get("company_website"),
        "location": location,
        "salary": salary,
        "employmentType": doc.get("employment_type"),
        "status": doc.get("status"),
        "source": doc.get("source"),
        "jobDescription": doc.get("job_description"),
        "notes": doc.get("notes"),
        "appliedDate": doc.get("applied_date"),
        "lastActivity": doc.get("last_activity"),
        "nextFollowUp": doc.get("next_follow_up"),
        "contacts": doc.get("contacts", []),
        "tags": doc.get("tags", []),
        "isArchived": doc.get("is_archived", False),
        "createdAt": doc.get("created_at"),
        "updatedAt": doc.get("updated_at"),
        "statusText": STATUS_TEXT.get(doc.get("status"), "Unknown"),
        "fullLocation": full_location(location),
        "salaryRange": salary_range(salary),
    }


def _object_id(application_id: str) -> ObjectId:
    try:
        return ObjectId(application_id)
    except (InvalidId, TypeError):
        raise NotFoundError("Application not found")


class ApplicationService:
    """
    Handles application documents.
    Every query is scoped by the owning user id.
    """

    def __init__(self):
        self.collection: Collection = get_collection(COLLECTIONS["applications"])

    def list_applications(self, user_id: str, status: Optional[str] = None, search: Optional[str] = None,
                          page: int = 1, limit: int = 10) -> dict:
        query = {"user_id": user_id, "is_archived": False}
        if status and status != "all":
            query["status"] = status
        if search:
            # Escape user input, match case-insensitively on position or company
            pattern = {"$regex": re.escape(search), "$options": "i"}
            query["$or"] = [{"position": pattern}, {"company": pattern}]

        total = self.collection.count_documents(query)
        cursor = (
            self.collection.find(query)
            .sort("applied_date", -1)
            .skip((page - 1) * limit)
            .limit(limit)
        )
        return {
            "applications": [format_application(doc) for doc in cursor],
            "pagination": {
                "current": page,
                "pages": math.ceil(total / limit) if limit else 0,
                "total": total,
            },
        }

    def stats(self, user_id: str) -> dict:
        result = {"total": 0, **{status: 0 for status in STATUS_TEXT}}
        pipeline = [
            {"$match": {"user_id": user_id, "is_archived": False}},
            {"$group": {"_id": "$status", "count": {"$sum": 1}}},
        ]
        for row in self.collection.aggregate(pipeline):
            result[row["_id"]] = row["count"]
            result["total"] += row["count"]
        return result

    def get(self, user_id: str, application_id: str) -> dict:
        doc = self.collection.find_one({"_id": _object_id(application_id), "user_id": user_id})
        if not doc:
            raise NotFoundError("Application not found")
        return format_application(doc)

    def create(self, user_id: str, data: dict) -> dict:
        now = datetime.utcnow()
        doc = {k: v for k, v in data.items() if k in APPLICATION_FIELDS}
        doc.update({
            "user_id": user_id,
            "applied_date": doc.get("applied_date") or now,
            "last_activity": now,
            "is_archived": False,
            "created_at": now,
            "updated_at": now,
        })
        result = self.collection.insert_one(doc)
        return self.get(user_id, str(result.inserted_id))

    def update(self, user_id: str, application_id: str, changes: dict) -> dict:
        now = datetime.utcnow()
        update = {k: v for k, v in changes.items() if k in APPLICATION_FIELDS}
        update.update({"last_activity": now, "updated_at": now})
        result = self.collection.update_one(
            {"_id": _object_id(application_id), "user_id": user_id},
            {"$set": update}
        )
        if result.matched_count == 0:
            raise NotFoundError("Application not found")
        return self.get(user_id, application_id)

    def delete(self, user_id: str, application_id: str) -> None:
        result = self.collection.delete_one({"_id": _object_id(application_id), "user_id": user_id})
        if result.deleted_count == 0:
            raise NotFoundError("Application not found")

    def set_archived(self, user_id: str, application_id: str, archived: bool) -> dict:
        now = datetime.utcnow()
        result = self.collection.update_one(
            {"_id": _object_id(application_id), "user_id": user_id},
            {"$set": {"is_archived": archived, "last_activity": now, "updated_at": now}}
        )
        if result.matched_count == 0:
            raise NotFoundError("Application not found")
        return self.get(user_id, application_id)

    def delete_for_user(self, user_id: str) -> int:
        return self.collection.delete_many({"user_id": user_id}).deleted_count


def get_application_service() -> ApplicationService:
    return ApplicationService()
