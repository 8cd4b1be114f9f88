"""
Certification Service - certifications with expiration tracking.

Every certification is returned with a computed status:
    permanent       never_expires is set
    no_expiration   no expiration date recorded
    expired         expiration date has passed
    expiring_soon   expires within EXPIRING_SOON_DAYS
    active          otherwise
"""

from datetime import date, timedelta
from typing import List, Optional

from sqlalchemy import text

from app.core.errors import NotFoundError, ValidationError
from app.db.postgres import get_db_session
from app.utils.records import as_bool, as_date, contains, new_id

EXPIRING_SOON_DAYS = 30


def days_until_expiration(expiration_date: Optional[date], never_expires: bool) -> Optional[int]:
    if never_expires or not expiration_date:
        return None
    return (expiration_date - date.today()).days


def certification_status(expiration_date: Optional[date], never_expires: bool) -> str:
    if never_expires:
        return "permanent"
    if not expiration_date:
        return "no_expiration"
    days = days_until_expiration(expiration_date, never_expires)
    if days < 0:
        return "expired"
    if days <= EXPIRING_SOON_DAYS:
        return "expiring_soon"
    return "active"


def validate_certification_dates(date_earned: date, expiration_date: Optional[date], never_expires: bool) -> None:
    if date_earned > date.today():
        raise ValidationError("Date earned cannot be in the future")
    if not never_expires and expiration_date and expiration_date <= date_earned:
        raise ValidationError("Expiration date must be after date earned")


def format_certification(row) -> dict:
    expiration = as_date(row["expiration_date"])
    never_expires = as_bool(row["never_expires"])
    return {
        "id": row["id"],
        "userId": row["user_id"],
        "name": row["name"],
        "orgName": row["org_name"],
        "dateEarned": as_date(row["date_earned"]),
        "expirationDate": expiration,
        "neverExpires": never_expires,
        "status": certification_status(expiration, never_expires),
        "daysUntilExpiration": days_until_expiration(expiration, never_expires),
    }


class CertificationService:

    def _query(self, where: str, params: dict, order: str = "date_earned DESC") -> List[dict]:
        with get_db_session() as db:
            result = db.execute(
                text(f"SELECT * FROM certifications WHERE user_id = :uid{where} ORDER BY {order}"),
                params
            )
            return [format_certification(r) for r in result.mappings().fetchall()]

    def create_certification(self, user_id: str, data: dict) -> dict:
        never_expires = bool(data.get("never_expires"))
        validate_certification_dates(data["date_earned"], data.get("expiration_date"), never_expires)

        certification_id = new_id()
        with get_db_session() as db:
            db.execute(
                text("""
                    INSERT INTO certifications (id, user_id, name, org_name, date_earned, expiration_date, never_expires)
                    VALUES (:id, :uid, :name, :org_name, :date_earned, :expiration_date, :never_expires)
                """),
                {
                    "id": certification_id,
                    "uid": user_id,
                    "name": data["name"],
                    "org_name": data["org_name"],
                    "date_earned": data["date_earned"],
                    "expiration_date": None if never_expires else data.get("expiration_date"),
                    "never_expires": never_expires,
                }
            )
        return self.get_certification(certification_id, user_id)

    def list_certifications(self, user_id: str) -> List[dict]:
        return self._query("", {"uid": user_id})

    def get_certification(self, certification_id: str, user_id: str) -> dict:
        found = self._query(" AND id = :id", {"uid": user_id, "id": certification_id})
        if not found:
            raise NotFoundError("Certification not found")
        return found[0]

    def update_certification(self, certification_id: str, user_id: str, changes: dict) -> dict:
        existing = self.get_certification(certification_id, user_id)

        for attr in ("name", "org_name", "date_earned"):
            if attr in changes and not changes[attr]:
                raise ValidationError("Name, organization, and date earned are required")

        never_expires = changes.get("never_expires")
        if never_expires is None:
            never_expires = existing["neverExpires"]
        date_earned = changes.get("date_earned") or existing["dateEarned"]
        expiration = changes["expiration_date"] if "expiration_date" in changes else existing["expirationDate"]
        if never_expires:
            expiration = None
        validate_certification_dates(date_earned, expiration, never_expires)

        with get_db_session() as db:
            db.execute(
                text("""
                    UPDATE certifications
                    SET name = :name, org_name = :org_name, date_earned = :date_earned,
                        expiration_date = :expiration_date, never_expires = :never_expires
                    WHERE id = :id AND user_id = :uid
                """),
                {
                    "id": certification_id,
                    "uid": user_id,
                    "name": changes.get("name") or existing["name"],
                    "org_name": changes.get("org_name") or existing["orgName"],
                    "date_earned": date_earned,
                    "expiration_date": expiration,
                    "never_expires": bool(never_expires),
                }
            )
        return self.get_certification(certification_id, user_id)

    def delete_certification(self, certification_id: str, user_id: str) -> dict:
        with get_db_session() as db:
            result = db.execute(
                text("DELETE FROM certifications WHERE id = :id AND user_id = :uid"),
                {"id": certification_id, "uid": user_id}
            )
            if result.rowcount == 0:
                raise NotFoundError("Certification not found")
        return {"id": certification_id, "message": "Certification deleted successfully"}

    def get_current(self, user_id: str) -> List[dict]:
        """Certifications that have not expired (expiring soon included)."""
        return [c for c in self.list_certifications(user_id) if c["status"] != "expired"]

    def get_history(self, user_id: str) -> List[dict]:
        return [c for c in self.list_certifications(user_id) if c["status"] == "expired"]

    def get_expiring(self, user_id: str, days_ahead: int = EXPIRING_SOON_DAYS) -> List[dict]:
        """Expiring within days_ahead, including ones already past."""
        return self._query(
            " AND never_expires = FALSE AND expiration_date IS NOT NULL AND expiration_date <= :limit_date",
            {"uid": user_id, "limit_date": date.today() + timedelta(days=days_ahead)},
            order="expiration_date ASC",
        )

    def search(self, user_id: str, term: str) -> List[dict]:
        return self._query(
            " AND (LOWER(name) LIKE LOWER(:term) OR LOWER(org_name) LIKE LOWER(:term))",
            {"uid": user_id, "term": contains(term)},
        )

    def get_by_organization(self, user_id: str, organization: str) -> List[dict]:
        return self._query(
            " AND LOWER(org_name) LIKE LOWER(:org)",
            {"uid": user_id, "org": contains(organization)},
        )

    def get_statistics(self, user_id: str) -> dict:
        certifications = self.list_certifications(user_id)
        statuses = [c["status"] for c in certifications]
        return {
            "totalCertifications": len(certifications),
            "permanentCertifications": statuses.count("permanent"),
            "expiringCertifications": sum(1 for c in certifications
                                          if not c["neverExpires"] and c["expirationDate"]),
            "expiredCertifications": statuses.count("expired"),
            "expiringSoon": statuses.count("expiring_soon"),
            "active": statuses.count("active"),
        }


def get_certification_service() -> CertificationService:
    return CertificationService()
