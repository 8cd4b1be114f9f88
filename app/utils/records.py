"""
Row helpers shared by the SQL services.

PostgreSQL hands back date/bool/Decimal objects while SQLite returns
ISO strings and 0/1 integers; these normalise both.
"""

import uuid
from datetime import date, datetime
from typing import Any, Optional


def new_id() -> str:
    return str(uuid.uuid4())


def as_date(value: Any) -> Optional[date]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


def as_bool(value: Any) -> bool:
    return bool(value) if value is not None else False


def as_float(value: Any) -> Optional[float]:
    return float(value) if value is not None else None


def contains(term: str) -> str:
    """LIKE pattern for a substring search."""
    return f"%{term}%"
