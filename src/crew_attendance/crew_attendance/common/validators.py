from __future__ import annotations

import re
from datetime import datetime
from typing import Any, Iterable

from ..core.constants import MAX_YEAR, MIN_YEAR
from ..core.exceptions import ValidationError
from .datetime_utils import as_utc, parse_timestamp

# ASCII digits only: str.isdigit also accepts superscripts that int() rejects.
_INT_PATTERN = re.compile(r"-?[0-9]+")


def require_non_empty(value: Any, field_name: str) -> str:
    if value is None or not str(value).strip():
        raise ValidationError(f"{field_name} is required")
    return str(value).strip()


def require_int(value: Any, field_name: str) -> int:
    """Accept ints and numeric strings; reject bools, floats and garbage."""
    if isinstance(value, bool):
        raise ValidationError(f"{field_name} must be an integer")
    if isinstance(value, int):
        return value
    if isinstance(value, str) and _INT_PATTERN.fullmatch(value.strip()):
        return int(value.strip())
    raise ValidationError(f"{field_name} must be an integer, got {value!r}")


def require_year_month(year: Any, month: Any) -> tuple[int, int]:
    y = require_int(year, "year")
    m = require_int(month, "month")
    if not MIN_YEAR <= y <= MAX_YEAR:
        raise ValidationError(f"year must be between {MIN_YEAR} and {MAX_YEAR}, got {y}")
    if not 1 <= m <= 12:
        raise ValidationError(f"month must be between 1 and 12, got {m}")
    return y, m


def require_positive_id(value: Any, field_name: str) -> int:
    ident = require_int(value, field_name)
    if ident <= 0:
        raise ValidationError(f"{field_name} must be a positive integer")
    return ident


def require_user_ids(values: Any) -> list[str]:
    if not isinstance(values, (list, tuple)) or not values:
        raise ValidationError("userIds must be a non-empty list")

    user_ids = [require_non_empty(v, "userId") for v in values]
    duplicates = _duplicates(user_ids)
    if duplicates:
        raise ValidationError(f"userIds contains duplicates: {', '.join(duplicates)}")
    return user_ids


def require_timestamp(value: Any, field_name: str = "timestamp") -> datetime:
    if isinstance(value, str):
        try:
            value = parse_timestamp(value)
        except ValueError:
            raise ValidationError(f"{field_name} must be an ISO-8601 timestamp")
    if not isinstance(value, datetime):
        raise ValidationError(f"{field_name} must be a timestamp")
    if value.tzinfo is None:
        raise ValidationError(f"{field_name} must carry a UTC offset")
    return as_utc(value)


def _duplicates(values: Iterable[str]) -> list[str]:
    seen: set[str] = set()
    dupes: list[str] = []
    for v in values:
        if v in seen and v not in dupes:
            dupes.append(v)
        seen.add(v)
    return dupes
