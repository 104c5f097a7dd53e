"""
Pure validation helpers.

Every helper returns a list of human readable messages (empty = valid) and
never raises on bad user input. Fields, rules and products compose these.
"""
from __future__ import annotations

import re
from datetime import date, datetime, time
from decimal import Decimal, InvalidOperation
from numbers import Number
from typing import Any, Iterable, List, Optional

from .formatting import format_date

D = Decimal


# -----------------------------
# Coercion
# -----------------------------


def is_numeric(value: Any) -> bool:
    return isinstance(value, Number) and not isinstance(value, bool)


def parse_number(value: Any) -> Optional[D]:
    """Decimal for numbers and numeric strings, None for anything else."""
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, D):
        return value if value.is_finite() else None
    if isinstance(value, (int, float)):
        value = str(value)
    if not isinstance(value, str):
        return None
    try:
        parsed = D(value.strip())
    except InvalidOperation:
        return None
    return parsed if parsed.is_finite() else None


def parse_datetime(value: Any) -> Optional[datetime]:
    """
    datetime / date / ISO-8601 string -> naive datetime (local time).
    Aware datetimes are converted to local time first so they compare with naive bounds.
    """
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, date):
        dt = datetime.combine(value, time.min)
    elif isinstance(value, str):
        try:
            dt = datetime.fromisoformat(value.strip())
        except ValueError:
            return None
    else:
        return None

    if dt.tzinfo is not None:
        dt = dt.astimezone().replace(tzinfo=None)
    return dt


def is_empty(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, (list, tuple, set, dict)):
        return len(value) == 0
    return str(value) == ""


# -----------------------------
# Checks
# -----------------------------


def validate_required(label: str, value: Any) -> List[str]:
    if value is None or str(value).strip() == "" or (
        isinstance(value, (list, tuple, set)) and not value
    ):
        return [f"{label} is required"]
    return []


def validate_number_range(
    label: str, value: Any, *, min_value: Any = None, max_value: Any = None
) -> List[str]:
    errors: List[str] = []
    if not is_numeric(value):
        return errors

    if min_value is not None and value < min_value:
        errors.append(f"{label} must be greater than or equal to {min_value}")
    if max_value is not None and value > max_value:
        errors.append(f"{label} must be less than or equal to {max_value}")
    return errors


def validate_text_length(
    label: str,
    value: Optional[str],
    *,
    min_length: Optional[int] = None,
    max_length: Optional[int] = None,
) -> List[str]:
    errors: List[str] = []
    if value is None:
        return errors

    if min_length is not None and len(value) < min_length:
        errors.append(f"{label} must have at least {min_length} characters")
    if max_length is not None and len(value) > max_length:
        errors.append(f"{label} must have at most {max_length} characters")
    return errors


def validate_pattern(
    label: str, value: Any, pattern: str, message: Optional[str] = None
) -> List[str]:
    if value is None or str(value) == "":
        return []
    if not re.search(pattern, str(value)):
        return [message or f"{label} does not match the expected format"]
    return []


def validate_date_range(
    label: str,
    value: Optional[datetime],
    *,
    min_date: Optional[datetime] = None,
    max_date: Optional[datetime] = None,
) -> List[str]:
    errors: List[str] = []
    if value is None:
        return errors

    if min_date is not None and value < min_date:
        errors.append(f"{label} must be on or after {format_date(min_date)}")
    if max_date is not None and value > max_date:
        errors.append(f"{label} must be on or before {format_date(max_date)}")
    return errors


def validate_in_list(label: str, value: Any, allowed: Iterable[Any]) -> List[str]:
    if value is None:
        return []
    allowed = list(allowed)
    if value not in allowed:
        return [f"{label} must be one of: {', '.join(str(a) for a in allowed)}"]
    return []


def validate_integer(label: str, value: Optional[D]) -> List[str]:
    if value is None:
        return []
    if value != value.to_integral_value():
        return [f"{label} must be a whole number"]
    return []


def validate_positive(label: str, value: Any) -> List[str]:
    if not is_numeric(value):
        return []
    if value <= 0:
        return [f"{label} must be greater than zero"]
    return []
