"""Scope and window parsing for query callers."""

import re
from datetime import date
from typing import Any, Optional

from ledgerhealth.domain import errors
from ledgerhealth.domain.entities import Scope, Window
from ledgerhealth.domain.errors import ValidationError
from ledgerhealth.utils.date_parser import get_period_window, month_bucket, to_date

UUID_RE = re.compile(
    r"^[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[1-5][0-9a-fA-F]{3}-[89abAB][0-9a-fA-F]{3}-[0-9a-fA-F]{12}$"
)


def is_uuid(value: Optional[str]) -> bool:
    """True for a v1-v5 UUID string."""
    return isinstance(value, str) and UUID_RE.match(value) is not None


def _clean(value: Any) -> Optional[str]:
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def parse_scope(program_id: Any = None, unit_id: Any = None) -> Scope:
    """Validate scope identifiers.

    Raises:
        ValidationError: If either identifier is present but not a UUID
    """
    program_id = _clean(program_id)
    unit_id = _clean(unit_id)
    if program_id is not None and not is_uuid(program_id):
        raise ValidationError(
            errors.invalid_identifier("program id", program_id), errors.INVALID_PROGRAM_ID
        )
    if unit_id is not None and not is_uuid(unit_id):
        raise ValidationError(
            errors.invalid_identifier("unit id", unit_id), errors.INVALID_UNIT_ID
        )
    return Scope(program_id=program_id, unit_id=unit_id)


def parse_window(start: Any = None, end: Any = None) -> Window:
    """Build a half-open window on the report month from optional bounds.

    Rows are bucketed by month, so a start inside a month is moved back to
    the first of that month. The end stays exclusive: a month is included
    when its first day falls before it.

    Raises:
        ValidationError: If a bound cannot be parsed as a date
    """
    try:
        start, end = to_date(start), to_date(end)
    except ValueError as e:
        raise ValidationError(str(e), errors.INVALID_DATE) from e
    return Window(start=month_bucket(start) if start is not None else None, end=end)


def resolve_overview_window(
    period: Optional[str] = None,
    start: Any = None,
    end: Any = None,
    today: Optional[date] = None,
) -> Window:
    """Resolve the window for the health overview.

    Explicit start and end win (bucketed to month starts); otherwise the
    period preset is used, defaulting to the last three full months.
    """
    window = parse_window(start, end)
    if window.start is not None and window.end is not None:
        return Window(start=month_bucket(window.start), end=month_bucket(window.end))
    try:
        preset_start, preset_end = get_period_window(period or "3m", today=today)
    except ValueError as e:
        raise ValidationError(str(e)) from e
    return Window(start=preset_start, end=preset_end)
