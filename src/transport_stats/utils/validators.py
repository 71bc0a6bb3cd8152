"""Input validation helpers for caller-supplied filter and report arguments."""

from __future__ import annotations

import re
from datetime import date

from transport_stats.domain.exceptions import ValidationError

_MONTH_PATTERN = re.compile(r"^\d{4}-(0[1-9]|1[0-2])$")


def validate_month(month: str) -> None:
    if not isinstance(month, str) or not _MONTH_PATTERN.match(month):
        raise ValidationError("month must use the YYYY-MM format", context={"month": month})


def validate_date(value: str) -> date:
    try:
        return date.fromisoformat(value)
    except (TypeError, ValueError) as exc:
        raise ValidationError(
            "date must use the YYYY-MM-DD format", context={"date": value}
        ) from exc


def validate_date_range(start: str, end: str) -> None:
    if validate_date(start) > validate_date(end):
        raise ValidationError(
            "start date must not be after end date", context={"start": start, "end": end}
        )

