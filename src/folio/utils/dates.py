"""Date coercion helpers for front-matter values."""

from __future__ import annotations

import re
from datetime import date, datetime

_DATE_PREFIX = re.compile(r"^(\d{4}-\d{2}-\d{2})")


def coerce_date(value: date | datetime | str) -> date:
    """Convert a front-matter date value to :class:`datetime.date`.

    YAML already turns ``2024-05-01`` into a ``date``; quoted values and
    timestamps arrive as strings.

    Examples:
        >>> coerce_date("2024-05-01")
        datetime.date(2024, 5, 1)
        >>> coerce_date("2024-05-01T10:30:00")
        datetime.date(2024, 5, 1)

    Raises:
        ValueError: If the value cannot be read as a date
        TypeError: If value type is not supported

    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value

    if isinstance(value, str):
        text = value.strip()
        try:
            return datetime.fromisoformat(text).date()
        except ValueError:
            pass
        match = _DATE_PREFIX.match(text)
        if match:
            try:
                return date.fromisoformat(match.group(1))
            except ValueError as e:
                msg = f"Invalid calendar date: {value!r}"
                raise ValueError(msg) from e
        msg = f"Cannot parse date from string: {value!r}. Expected YYYY-MM-DD."
        raise ValueError(msg)

    msg = f"Unsupported date type: {type(value).__name__}"
    raise TypeError(msg)


__all__ = ["coerce_date"]
