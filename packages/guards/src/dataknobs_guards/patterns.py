"""Regular expressions for the string predicates, and ISO 8601 parsing.

All patterns are meant to be used with ``fullmatch``.
"""

from __future__ import annotations

import re
from datetime import datetime, timedelta, timezone

COLOR_STRING_RE = re.compile(r"#[0-9a-f]{6}", re.IGNORECASE)
COLOR_STRING_ALPHA_RE = re.compile(r"#[0-9a-f]{6}(?:[0-9a-f]{2})?", re.IGNORECASE)

BASE64_RE = re.compile(r"(?:[A-Za-z0-9+/]{4})*(?:[A-Za-z0-9+/]{2}==|[A-Za-z0-9+/]{3}=)?")

UUID4_RE = re.compile(
    r"[a-f0-9]{8}-[a-f0-9]{4}-4[a-f0-9]{3}-[89ab][a-f0-9]{3}-[a-f0-9]{12}",
    re.IGNORECASE,
)

# Calendar or ordinal date (leap years included), 'T', time without
# fractions, then 'Z' or an offset. Separators must be used consistently.
ISO8601_RE = re.compile(
    r"(?:[1-9]\d{3}(-?)(?:(?:0[1-9]|1[0-2])\1(?:0[1-9]|1\d|2[0-8])|(?:0[13-9]|1[0-2])\1(?:29|30)"
    r"|(?:0[13578]|1[02])(?:\1)31|00[1-9]|0[1-9]\d|[12]\d{2}|3(?:[0-5]\d|6[0-5]))"
    r"|(?:[1-9]\d(?:0[48]|[2468][048]|[13579][26])|(?:[2468][048]|[13579][26])00)(?:(-?)02(?:\2)29|-?366))"
    r"T(?:[01]\d|2[0-3])(:?)[0-5]\d(?:\3[0-5]\d)?(?:Z|[+-][01]\d(?:\3[0-5]\d)?)",
    re.ASCII,
)

_ISO8601_PARTS_RE = re.compile(
    r"(?P<year>\d{4})-?(?:(?P<month>\d{2})-?(?P<day>\d{2})|(?P<ordinal>\d{3}))"
    r"T(?P<hour>\d{2}):?(?P<minute>\d{2})(?::?(?P<second>\d{2}))?"
    r"(?:(?P<utc>Z)|(?P<sign>[+-])(?P<tzhour>\d{2})(?::?(?P<tzminute>\d{2}))?)",
    re.ASCII,
)


def parse_iso8601(value: str) -> datetime | None:
    """Parse a string accepted by ``ISO8601_RE`` into an aware datetime.

    Returns:
        The parsed datetime, or None if the string isn't a valid date
    """
    if not ISO8601_RE.fullmatch(value):
        return None

    parts = _ISO8601_PARTS_RE.fullmatch(value)
    if parts is None:
        return None

    if parts["utc"]:
        tz = timezone.utc
    else:
        offset = timedelta(hours=int(parts["tzhour"]), minutes=int(parts["tzminute"] or 0))
        tz = timezone(-offset if parts["sign"] == "-" else offset)

    try:
        if parts["ordinal"] is not None:
            day = datetime(int(parts["year"]), 1, 1) + timedelta(days=int(parts["ordinal"]) - 1)
            year, month, day_of_month = day.year, day.month, day.day
        else:
            year, month, day_of_month = int(parts["year"]), int(parts["month"]), int(parts["day"])

        return datetime(
            year,
            month,
            day_of_month,
            int(parts["hour"]),
            int(parts["minute"]),
            int(parts["second"] or 0),
            tzinfo=tz,
        )
    except (ValueError, OverflowError):
        return None
