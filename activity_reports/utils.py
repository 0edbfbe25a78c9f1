"""General utility helpers shared across modules."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any


def utc_now() -> datetime:
    """Return current UTC time as timezone-aware datetime."""

    return datetime.now(timezone.utc)


def isoformat_z(value: datetime) -> str:
    """Format ``value`` as ``YYYY-MM-DDTHH:MM:SS.mmmZ`` in UTC."""

    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    value = value.astimezone(timezone.utc)
    return value.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def short_date(value: datetime) -> str:
    """Format ``value`` as an unpadded ``M/D/YYYY`` date string."""

    return f"{value.month}/{value.day}/{value.year}"


def parse_iso_datetime(value: Any) -> datetime | None:
    """Parse a Strava-style ISO timestamp; return None when unparseable.

    Naive values are assumed to be UTC so they compare with aware ones.
    """

    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str) and value.strip():
        text = value.strip()
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
    else:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def mask_tail(value: str | None, visible: int = 4) -> str:
    """Mask a secret, keeping only its last ``visible`` characters."""

    if not value:
        return ""
    return "****" + value[-visible:]
