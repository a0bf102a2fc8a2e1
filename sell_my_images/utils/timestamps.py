"""Timestamp utilities: UTC handling and human-readable expiry formatting."""

from datetime import datetime, timezone
from typing import Optional

# English abbreviations regardless of the process locale
_MONTH_ABBREVIATIONS = (
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
)


def utc_now() -> datetime:
    """Current UTC time as a timezone-aware datetime."""
    return datetime.now(timezone.utc)


def ensure_utc(dt: Optional[datetime]) -> Optional[datetime]:
    """Ensure a datetime is timezone-aware and in UTC.

    Naive datetimes are treated as UTC; aware ones are converted.

    Example:
        >>> naive = datetime(2025, 1, 5, 15, 0)
        >>> ensure_utc(naive).tzinfo == timezone.utc
        True
    """
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def format_expiry_date(dt: datetime) -> str:
    """Format a download expiry for display in emails.

    Uses the site's long-standing layout ``"Mon D, YYYY at H:MM AM"`` in UTC,
    without zero padding on the day or hour.

    Args:
        dt: Expiry timestamp

    Returns:
        Formatted string

    Example:
        >>> format_expiry_date(datetime(2025, 1, 5, 15, 0, tzinfo=timezone.utc))
        'Jan 5, 2025 at 3:00 PM'
    """
    dt_utc = ensure_utc(dt)
    hour_12 = dt_utc.hour % 12 or 12
    meridiem = "AM" if dt_utc.hour < 12 else "PM"
    return (
        f"{_MONTH_ABBREVIATIONS[dt_utc.month - 1]} {dt_utc.day}, {dt_utc.year} "
        f"at {hour_12}:{dt_utc.minute:02d} {meridiem}"
    )


def format_timestamp(dt: datetime) -> str:
    """Format a datetime as ISO 8601 UTC with a 'Z' suffix.

    Example:
        >>> format_timestamp(datetime(2025, 1, 5, 15, 0, tzinfo=timezone.utc))
        '2025-01-05T15:00:00Z'
    """
    return ensure_utc(dt).strftime("%Y-%m-%dT%H:%M:%SZ")


def parse_iso_datetime(iso_string: Optional[str]) -> Optional[datetime]:
    """Parse an ISO 8601 string (``Z`` suffix allowed) to a UTC datetime.

    Returns None for empty or unparseable input.
    """
    if not iso_string or not iso_string.strip():
        return None

    cleaned = iso_string.strip()
    if cleaned.endswith("Z"):
        cleaned = cleaned[:-1] + "+00:00"

    try:
        return ensure_utc(datetime.fromisoformat(cleaned))
    except ValueError:
        return None
