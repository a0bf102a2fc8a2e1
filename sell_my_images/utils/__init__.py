"""Utility functions for time handling."""

from .timestamps import (
    ensure_utc,
    format_expiry_date,
    format_timestamp,
    parse_iso_datetime,
    utc_now,
)

__all__ = [
    "utc_now",
    "ensure_utc",
    "format_expiry_date",
    "format_timestamp",
    "parse_iso_datetime",
]
