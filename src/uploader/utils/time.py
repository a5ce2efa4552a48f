"""
Time-related utilities for the application.

All timestamps are generated in UTC. Upload shard directories are derived
from the same UTC clock so that every instance of the service buckets a file
into the same directory regardless of the host timezone.
"""

from datetime import datetime, timezone
from enum import Enum


class SubdirFormat(str, Enum):
    """Granularity of the time-based sub-directory files are stored under."""

    NONE = "none"
    YEAR = "year"
    MONTH = "month"
    DAY = "day"


def utc_now() -> datetime:
    """Return the current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def utc_now_iso() -> str:
    """Return current UTC time in ISO-8601 format.

    Example:
        2024-01-15T10:42:31.123456+00:00
    """
    return utc_now().isoformat()


def shard_path(fmt: SubdirFormat, now: datetime) -> str:
    """Return the relative shard directory for `now`.

    The result is either empty or a forward-slash path ending in `/`:

        NONE  -> ""
        YEAR  -> "2025/"
        MONTH -> "2025/01/"
        DAY   -> "2025/01/15/"
    """
    if fmt is SubdirFormat.NONE:
        return ""
    if fmt is SubdirFormat.YEAR:
        return f"{now:%Y}/"
    if fmt is SubdirFormat.MONTH:
        return f"{now:%Y/%m}/"
    if fmt is SubdirFormat.DAY:
        return f"{now:%Y/%m/%d}/"

    raise ValueError(f"Unsupported sub-directory format: {fmt!r}")
