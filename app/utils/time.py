"""Time and datetime utilities."""

from datetime import datetime, timezone


def utc_now() -> datetime:
    """Get current UTC datetime.

    Returns:
        Current datetime in UTC timezone
    """
    return datetime.now(timezone.utc)


def ensure_utc(dt: datetime) -> datetime:
    """Return dt as an aware UTC datetime.

    Naive values are taken to be UTC already (SQLite hands them back that way).
    """
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def format_datetime(dt: datetime, fmt: str = "%Y-%m-%dT%H:%M:%SZ") -> str:
    """Format datetime to ISO string.

    Args:
        dt: Datetime to format
        fmt: Format string (default ISO 8601)

    Returns:
        Formatted datetime string
    """
    return ensure_utc(dt).strftime(fmt)
