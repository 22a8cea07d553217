# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""DateTime utilities for the school sports core.

This module provides standardized datetime operations to ensure consistency
across the entire codebase. All datetime operations should use these utilities.

Design Decisions:
-----------------
1. All timestamps are stored in UTC
2. All Python datetimes are timezone-aware (with timezone.utc)
3. Calendar values (enrollment, tournament and match dates) are plain dates

Usage:
------
    from src.utils.datetime import utc_now, utc_today

    # For current time
    now = utc_now()

    # For SQLAlchemy model defaults
    created_at = Column(DateTime(timezone=True), default=utc_now)
"""

from datetime import date, datetime, timezone

from src.utils.numbers import round_half_up

# Months are counted as 30-day blocks when describing durations
DAYS_PER_MONTH = 30


def utc_now() -> datetime:
    """Get current UTC time as timezone-aware datetime.

    Returns:
        Timezone-aware datetime representing current UTC time.

    Example:
        >>> now = utc_now()
        >>> now.tzinfo
        datetime.timezone.utc
    """
    return datetime.now(timezone.utc)


def utc_today() -> date:
    """Get the current calendar date in UTC.

    Returns:
        Today's date in UTC.
    """
    return utc_now().date()


def ensure_utc(dt: datetime | None) -> datetime | None:
    """Ensure a datetime is timezone-aware UTC.

    Args:
        dt: A datetime object (naive or aware) or None.

    Returns:
        Timezone-aware UTC datetime or None.

    Note:
        - If dt is None, returns None
        - If dt is naive, assumes UTC and adds tzinfo
        - If dt is aware, converts to UTC
    """
    if dt is None:
        return None

    if dt.tzinfo is None:
        # Naive datetime - assume UTC
        return dt.replace(tzinfo=timezone.utc)

    # Already aware - convert to UTC
    return dt.astimezone(timezone.utc)


def as_utc_datetime(value: date | datetime) -> datetime:
    """Promote a date or datetime to a timezone-aware UTC datetime.

    Plain dates become midnight UTC.

    Args:
        value: Date or datetime.

    Returns:
        Timezone-aware UTC datetime.
    """
    if isinstance(value, datetime):
        return ensure_utc(value)
    return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)


def to_date(value: date | datetime | str) -> date:
    """Coerce a date, datetime or ISO string to a calendar date.

    Time components are truncated.

    Args:
        value: Value to convert.

    Returns:
        The calendar date.

    Raises:
        ValueError: If a string is not an ISO 8601 date or datetime.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return datetime.fromisoformat(value.replace("Z", "+00:00")).date()


def format_iso(dt: datetime | None) -> str | None:
    """Format a datetime as ISO 8601 string.

    Args:
        dt: Datetime to format.

    Returns:
        ISO 8601 formatted string or None.
    """
    if dt is None:
        return None

    dt_utc = ensure_utc(dt)
    return dt_utc.isoformat()


def months_between(start: date | datetime, end: date | datetime) -> int:
    """Count whole months between two points in time.

    A month is a 30-day block and the result is rounded half-up.

    Args:
        start: Start of the span.
        end: End of the span.

    Returns:
        Rounded month count (negative if end precedes start).
    """
    elapsed = as_utc_datetime(end) - as_utc_datetime(start)
    days = elapsed.total_seconds() / 86400
    return int(round_half_up(days / DAYS_PER_MONTH))


def months_to_human(months: int) -> str:
    """Convert a month count to a human-readable duration.

    Args:
        months: Duration in months.

    Returns:
        Human-readable string like "8 months" or "1 year 3 months".
    """
    if months < 1:
        return "Less than 1 month"
    if months == 1:
        return "1 month"
    if months < 12:
        return f"{months} months"

    years = months // 12
    remaining_months = months % 12

    if remaining_months == 0:
        return "1 year" if years == 1 else f"{years} years"

    year_part = f"{years} year{'s' if years > 1 else ''}"
    month_part = f"{remaining_months} month{'s' if remaining_months > 1 else ''}"
    return f"{year_part} {month_part}"


# Aliases for convenience
now = utc_now
