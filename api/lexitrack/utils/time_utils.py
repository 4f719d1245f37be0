"""
Clock helpers. All timestamps are timezone-aware UTC, and review dates are UTC dates.
"""
from datetime import datetime, date, timezone


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def utc_today() -> date:
    """Today's date on the clock used to schedule reviews."""
    return utc_now().date()
