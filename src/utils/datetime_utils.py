"""Date and time helpers.

Usage:
    from src.utils.datetime_utils import utc_now, today

    # For SQLAlchemy Column defaults
    created_at = Column(DateTime, default=utc_now)

    # Reference date for batch expiry
    expired = batch.expiry_date < today()
"""

from datetime import date, datetime, timezone


def utc_now() -> datetime:
    """Return current UTC time as timezone-aware datetime."""
    return datetime.now(timezone.utc)


def today() -> date:
    """Return the current local date, against which expiry dates are compared."""
    return date.today()
