"""Timezone-aware UTC timestamps.

Usage:
    from libs.common.datetime_utils import utc_now

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now
    )
"""

from datetime import datetime, timedelta, timezone


def utc_now() -> datetime:
    """Return the current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def utc_in(**delta) -> datetime:
    """Return an aware UTC datetime offset from now, e.g. ``utc_in(days=7)``."""
    return utc_now() + timedelta(**delta)


def isoformat_z(value: datetime) -> str:
    """Render a datetime as ISO-8601 with a trailing ``Z`` (JavaScript style)."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace(
        "+00:00", "Z"
    )
