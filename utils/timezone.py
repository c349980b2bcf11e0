"""UTC-everywhere time handling for event timestamps."""

from datetime import datetime, timezone


def now_utc() -> datetime:
    """
    Current time in UTC.

    Only events carry timestamps; pricing and summaries never read the clock.
    """
    return datetime.now(timezone.utc)
