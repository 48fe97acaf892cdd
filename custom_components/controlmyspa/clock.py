"""Spa clock synchronization policy."""

from __future__ import annotations

from typing import TYPE_CHECKING

from .const import CLOCK_DRIFT_TOLERANCE_MINUTES

if TYPE_CHECKING:
    from datetime import datetime

    from .models import SpaClock


def minutes_since_midnight(hour: int, minute: int) -> int:
    """Return the number of minutes between midnight and ``hour:minute``."""
    return hour * 60 + minute


def should_sync_clock(
    clock: SpaClock,
    local_now: datetime,
    *,
    online: bool,
    enabled: bool,
    use_24h: bool,
) -> bool:
    """Decide whether the spa clock has to be set.

    The clock is pushed when the spa is online and sync is enabled, and
    either the spa has no time, its 12/24 hour format differs from the
    configured one, or it drifted more than the tolerance from local time.

    Args:
        clock: Clock fields reported by the spa.
        local_now: Current time in the configured time zone.
        online: Whether the spa is online.
        enabled: Whether clock sync is enabled.
        use_24h: Whether the spa should use a 24 hour clock.

    Returns:
        True if a set-time command should be sent.

    """
    if not online or not enabled:
        return False
    if clock.time_not_set or clock.military != use_24h:
        return True
    if clock.hour is None or clock.minute is None:
        return True

    spa_minutes = minutes_since_midnight(clock.hour, clock.minute)
    local_minutes = minutes_since_midnight(local_now.hour, local_now.minute)
    return abs(spa_minutes - local_minutes) > CLOCK_DRIFT_TOLERANCE_MINUTES


def format_spa_date(local_now: datetime) -> str:
    """Format a date the way the set-time command expects it (MM/DD/YYYY)."""
    return local_now.strftime("%m/%d/%Y")


def format_spa_time(local_now: datetime) -> str:
    """Format a time the way the set-time command expects it (24 hour HH:MM)."""
    return local_now.strftime("%H:%M")
