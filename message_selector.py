"""
Time-of-day message table for the scheduled posts (all times UTC).
"""

from datetime import datetime, timezone
from typing import Optional

import config

MESSAGES_BY_TIME = {
    (22, 0): "Wake your ass up!",
    (0, 0): "I have one question only. Are you ready to outwork today?",
    (2, 0): "If you are still sleeping, get your ass up!",
    (8, 0): "Lead by example. Take your neighbors with you!",
    (8, 30): "It's only 30 mins left in 24 hrs day. Stay low, stay low!",
}


def _as_utc(when: datetime) -> datetime:
    # Naive datetimes are taken to be UTC already
    if when.tzinfo is None:
        return when.replace(tzinfo=timezone.utc)
    return when.astimezone(timezone.utc)


def select_message(when: Optional[datetime] = None, default: Optional[str] = None) -> str:
    """Message for the UTC hour:minute of `when`, or the default note."""
    if default is None:
        default = config.DEFAULT_MESSAGE
    when = _as_utc(when or datetime.now(timezone.utc))
    return MESSAGES_BY_TIME.get((when.hour, when.minute), default)


def schedule_slots() -> list[tuple[int, int]]:
    """(hour, minute) pairs that have a dedicated message, in clock order."""
    return sorted(MESSAGES_BY_TIME)
