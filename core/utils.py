import logging
import math
import re
from datetime import datetime, timezone
from typing import Optional

logger = logging.getLogger(__name__)

_CLOCK_PATTERN = re.compile(r'^([0-1]?[0-9]|2[0-3]):([0-5][0-9])$')


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def ensure_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Attach UTC to naive datetimes (SQLite drops tzinfo on round-trip)."""
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)


def parse_clock_minutes(value: str) -> int:
    """Convert an ``HH:MM`` wall-clock string to minutes after midnight.

    Raises:
        ValueError: If the string is not a valid 24h ``HH:MM`` time.
    """
    match = _CLOCK_PATTERN.match(value.strip()) if value else None
    if not match:
        raise ValueError(f"Invalid time of day: {value!r} (expected HH:MM)")
    return int(match.group(1)) * 60 + int(match.group(2))


def round_half_up(value: float) -> int:
    """Round to the nearest integer with .5 going up (not banker's rounding)."""
    return int(math.floor(value + 0.5))
