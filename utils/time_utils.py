"""
Time zone aware time helpers.

Converts an instant into branch-local civil time using the IANA database
(zoneinfo + tzdata), independent of the server's own local zone.
Also holds the small formatting helpers used for cutoff labels.
"""

import re
from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Iterable, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from exceptions import InvalidTimeZoneError, InvalidCutoffTimeError

HHMM_PATTERN = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$")

DAY_LABELS = ["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]


@dataclass(frozen=True)
class CivilTime:
    """Wall-clock reading of an instant in one time zone."""

    year: int
    month: int
    day: int
    hour: int
    minute: int
    second: int
    day_of_week: int  # 0 = Sunday .. 6 = Saturday
    date_key: str  # YYYY-MM-DD
    time_key: str  # HH:MM:SS

    @property
    def minute_of_day(self) -> int:
        return self.hour * 60 + self.minute


def resolve_timezone(timezone_id: Optional[str]) -> ZoneInfo:
    """
    Look up an IANA time zone.

    Args:
        timezone_id: Zone identifier, e.g. "America/Detroit"

    Returns:
        ZoneInfo for the identifier

    Raises:
        InvalidTimeZoneError: If the identifier is empty or unknown
    """
    if not timezone_id or not isinstance(timezone_id, str):
        raise InvalidTimeZoneError(timezone_id)
    try:
        return ZoneInfo(timezone_id)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise InvalidTimeZoneError(timezone_id) from e


def civil_time_in(instant: datetime, timezone_id: str) -> CivilTime:
    """
    Break an instant into civil time in the given zone.

    Naive datetimes are treated as UTC.

    Args:
        instant: Point in time
        timezone_id: IANA zone identifier

    Returns:
        CivilTime for that zone

    Raises:
        InvalidTimeZoneError: If the zone is unknown
    """
    zone = resolve_timezone(timezone_id)
    if instant.tzinfo is None:
        instant = instant.replace(tzinfo=timezone.utc)

    local = instant.astimezone(zone)
    # Midnight is hour 0 of the new day, never hour 24 of the previous one
    hour = local.hour % 24

    return CivilTime(
        year=local.year,
        month=local.month,
        day=local.day,
        hour=hour,
        minute=local.minute,
        second=local.second,
        day_of_week=day_of_week(local),
        date_key=f"{local.year:04d}-{local.month:02d}-{local.day:02d}",
        time_key=f"{hour:02d}:{local.minute:02d}:{local.second:02d}",
    )


def day_of_week(day: date) -> int:
    """Day of week with 0 = Sunday."""
    return (day.weekday() + 1) % 7


def now_utc() -> datetime:
    """Current instant, timezone-aware."""
    return datetime.now(timezone.utc)


# ===================
# CUTOFF TIMES
# ===================

def parse_hhmm(value: Optional[str], division: Optional[str] = None) -> tuple[int, int]:
    """
    Parse a zero-padded 24-hour "HH:MM" string.

    Raises:
        InvalidCutoffTimeError: If the value is malformed
    """
    match = HHMM_PATTERN.match(value or "")
    if not match:
        raise InvalidCutoffTimeError(value, division)
    return int(match.group(1)), int(match.group(2))


def minutes_until_cutoff(now: datetime, timezone_id: str, cutoff_local: str) -> int:
    """
    Minutes from now until today's local cutoff.

    Negative once the cutoff has passed.
    """
    cutoff_hour, cutoff_minute = parse_hhmm(cutoff_local)
    today = civil_time_in(now, timezone_id)
    return (cutoff_hour * 60 + cutoff_minute) - today.minute_of_day


# ===================
# FORMATTING
# ===================

def format_time_12(hhmm: Optional[str]) -> str:
    """Format "15:30" as "3:30 PM"."""
    if not hhmm:
        return ""
    hour, minute = parse_hhmm(hhmm)
    suffix = "PM" if hour >= 12 else "AM"
    return f"{hour % 12 or 12}:{minute:02d} {suffix}"


def format_countdown(minutes_left: Optional[int]) -> str:
    """
    Format minutes remaining as a countdown.

    Examples:
        132 -> "2h 12m left"
        45  -> "45m left"
        -30 -> "passed 30m ago"
    """
    if minutes_left is None:
        return ""
    if minutes_left <= 0:
        passed = abs(minutes_left)
        if passed < 60:
            return f"passed {passed}m ago"
        return f"passed {passed // 60}h {passed % 60}m ago"
    if minutes_left < 60:
        return f"{minutes_left}m left"
    hours, minutes = divmod(minutes_left, 60)
    return f"{hours}h {minutes}m left" if minutes else f"{hours}h left"


def format_ship_date(day: Optional[date]) -> str:
    """Format a ship date as "Thu 06-18"."""
    if day is None:
        return ""
    return f"{DAY_LABELS[day_of_week(day)]} {day.month:02d}-{day.day:02d}"


def format_ship_days(ship_days: Iterable[int]) -> str:
    """Format ship days as "Mon–Fri" when consecutive, else "Mon, Wed"."""
    days = sorted(set(ship_days or []))
    if not days:
        return "None"
    consecutive = all(day == days[i - 1] + 1 for i, day in enumerate(days) if i > 0)
    if consecutive and len(days) >= 2:
        return f"{DAY_LABELS[days[0]]}–{DAY_LABELS[days[-1]]}"
    return ", ".join(DAY_LABELS[day] for day in days)
