"""Prayer-time string parsing, countdown formatting and timezone-aware clock reads."""

import datetime
import re

import pytz

MINUTES_IN_DAY = 24 * 60

# ASCII digits only; str.isdigit() would also accept other scripts.
_TIME_RE = re.compile(r"([0-9]{1,2}):([0-9]{2})")


def _utc_now() -> datetime.datetime:
    return datetime.datetime.now(pytz.utc)


def _parse_hour_minute(value: str):
    """Return (hour, minute) for 'HH:MM' or 'HH:MM (TZ)', or None."""
    if not isinstance(value, str):
        return None
    clean = value.split(" ")[0]
    match = _TIME_RE.fullmatch(clean)
    if not match:
        return None
    hour, minute = int(match.group(1)), int(match.group(2))
    if not (0 <= hour <= 23 and 0 <= minute <= 59):
        return None
    return hour, minute


class TimeFormatService:
    """
    Time helpers used by the highlight and timetable code.

    `clock` returns the current time as an aware datetime; it defaults to
    the system clock in UTC and is swapped out in tests.
    """

    def __init__(self, clock=None):
        self._clock = clock or _utc_now

    def to_12_hour(self, value: str) -> str:
        """'17:30' -> '5:30 PM'. Unparseable input is returned unchanged."""
        parsed = _parse_hour_minute(value)
        if parsed is None:
            return value
        hour, minute = parsed
        period = "PM" if hour >= 12 else "AM"
        return f"{hour % 12 or 12}:{minute:02d} {period}"

    def to_minutes(self, value: str) -> int | None:
        """Minutes since midnight for a prayer-time string, or None."""
        parsed = _parse_hour_minute(value)
        if parsed is None:
            return None
        hour, minute = parsed
        return hour * 60 + minute

    def format_countdown(self, minutes: int) -> str:
        """135 -> '2h 15m', 45 -> '45m'. Negative values count as zero."""
        minutes = max(int(minutes), 0)
        hours, rest = divmod(minutes, 60)
        if hours == 0:
            return f"{rest}m"
        return f"{hours}h {rest}m"

    def get_now_parts(self, timezone: str) -> dict | None:
        """
        Current date and minutes-since-midnight in an IANA timezone.

        Returns {year, month, day, minutes}, or None if the timezone is unknown
        or a calendar field cannot be read.
        """
        try:
            tz = pytz.timezone(timezone)
        except (pytz.UnknownTimeZoneError, AttributeError):
            return None

        now = self._clock().astimezone(tz)
        fields = now.strftime("%Y %m %d %H %M").split(" ")
        if len(fields) != 5:
            return None
        try:
            year, month, day, hour, minute = (int(f) for f in fields)
        except ValueError:
            return None

        if hour == 24:
            hour = 0

        return {"year": year, "month": month, "day": day, "minutes": hour * 60 + minute}
