"""Which part of a Ramadan day we are in, and how long until the next one."""

import datetime
import logging

from ramadan.time_format import MINUTES_IN_DAY

logger = logging.getLogger(__name__)

BEFORE_ROZA_DAY = "Before roza day"
SEHAR_WINDOW_OPEN = "Sehar window open"
ROZA_IN_PROGRESS = "Roza in progress"
IFTAR_TIME = "Iftar time"

FIRST_SEHAR = "First Sehar"
ROZA_STARTS = "Roza starts (Fajr)"
IFTAR = "Iftar"
NEXT_DAY_SEHAR = "Next day Sehar"

STATUS_LABELS = {
    FIRST_SEHAR: "Sehar",
    NEXT_DAY_SEHAR: "Sehar",
    ROZA_STARTS: "Fast starts",
}


class HighlightService:
    """
    Computes the highlight state for a single day of Aladhan prayer data.

    Sehar ends at Fajr and iftar is at Maghrib. Everything is evaluated in
    the day's own timezone (meta.timezone), not the machine's.
    """

    def __init__(self, date_service, time_format_service):
        self.dates = date_service
        self.times = time_format_service

    def get_highlight_state(self, day: dict) -> dict | None:
        """
        Return {current, next, countdown} for `day`, or None when the day is
        in the past or its date, times or timezone cannot be parsed.
        """
        try:
            date_str = day["date"]["gregorian"]["date"]
            fajr = day["timings"]["Fajr"]
            maghrib = day["timings"]["Maghrib"]
            timezone = day["meta"]["timezone"]
        except (KeyError, TypeError):
            logger.debug("Day record is missing date, timings or meta")
            return None

        day_parts = self.dates.parse_gregorian_day(date_str)
        if day_parts is None:
            return None

        sehar = self.times.to_minutes(fajr)
        iftar = self.times.to_minutes(maghrib)
        if sehar is None or iftar is None:
            return None

        now = self.times.get_now_parts(timezone)
        if now is None:
            return None

        try:
            now_date = datetime.date(now["year"], now["month"], now["day"])
        except ValueError:
            return None
        target_date = datetime.date(day_parts["year"], day_parts["month"], day_parts["day"])
        day_diff = (target_date - now_date).days
        now_minutes = now["minutes"]

        if day_diff > 0:
            return self._state(
                BEFORE_ROZA_DAY,
                FIRST_SEHAR,
                day_diff * MINUTES_IN_DAY + (sehar - now_minutes),
            )

        if day_diff < 0:
            return None

        if now_minutes < sehar:
            return self._state(SEHAR_WINDOW_OPEN, ROZA_STARTS, sehar - now_minutes)

        if now_minutes < iftar:
            return self._state(ROZA_IN_PROGRESS, IFTAR, iftar - now_minutes)

        # Tomorrow's Fajr is taken to fall at the same minute as today's.
        return self._state(IFTAR_TIME, NEXT_DAY_SEHAR, MINUTES_IN_DAY - now_minutes + sehar)

    def format_status_line(self, highlight: dict) -> str:
        """{'next': 'Iftar', 'countdown': '2h 15m'} -> 'Iftar in 2h 15m'"""
        label = STATUS_LABELS.get(highlight["next"], highlight["next"])
        return f"{label} in {highlight['countdown']}"

    def _state(self, current: str, next_event: str, minutes: int) -> dict:
        return {
            "current": current,
            "next": next_event,
            "countdown": self.times.format_countdown(minutes),
        }
