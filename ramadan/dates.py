"""Gregorian/Hijri date helpers for the Ramadan calendar."""

import datetime
import re

RAMADAN_MONTH = 9

_GREGORIAN_RE = re.compile(r"([0-9]{2})-([0-9]{2})-([0-9]{4})")


class DateService:
    def parse_gregorian_day(self, value: str) -> dict | None:
        """
        Parse an Aladhan 'DD-MM-YYYY' date into {year, month, day}.
        Returns None for anything that is not a real calendar date.
        """
        if not isinstance(value, str):
            return None
        match = _GREGORIAN_RE.fullmatch(value)
        if not match:
            return None
        day, month, year = (int(g) for g in match.groups())
        try:
            datetime.date(year, month, day)
        except ValueError:
            return None
        return {"year": year, "month": month, "day": day}

    def format_for_api(self, date: datetime.date) -> str:
        return date.strftime("%d-%m-%Y")

    def roza_number(self, first_roza_date: datetime.date, target_date: datetime.date) -> int:
        """1-based roza number of target_date when Ramadan starts on first_roza_date."""
        return (target_date - first_roza_date).days + 1

    def roza_number_from_hijri_day(self, hijri_day) -> int:
        try:
            return int(hijri_day)
        except (TypeError, ValueError):
            return 1

    def target_ramadan_year(self, hijri_year, hijri_month: int) -> int:
        """Hijri year whose Ramadan is current or upcoming."""
        year = int(hijri_year)
        if int(hijri_month) > RAMADAN_MONTH:
            return year + 1
        return year
