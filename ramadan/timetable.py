"""Ramadan timetable rows, roza lookups and current/next markers."""

import datetime

from ramadan.dates import RAMADAN_MONTH
from ramadan.errors import RozaNotFoundError

RAMADAN_DAYS = 30


class RamadanService:
    def __init__(self, highlight_service, date_service, time_format_service):
        self.highlight = highlight_service
        self.dates = date_service
        self.times = time_format_service

    def to_row(self, day: dict, roza: int) -> dict:
        """Display row for one day: sehar ends at Fajr, iftar is at Maghrib."""
        hijri = day["date"]["hijri"]
        return {
            "roza": roza,
            "sehar": self.times.to_12_hour(day["timings"]["Fajr"]),
            "iftar": self.times.to_12_hour(day["timings"]["Maghrib"]),
            "date": day["date"].get("readable") or day["date"]["gregorian"]["date"],
            "hijri": f"{hijri['day']} {hijri['month']['en']} {hijri['year']}",
        }

    def rows(self, days: list) -> list:
        return [self.to_row(day, i) for i, day in enumerate(days, start=1)]

    def get_day_by_roza(self, days: list, roza: int) -> dict:
        if roza < 1 or roza > len(days):
            raise RozaNotFoundError(roza)
        return days[roza - 1]

    def get_row_by_roza(self, days: list, roza: int) -> dict:
        return self.to_row(self.get_day_by_roza(days, roza), roza)

    def target_ramadan_year(self, today: dict) -> int:
        hijri = today["date"]["hijri"]
        return self.dates.target_ramadan_year(hijri["year"], hijri["month"]["number"])

    def row_annotations(
        self,
        today: dict,
        target_year: int,
        first_roza_date: datetime.date = None,
        today_date: datetime.date = None,
    ) -> dict:
        """
        {roza: "current" | "next"} markers for the full table.

        A configured first roza date wins over the Hijri date reported by
        the API. Before Ramadan, roza 1 is marked as next.
        """
        annotations = {}

        def mark(roza, kind):
            if 1 <= roza <= RAMADAN_DAYS:
                annotations[roza] = kind

        if first_roza_date is not None:
            current = self.dates.roza_number(first_roza_date, today_date or datetime.date.today())
            if current < 1:
                mark(1, "next")
                return annotations
            mark(current, "current")
            mark(current + 1, "next")
            return annotations

        hijri = today["date"]["hijri"]
        in_ramadan = (
            int(hijri["month"]["number"]) == RAMADAN_MONTH
            and int(hijri["year"]) == target_year
        )
        if not in_ramadan:
            mark(1, "next")
            return annotations

        current = self.dates.roza_number_from_hijri_day(hijri["day"])
        mark(current, "current")
        mark(current + 1, "next")
        return annotations

    def current_roza(self, annotations: dict) -> int:
        """Roza to show by default: the current one, or 1 before Ramadan starts."""
        for roza, kind in annotations.items():
            if kind == "current":
                return roza
        return 1

    def get_highlight_state(self, day: dict) -> dict | None:
        return self.highlight.get_highlight_state(day)

    def format_status_line(self, highlight: dict) -> str:
        return self.highlight.format_status_line(highlight)
