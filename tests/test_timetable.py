"""Tests for the timetable and dates modules."""

import datetime
import unittest

from ramadan.dates import DateService
from ramadan.errors import RozaNotFoundError
from ramadan.highlight import HighlightService
from ramadan.time_format import TimeFormatService
from ramadan.timetable import RamadanService


def make_day(day_of_month=1, hijri_day="1", hijri_month=9, hijri_year="1446"):
    date = datetime.date(2025, 3, day_of_month)
    return {
        "timings": {"Fajr": "05:15 (PKT)", "Maghrib": "17:55 (PKT)"},
        "date": {
            "readable": date.strftime("%d %b %Y"),
            "gregorian": {"date": date.strftime("%d-%m-%Y")},
            "hijri": {"day": hijri_day, "month": {"number": hijri_month, "en": "Ramadan"}, "year": hijri_year},
        },
        "meta": {"timezone": "Asia/Karachi"},
    }


def make_service() -> RamadanService:
    dates = DateService()
    times = TimeFormatService()
    return RamadanService(HighlightService(dates, times), dates, times)


class TestRows(unittest.TestCase):
    def setUp(self):
        self.svc = make_service()
        self.days = [make_day(i, str(i)) for i in range(1, 31)]

    def test_to_row(self):
        row = self.svc.to_row(self.days[4], 5)
        self.assertEqual(row, {
            "roza": 5,
            "sehar": "5:15 AM",
            "iftar": "5:55 PM",
            "date": "05 Mar 2025",
            "hijri": "5 Ramadan 1446",
        })

    def test_rows_are_numbered_from_one(self):
        rows = self.svc.rows(self.days)
        self.assertEqual([r["roza"] for r in rows], list(range(1, 31)))

    def test_roza_lookup(self):
        self.assertIs(self.svc.get_day_by_roza(self.days, 1), self.days[0])
        self.assertEqual(self.svc.get_row_by_roza(self.days, 30)["date"], "30 Mar 2025")

    def test_roza_out_of_range(self):
        for roza in (0, 31, -1):
            with self.assertRaises(RozaNotFoundError):
                self.svc.get_day_by_roza(self.days, roza)
        with self.assertRaises(RozaNotFoundError):
            self.svc.get_row_by_roza(self.days[:29], 30)


class TestAnnotations(unittest.TestCase):
    def setUp(self):
        self.svc = make_service()

    def test_during_ramadan(self):
        today = make_day(5, hijri_day="5")
        annotations = self.svc.row_annotations(today, 1446)
        self.assertEqual(annotations, {5: "current", 6: "next"})
        self.assertEqual(self.svc.current_roza(annotations), 5)

    def test_last_roza_has_no_next(self):
        today = make_day(30, hijri_day="30")
        self.assertEqual(self.svc.row_annotations(today, 1446), {30: "current"})

    def test_before_ramadan(self):
        today = make_day(1, hijri_day="20", hijri_month=8)
        annotations = self.svc.row_annotations(today, 1446)
        self.assertEqual(annotations, {1: "next"})
        self.assertEqual(self.svc.current_roza(annotations), 1)

    def test_ramadan_of_another_year(self):
        today = make_day(1, hijri_day="3", hijri_year="1445")
        self.assertEqual(self.svc.row_annotations(today, 1446), {1: "next"})

    def test_configured_first_roza_date(self):
        annotations = self.svc.row_annotations(
            make_day(3, hijri_day="2"),
            1446,
            first_roza_date=datetime.date(2025, 3, 1),
            today_date=datetime.date(2025, 3, 3),
        )
        self.assertEqual(annotations, {3: "current", 4: "next"})

    def test_configured_first_roza_date_in_future(self):
        annotations = self.svc.row_annotations(
            make_day(1),
            1446,
            first_roza_date=datetime.date(2025, 3, 10),
            today_date=datetime.date(2025, 3, 3),
        )
        self.assertEqual(annotations, {1: "next"})

    def test_target_year(self):
        self.assertEqual(self.svc.target_ramadan_year(make_day(hijri_month=8)), 1446)
        self.assertEqual(self.svc.target_ramadan_year(make_day(hijri_month=9)), 1446)
        self.assertEqual(self.svc.target_ramadan_year(make_day(hijri_month=10)), 1447)


class TestDateService(unittest.TestCase):
    def setUp(self):
        self.dates = DateService()

    def test_parse_gregorian_day(self):
        self.assertEqual(self.dates.parse_gregorian_day("05-03-2025"), {"year": 2025, "month": 3, "day": 5})

    def test_parse_rejects_bad_input(self):
        for value in ("5-3-2025", "2025-03-05", "31-02-2025", "00-01-2025", "01-13-2025", "", None):
            self.assertIsNone(self.dates.parse_gregorian_day(value))

    def test_format_for_api(self):
        self.assertEqual(self.dates.format_for_api(datetime.date(2025, 3, 1)), "01-03-2025")

    def test_roza_number(self):
        first = datetime.date(2025, 3, 1)
        self.assertEqual(self.dates.roza_number(first, datetime.date(2025, 3, 1)), 1)
        self.assertEqual(self.dates.roza_number(first, datetime.date(2025, 3, 30)), 30)
        self.assertEqual(self.dates.roza_number(first, datetime.date(2025, 2, 28)), 0)

    def test_roza_number_from_hijri_day(self):
        self.assertEqual(self.dates.roza_number_from_hijri_day("15"), 15)
        self.assertEqual(self.dates.roza_number_from_hijri_day("x"), 1)


if __name__ == "__main__":
    unittest.main()
