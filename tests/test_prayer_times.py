"""Tests for the prayer_times module."""

import datetime
import os
import shutil
import tempfile
import unittest
from unittest.mock import MagicMock

import requests

from ramadan.cache import CacheRepository, CacheService
from ramadan.errors import PrayerApiError, PrayerTimeFetchError, RamadanCalendarError
from ramadan.prayer_times import PrayerTimeService

DAY = {"timings": {"Fajr": "05:15"}, "date": {"gregorian": {"date": "05-03-2025"}}, "meta": {}}

QUERY = {
    "city": "Lahore",
    "country": "Pakistan",
    "latitude": 31.5,
    "longitude": 74.3,
    "timezone": "Asia/Karachi",
    "method": 1,
    "school": 1,
}


class PrayerTimeTestCase(unittest.TestCase):
    def setUp(self):
        self._tmpdir = tempfile.mkdtemp()
        self.cache = CacheService(CacheRepository(os.path.join(self._tmpdir, "cache")))
        self.api = MagicMock()
        self.svc = PrayerTimeService(self.cache, api=self.api)

    def tearDown(self):
        shutil.rmtree(self._tmpdir, ignore_errors=True)


class TestFetchDay(PrayerTimeTestCase):
    def test_city_lookup_is_cached(self):
        self.api.fetch_timings_by_city.return_value = DAY
        date = datetime.date(2025, 3, 5)

        self.assertEqual(self.svc.fetch_day(QUERY, date), DAY)
        self.assertEqual(self.svc.fetch_day(QUERY, date), DAY)

        self.api.fetch_timings_by_city.assert_called_once_with(
            "Lahore", "Pakistan", date, method=1, school=1
        )
        self.api.fetch_timings_by_coords.assert_not_called()

    def test_falls_back_to_coordinates(self):
        self.api.fetch_timings_by_city.side_effect = PrayerApiError("Unable to locate city")
        self.api.fetch_timings_by_coords.return_value = DAY

        self.assertEqual(self.svc.fetch_day(QUERY, datetime.date(2025, 3, 5)), DAY)
        kwargs = self.api.fetch_timings_by_coords.call_args[1]
        self.assertEqual(kwargs["timezone"], "Asia/Karachi")

    def test_coordinates_only_query(self):
        query = dict(QUERY, city=None, country=None)
        self.api.fetch_timings_by_coords.return_value = DAY
        self.assertEqual(self.svc.fetch_day(query, datetime.date(2025, 3, 5)), DAY)
        self.api.fetch_timings_by_city.assert_not_called()

    def test_all_strategies_fail(self):
        self.api.fetch_timings_by_city.side_effect = PrayerApiError("bad city")
        self.api.fetch_timings_by_coords.side_effect = requests.ConnectionError("offline")

        with self.assertRaises(PrayerTimeFetchError) as ctx:
            self.svc.fetch_day(QUERY, datetime.date(2025, 3, 5))
        self.assertEqual(len(ctx.exception.errors), 2)
        self.assertIn("timingsByCity failed", str(ctx.exception))

    def test_nothing_to_look_up(self):
        query = dict(QUERY, city=None, country=None, latitude=None, longitude=None)
        with self.assertRaises(PrayerTimeFetchError):
            self.svc.fetch_day(query, datetime.date(2025, 3, 5))

    def test_failures_are_not_cached(self):
        self.api.fetch_timings_by_city.side_effect = [PrayerApiError("down"), DAY]
        query = dict(QUERY, latitude=None, longitude=None)
        with self.assertRaises(PrayerTimeFetchError):
            self.svc.fetch_day(query, datetime.date(2025, 3, 5))
        self.assertEqual(self.svc.fetch_day(query, datetime.date(2025, 3, 5)), DAY)


class TestFetchCalendar(PrayerTimeTestCase):
    def test_calendar_is_cached_per_year(self):
        self.api.fetch_hijri_calendar_by_city.return_value = [DAY]

        self.assertEqual(self.svc.fetch_calendar(QUERY, 1446), [DAY])
        self.assertEqual(self.svc.fetch_calendar(QUERY, 1446), [DAY])
        self.svc.fetch_calendar(QUERY, 1447)

        self.assertEqual(self.api.fetch_hijri_calendar_by_city.call_count, 2)

    def test_falls_back_to_coordinates(self):
        self.api.fetch_hijri_calendar_by_city.side_effect = requests.Timeout("slow")
        self.api.fetch_hijri_calendar_by_coords.return_value = [DAY]
        self.assertEqual(self.svc.fetch_calendar(QUERY, 1446), [DAY])

    def test_all_strategies_fail(self):
        self.api.fetch_hijri_calendar_by_city.side_effect = PrayerApiError("bad city")
        self.api.fetch_hijri_calendar_by_coords.side_effect = PrayerApiError("bad coords")
        with self.assertRaises(RamadanCalendarError):
            self.svc.fetch_calendar(QUERY, 1446)


if __name__ == "__main__":
    unittest.main()
