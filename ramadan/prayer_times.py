"""Cached prayer-time lookups with city and coordinate fallbacks."""

import datetime
import logging

import requests

from ramadan import prayer_api
from ramadan.cache import CACHE_TTL
from ramadan.errors import PrayerApiError, PrayerTimeFetchError, RamadanCalendarError

logger = logging.getLogger(__name__)


def _cache_identity(query: dict):
    """(city, country) used in cache keys; coordinates stand in when there is no city."""
    if query.get("city") and query.get("country"):
        return query["city"], query["country"]
    return f"{query.get('latitude')}", f"{query.get('longitude')}"


def _has_city(query: dict) -> bool:
    return bool(query.get("city") and query.get("country"))


def _has_coords(query: dict) -> bool:
    return query.get("latitude") is not None and query.get("longitude") is not None


class PrayerTimeService:
    def __init__(self, cache_service, api=prayer_api):
        self.cache = cache_service
        self.api = api

    def fetch_day(self, query: dict, date: datetime.date = None) -> dict:
        """
        Prayer data for one day. Tries the city lookup, then coordinates,
        and caches the first success for six hours.
        """
        if date is None:
            date = datetime.date.today()
        city, country = _cache_identity(query)
        key = self.cache.build_timings_key(
            city, country, query["method"], query["school"], date.strftime("%d-%m-%Y")
        )
        cached = self.cache.get(key)
        if cached is not None:
            return cached

        strategies = []
        if _has_city(query):
            strategies.append(("timingsByCity", lambda: self.api.fetch_timings_by_city(
                query["city"], query["country"], date,
                method=query["method"], school=query["school"],
            )))
        if _has_coords(query):
            strategies.append(("timings", lambda: self.api.fetch_timings_by_coords(
                query["latitude"], query["longitude"], date,
                method=query["method"], school=query["school"], timezone=query.get("timezone"),
            )))

        day, errors = self._first_success(strategies)
        if day is None:
            raise PrayerTimeFetchError(
                f"Could not fetch prayer times. {' | '.join(errors) or 'No city or coordinates to look up.'}",
                errors,
            )
        self.cache.set(key, day, CACHE_TTL["single_day_timings"])
        return day

    def fetch_calendar(self, query: dict, year: int) -> list:
        """All days of Ramadan in Hijri `year`, cached for a day."""
        city, country = _cache_identity(query)
        key = self.cache.build_calendar_key(city, country, query["method"], query["school"], year)
        cached = self.cache.get(key)
        if cached is not None:
            return cached

        strategies = []
        if _has_city(query):
            strategies.append(("hijriCalendarByCity", lambda: self.api.fetch_hijri_calendar_by_city(
                query["city"], query["country"], year,
                method=query["method"], school=query["school"],
            )))
        if _has_coords(query):
            strategies.append(("hijriCalendar", lambda: self.api.fetch_hijri_calendar_by_coords(
                query["latitude"], query["longitude"], year,
                method=query["method"], school=query["school"],
            )))

        days, errors = self._first_success(strategies)
        if days is None:
            raise RamadanCalendarError(
                f"Could not fetch Ramadan calendar. {' | '.join(errors) or 'No city or coordinates to look up.'}",
                errors,
            )
        self.cache.set(key, days, CACHE_TTL["full_calendar"])
        return days

    def _first_success(self, strategies: list):
        errors = []
        for name, call in strategies:
            try:
                return call(), errors
            except (requests.RequestException, PrayerApiError) as e:
                logger.debug(f"{name} failed: {e}")
                errors.append(f"{name} failed: {e}")
        return None, errors
