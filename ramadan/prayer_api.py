"""Fetch prayer timings and Ramadan calendars from the Aladhan API."""

import datetime
import logging

import requests

from ramadan.config import DEFAULT_METHOD, DEFAULT_SCHOOL
from ramadan.dates import RAMADAN_MONTH
from ramadan.errors import PrayerApiError

logger = logging.getLogger(__name__)

ALADHAN_BASE = "https://api.aladhan.com/v1"
REQUEST_TIMEOUT = 10

TIMING_NAMES = [
    "Fajr", "Sunrise", "Dhuhr", "Asr", "Sunset", "Maghrib", "Isha",
    "Imsak", "Midnight", "Firstthird", "Lastthird",
]

DAY_KEYS = ("timings", "date", "meta")


def _check_day(day) -> dict:
    if not isinstance(day, dict) or any(k not in day for k in DAY_KEYS):
        raise PrayerApiError("Aladhan API returned a day without timings, date or meta")
    return day


def _request(path: str, params: dict):
    """
    GET an Aladhan endpoint and unwrap the {code, status, data} envelope.
    Raises requests.RequestException for transport errors and PrayerApiError
    for an error envelope.
    """
    url = f"{ALADHAN_BASE}/{path}"
    params = {k: v for k, v in params.items() if v is not None}
    logger.debug(f"GET {url} {params}")
    resp = requests.get(url, params=params, timeout=REQUEST_TIMEOUT)
    resp.raise_for_status()
    try:
        body = resp.json()
    except ValueError as e:
        raise PrayerApiError(f"Aladhan API returned invalid JSON: {e}") from e

    if not isinstance(body, dict) or "data" not in body:
        raise PrayerApiError("Aladhan API returned an unexpected body")
    if body.get("code") != 200:
        raise PrayerApiError(f"Aladhan API error {body.get('code')}: {body.get('status')}")
    if isinstance(body["data"], str):
        raise PrayerApiError(f"Aladhan API message: {body['data']}")
    return body["data"]


def _date_str(date: datetime.date = None) -> str:
    if date is None:
        date = datetime.date.today()
    return date.strftime("%d-%m-%Y")


def fetch_timings_by_city(
    city: str,
    country: str,
    date: datetime.date = None,
    method: int = DEFAULT_METHOD,
    school: int = DEFAULT_SCHOOL,
) -> dict:
    """Prayer data for one day, looked up by city and country."""
    data = _request(
        f"timingsByCity/{_date_str(date)}",
        {"city": city, "country": country, "method": method, "school": school},
    )
    return _check_day(data)


def fetch_timings_by_coords(
    lat: float,
    lon: float,
    date: datetime.date = None,
    method: int = DEFAULT_METHOD,
    school: int = DEFAULT_SCHOOL,
    timezone: str = None,
) -> dict:
    """Prayer data for one day, looked up by coordinates."""
    data = _request(
        f"timings/{_date_str(date)}",
        {
            "latitude": lat,
            "longitude": lon,
            "method": method,
            "school": school,
            "timezonestring": timezone or None,
        },
    )
    return _check_day(data)


def _check_calendar(data) -> list:
    if not isinstance(data, list):
        raise PrayerApiError("Aladhan API returned a calendar that is not a list")
    return [_check_day(day) for day in data]


def fetch_hijri_calendar_by_city(
    city: str,
    country: str,
    year: int,
    month: int = RAMADAN_MONTH,
    method: int = DEFAULT_METHOD,
    school: int = DEFAULT_SCHOOL,
) -> list:
    """Every day of a Hijri month (Ramadan by default) for a city."""
    data = _request(
        f"hijriCalendarByCity/{year}/{month}",
        {"city": city, "country": country, "method": method, "school": school},
    )
    return _check_calendar(data)


def fetch_hijri_calendar_by_coords(
    lat: float,
    lon: float,
    year: int,
    month: int = RAMADAN_MONTH,
    method: int = DEFAULT_METHOD,
    school: int = DEFAULT_SCHOOL,
) -> list:
    """Every day of a Hijri month (Ramadan by default) for coordinates."""
    data = _request(
        f"hijriCalendar/{year}/{month}",
        {"latitude": lat, "longitude": lon, "method": method, "school": school},
    )
    return _check_calendar(data)
