"""City name to coordinates and timezone."""

import logging
from abc import ABC, abstractmethod

import requests

from ramadan.geo import DEFAULT_TIMEOUT, build_location

logger = logging.getLogger(__name__)

OPEN_METEO_URL = "https://geocoding-api.open-meteo.com/v1/search"


class GeocodingProvider(ABC):
    name: str = ""

    def __init__(self, timeout: int = DEFAULT_TIMEOUT):
        self.timeout = timeout

    @abstractmethod
    def search(self, city: str, country: str = None) -> dict | None:
        """Best GeoLocation match for city, or None. Must not raise for network errors."""


class OpenMeteoGeocodingProvider(GeocodingProvider):
    """
    Open-Meteo geocoding search. Several candidates are requested so a
    same-named city in the wrong country can be skipped; if none matches
    the country, the top result is used.
    """

    name = "open-meteo"

    def __init__(self, timeout: int = DEFAULT_TIMEOUT, count: int = 10):
        super().__init__(timeout)
        self.count = count

    def search(self, city: str, country: str = None) -> dict | None:
        city = (city or "").strip()
        if not city:
            return None

        try:
            resp = requests.get(
                OPEN_METEO_URL,
                params={"name": city, "count": self.count, "language": "en", "format": "json"},
                timeout=self.timeout,
            )
            resp.raise_for_status()
            data = resp.json()
        except (requests.RequestException, ValueError) as e:
            logger.debug(f"Geocoding {city!r} failed: {e}")
            return None

        results = data.get("results") if isinstance(data, dict) else None
        if not isinstance(results, list):
            return None
        candidates = [r for r in results if isinstance(r, dict)]
        if not candidates:
            return None

        best = candidates[0]
        if country:
            wanted = country.strip().casefold()
            for result in candidates:
                if str(result.get("country", "")).casefold() == wanted:
                    best = result
                    break

        return build_location(
            best.get("name"), best.get("country"), best.get("latitude"),
            best.get("longitude"), best.get("timezone"),
        )
