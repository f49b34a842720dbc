"""IP geolocation providers and the priority-ordered fallback chain."""

import logging
from abc import ABC, abstractmethod

import requests

logger = logging.getLogger(__name__)

IPAPI_URL = "http://ip-api.com/json/"
IPAPI_CO_URL = "https://ipapi.co/json/"
IPWHOIS_URL = "https://ipwho.is/"

DEFAULT_TIMEOUT = 5


def _is_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def build_location(city, country, latitude, longitude, timezone) -> dict | None:
    """Assemble a GeoLocation dict, or None if a required field is unusable."""
    if not isinstance(city, str) or not isinstance(country, str):
        return None
    if not _is_number(latitude) or not _is_number(longitude):
        return None
    return {
        "city": city,
        "country": country,
        "latitude": float(latitude),
        "longitude": float(longitude),
        "timezone": timezone if isinstance(timezone, str) else "",
    }


class GeoProvider(ABC):
    """One IP geolocation service. Lower priority values are asked first."""

    name: str = ""
    priority: int = 0

    def __init__(self, timeout: int = DEFAULT_TIMEOUT):
        self.timeout = timeout

    @abstractmethod
    def detect(self) -> dict | None:
        """Return a GeoLocation dict, or None. Must not raise for network errors."""

    def _get_json(self, url: str, params: dict = None):
        """GET url and decode JSON; None on any network or decode failure."""
        try:
            resp = requests.get(url, params=params, timeout=self.timeout)
            resp.raise_for_status()
            return resp.json()
        except (requests.RequestException, ValueError) as e:
            logger.debug(f"{self.name} lookup failed: {e}")
            return None


class IpApiProvider(GeoProvider):
    name = "ip-api"
    priority = 1

    def detect(self) -> dict | None:
        data = self._get_json(
            IPAPI_URL, params={"fields": "status,message,city,country,lat,lon,timezone"}
        )
        if not isinstance(data, dict) or data.get("status") != "success":
            return None
        return build_location(
            data.get("city"), data.get("country"), data.get("lat"), data.get("lon"),
            data.get("timezone"),
        )


class IpapiCoProvider(GeoProvider):
    name = "ipapi-co"
    priority = 2

    def detect(self) -> dict | None:
        data = self._get_json(IPAPI_CO_URL)
        if not isinstance(data, dict) or data.get("error"):
            return None
        return build_location(
            data.get("city"), data.get("country_name"), data.get("latitude"),
            data.get("longitude"), data.get("timezone"),
        )


class IpWhoisProvider(GeoProvider):
    name = "ip-whois"
    priority = 3

    def detect(self) -> dict | None:
        data = self._get_json(IPWHOIS_URL)
        if not isinstance(data, dict) or data.get("success") is not True:
            return None
        timezone = data.get("timezone")
        return build_location(
            data.get("city"), data.get("country"), data.get("latitude"),
            data.get("longitude"), timezone.get("id") if isinstance(timezone, dict) else None,
        )


def default_providers() -> list:
    return [IpApiProvider(), IpapiCoProvider(), IpWhoisProvider()]


class GeoProviderFactory:
    """
    Asks each provider in ascending priority order and returns the first
    location found. Providers are called one at a time; an exception from a
    provider is not caught here.
    """

    def __init__(self, providers: list):
        self.providers = sorted(providers, key=lambda p: p.priority)

    def detect(self) -> dict | None:
        for provider in self.providers:
            location = provider.detect()
            if location is not None:
                logger.debug(f"Location detected by {provider.name}")
                return location
        logger.debug("No geo provider returned a location")
        return None

    def get_provider_names(self) -> list:
        return [p.name for p in self.providers]
