"""Location resolution from the command line, a saved manual location, or IP geolocation."""

import json
import logging
import os

from ramadan import config
from ramadan.cache import CACHE_TTL
from ramadan.errors import LocationError

logger = logging.getLogger(__name__)

CONFIG_DIR = config.CONFIG_DIR
LOCATION_FILE = os.path.join(CONFIG_DIR, "location.json")

REQUIRED_KEYS = ("city", "country", "latitude", "longitude", "timezone")


def save_manual_location(location: dict) -> None:
    """Save a manually-set location to the config directory."""
    os.makedirs(CONFIG_DIR, exist_ok=True)
    with open(LOCATION_FILE, "w", encoding="utf-8") as f:
        json.dump({k: location.get(k) for k in REQUIRED_KEYS}, f, indent=2)


def load_manual_location() -> dict | None:
    """Load a previously saved manual location, or return None."""
    if not os.path.isfile(LOCATION_FILE):
        return None
    try:
        with open(LOCATION_FILE, "r", encoding="utf-8") as f:
            data = json.load(f)
    except ValueError:
        logger.warning(f"Ignoring unreadable location file {LOCATION_FILE}")
        return None
    if isinstance(data, dict) and all(k in data for k in REQUIRED_KEYS):
        return data
    return None


def clear_manual_location() -> None:
    """Remove the saved manual location."""
    if os.path.isfile(LOCATION_FILE):
        os.remove(LOCATION_FILE)


class LocationService:
    """
    Turns the available location sources into a query for the prayer API.

    Order: explicit city/country (geocoded when a geocoder is set), saved
    manual location, cached IP lookup, then the geo provider chain.
    """

    def __init__(self, geo_factory, cache_service, settings: dict = None, geocoder=None):
        self.geo_factory = geo_factory
        self.cache = cache_service
        self.settings = settings or config.load_config()
        self.geocoder = geocoder

    def resolve(self, city: str = None, country: str = None) -> dict:
        if city:
            if not country:
                raise LocationError("A country is required with --city, e.g. --city Lahore --country Pakistan")
            return self._query(self._locate_city(city.strip(), country.strip()))

        manual = load_manual_location()
        if manual:
            logger.debug(f"Using saved location {manual['city']}, {manual['country']}")
            return self._query(manual)

        detected = self.detect()
        if detected is None:
            raise LocationError(
                "Could not detect your location. Pass --city and --country, "
                "or save one with `location set`."
            )
        return self._query(detected)

    def _locate_city(self, city: str, country: str) -> dict:
        """The given city and country, with coordinates and timezone if they can be looked up."""
        location = {"city": city, "country": country, "latitude": None, "longitude": None, "timezone": None}
        if self.geocoder is None:
            return location

        found = self.geocoder.search(city, country)
        if found is None:
            logger.debug(f"No coordinates found for {city}, {country}")
            return location
        location["latitude"] = found["latitude"]
        location["longitude"] = found["longitude"]
        location["timezone"] = found["timezone"] or None
        return location

    def detect(self) -> dict | None:
        """IP geolocation through the provider chain, cached for an hour."""
        key = self.cache.build_geo_key(",".join(self.geo_factory.get_provider_names()))
        cached = self.cache.get(key)
        if cached is not None:
            return cached

        location = self.geo_factory.detect()
        if location is not None:
            self.cache.set(key, location, CACHE_TTL["geo_ip"])
        return location

    def _query(self, location: dict) -> dict:
        query = {k: location.get(k) for k in REQUIRED_KEYS}
        query["method"] = self.settings.get("method", config.DEFAULT_METHOD)
        query["school"] = self.settings.get("school", config.DEFAULT_SCHOOL)
        return query
