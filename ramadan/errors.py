"""Exceptions raised by the Ramadan timetable modules."""


class RamadanError(Exception):
    """Base class for errors reported to the user as a one-line message."""


class PrayerApiError(RamadanError, ValueError):
    """The Aladhan API returned an error envelope or a malformed body."""


class PrayerTimeFetchError(RamadanError):
    """Every lookup strategy for a single day's timings failed."""

    def __init__(self, message: str, errors: list = None):
        super().__init__(message)
        self.errors = list(errors or [])


class RamadanCalendarError(PrayerTimeFetchError):
    """Every lookup strategy for the Ramadan calendar failed."""


class RozaNotFoundError(RamadanError, LookupError):
    def __init__(self, roza: int):
        super().__init__(f"Roza {roza} is not in the Ramadan calendar (expected 1-30).")
        self.roza = roza


class LocationError(RamadanError):
    """No location could be resolved."""
