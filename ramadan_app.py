#!/usr/bin/env python3
"""
Ramadan Times
Command-line Ramadan timetable showing:
  - Sehar (Fajr) and iftar (Maghrib) times for each roza
  - The current phase of the day with a countdown to the next one
  - Desktop reminders before sehar ends and before iftar
"""

import argparse
import datetime
import json
import logging
import sys
import time

import requests

from ramadan import config
from ramadan.cache import CacheRepository, CacheService
from ramadan.dates import DateService
from ramadan.errors import RamadanError
from ramadan.geo import GeoProviderFactory, default_providers
from ramadan.geocoding import OpenMeteoGeocodingProvider
from ramadan.highlight import HighlightService
from ramadan.location import (
    LocationService,
    clear_manual_location,
    load_manual_location,
    save_manual_location,
)
from ramadan.notifier import schedule_day_reminders
from ramadan.prayer_times import PrayerTimeService
from ramadan.time_format import TimeFormatService
from ramadan.timetable import RamadanService

logger = logging.getLogger("ramadan")

REFRESH_SECONDS = 60

MARKERS = {"current": "▶", "next": "›"}


def setup_logging(verbose: bool = False) -> None:
    root_logger = logging.getLogger()
    if not root_logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s"
        ))
        root_logger.addHandler(handler)
    root_logger.setLevel(logging.DEBUG if verbose else logging.WARNING)


def _iso_date(value: str) -> datetime.date:
    try:
        return datetime.date.fromisoformat(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected YYYY-MM-DD, got {value!r}")


class RamadanApp:
    """Wires the services together and implements each command."""

    def __init__(self, settings: dict = None, cache_dir: str = None, providers: list = None,
                 clock=None, out=None, geocoder=None):
        self.settings = settings if settings is not None else config.load_config()
        self.out = out or sys.stdout

        self.time_format = TimeFormatService(clock=clock)
        self.dates = DateService()
        self.highlight = HighlightService(self.dates, self.time_format)
        self.timetable = RamadanService(self.highlight, self.dates, self.time_format)

        self.cache = CacheService(CacheRepository(cache_dir))
        self.geo = GeoProviderFactory(default_providers() if providers is None else providers)
        self.locations = LocationService(
            self.geo, self.cache, self.settings,
            geocoder=OpenMeteoGeocodingProvider() if geocoder is None else geocoder,
        )
        self.prayer_times = PrayerTimeService(self.cache)

    def _write(self, text: str = "") -> None:
        print(text, file=self.out)

    # ──────────────────────────────────────────────────────────────────────
    # Timetable
    # ──────────────────────────────────────────────────────────────────────
    def _first_roza_date(self, override: datetime.date = None) -> datetime.date | None:
        if override is not None:
            return override
        stored = self.settings.get("first_roza_date")
        if not stored:
            return None
        try:
            return datetime.date.fromisoformat(stored)
        except ValueError:
            logger.warning(f"Ignoring invalid first_roza_date in config: {stored!r}")
            return None

    def _today_in(self, timezone: str) -> datetime.date | None:
        now = self.time_format.get_now_parts(timezone)
        if now is None:
            return None
        return datetime.date(now["year"], now["month"], now["day"])

    def load(self, city: str = None, country: str = None, first_roza: datetime.date = None) -> dict:
        """Resolve the location and fetch today's data plus this year's Ramadan calendar."""
        query = self.locations.resolve(city, country)
        today = self.prayer_times.fetch_day(query)
        target_year = self.timetable.target_ramadan_year(today)
        days = self.prayer_times.fetch_calendar(query, target_year)

        first_roza_date = self._first_roza_date(first_roza)
        annotations = self.timetable.row_annotations(
            today,
            target_year,
            first_roza_date=first_roza_date,
            today_date=self._today_in(today["meta"]["timezone"]),
        )
        current = self.timetable.current_roza(annotations)
        return {
            "query": query,
            "today": today,
            "target_year": target_year,
            "days": days,
            "annotations": annotations,
            "current_roza": min(current, len(days)) if days else current,
        }

    def status(self, args) -> int:
        """One status line for today, or nothing when there is no countdown."""
        query = self.locations.resolve(args.city, args.country)
        highlight = self.timetable.get_highlight_state(self.prayer_times.fetch_day(query))
        if highlight is not None:
            self._write(self.timetable.format_status_line(highlight))
        return 0

    def show(self, args) -> int:
        if args.status:
            return self.status(args)

        data = self.load(args.city, args.country, args.first_roza)
        days = data["days"]

        if args.all:
            rows = self.timetable.rows(days)
            day = self.timetable.get_day_by_roza(days, data["current_roza"])
        else:
            roza = args.roza or data["current_roza"]
            day = self.timetable.get_day_by_roza(days, roza)
            rows = [self.timetable.to_row(day, roza)]

        highlight = self.timetable.get_highlight_state(day)

        if args.json:
            self._write(json.dumps({
                "location": data["query"],
                "hijri_year": data["target_year"],
                "rows": rows,
                "highlight": highlight,
                "status": self.timetable.format_status_line(highlight) if highlight else None,
            }, ensure_ascii=False, indent=2))
            return 0

        self._print_location(data["query"])
        if args.all:
            self._print_table(rows, data["annotations"])
        else:
            self._print_row(rows[0])
        self._print_status(highlight)

        if args.watch or args.notify:
            self.watch(days, day, notify=args.notify, follow_today=not args.all and args.roza is None)
        return 0

    def _print_location(self, query: dict) -> None:
        if query.get("city"):
            self._write(f"📍 {query['city']}, {query['country']}")
        else:
            self._write(f"📍 {query['latitude']}, {query['longitude']}")

    def _print_row(self, row: dict) -> None:
        self._write(f"Roza {row['roza']}  ·  {row['date']}  ·  {row['hijri']}")
        self._write(f"  Sehar  {row['sehar']}")
        self._write(f"  Iftar  {row['iftar']}")

    def _print_table(self, rows: list, annotations: dict) -> None:
        self._write(f"  {'Roza':<5} {'Sehar':<9} {'Iftar':<9} {'Date':<18} Hijri")
        for row in rows:
            marker = MARKERS.get(annotations.get(row["roza"]), " ")
            self._write(
                f"{marker} {row['roza']:<5} {row['sehar']:<9} {row['iftar']:<9} "
                f"{row['date']:<18} {row['hijri']}"
            )
        self._write(f"{MARKERS['current']} current   {MARKERS['next']} next")

    def _print_status(self, highlight: dict | None) -> None:
        if highlight is None:
            return
        self._write(f"{highlight['current']}  ·  {self.timetable.format_status_line(highlight)}")

    def _day_for_today(self, days: list, fallback: dict) -> dict:
        """The calendar entry dated today in its own timezone, else `fallback`."""
        for day in days:
            today = self._today_in(day["meta"]["timezone"])
            if today is not None and day["date"]["gregorian"]["date"] == self.dates.format_for_api(today):
                return day
        return fallback

    def watch(self, days: list, day: dict, notify: bool = False, follow_today: bool = True) -> None:
        """
        Recompute the highlight every REFRESH_SECONDS until interrupted.

        With follow_today the countdown tracks whichever calendar day is
        today, otherwise it stays on `day`. Reminders are always for today.
        """
        timers = []
        if notify:
            timers = schedule_day_reminders(
                self._day_for_today(days, day),
                self.time_format,
                lead_minutes=int(self.settings.get("reminder_minutes") or 0),
                callback=self._on_notification,
            )
            logger.debug(f"Scheduled {len(timers)} reminder timers")
        try:
            while True:
                time.sleep(REFRESH_SECONDS)
                shown = self._day_for_today(days, day) if follow_today else day
                highlight = self.timetable.get_highlight_state(shown)
                if highlight is None:
                    self._write("No sehar/iftar countdown for today.")
                else:
                    self._print_status(highlight)
        except KeyboardInterrupt:
            self._write()
        finally:
            for t in timers:
                t.cancel()

    def _on_notification(self, title: str, message: str) -> None:
        self._write(f"🔔 {title}: {message}")

    # ──────────────────────────────────────────────────────────────────────
    # cache / location / config
    # ──────────────────────────────────────────────────────────────────────
    def cache_command(self, args) -> int:
        if args.action == "clear":
            self.cache.clear()
            self._write("Cache cleared.")
        else:
            removed = self.cache.prune_expired()
            self._write(f"Removed {removed} expired cache entries.")
        return 0

    def location_command(self, args) -> int:
        if args.action == "show":
            saved = load_manual_location()
            if saved is None:
                self._write("No saved location; it will be detected from your IP address.")
            else:
                self._write(json.dumps(saved, ensure_ascii=False, indent=2))
        elif args.action == "set":
            if args.tz and self.time_format.get_now_parts(args.tz) is None:
                raise RamadanError(f"Unknown timezone: {args.tz}")
            save_manual_location({
                "city": args.city,
                "country": args.country,
                "latitude": args.lat,
                "longitude": args.lon,
                "timezone": args.tz,
            })
            self._write(f"Saved location {args.city}, {args.country}.")
        elif args.action == "clear":
            clear_manual_location()
            self._write("Saved location cleared.")
        else:
            self._write(f"Providers: {', '.join(self.geo.get_provider_names())}")
            location = self.geo.detect()
            if location is None:
                self._write("Could not detect a location.")
                return 1
            self._write(json.dumps(location, ensure_ascii=False, indent=2))
        return 0

    def config_command(self, args) -> int:
        if args.action == "show":
            self._write(json.dumps(config.load_config(), indent=2))
            return 0

        key, raw = args.key, args.value
        if key == "first_roza_date":
            try:
                value = _iso_date(raw).isoformat() if raw not in ("", "none") else None
            except argparse.ArgumentTypeError as e:
                raise RamadanError(f"first_roza_date: {e}")
        else:
            try:
                value = int(raw)
            except ValueError:
                raise RamadanError(f"{key} must be a whole number, got {raw!r}")
        self.settings = config.update_config(**{key: value})
        self._write(f"{key} = {value}")
        return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ramadan-times", description="Ramadan sehar and iftar timetable"
    )
    parser.add_argument("--city", help="City to look up (requires --country)")
    parser.add_argument("--country", help="Country of --city")
    view = parser.add_mutually_exclusive_group()
    view.add_argument("--all", action="store_true", help="Show all 30 rozas")
    view.add_argument("--roza", type=int, help="Show a single roza (1-30)")
    view.add_argument("-s", "--status", action="store_true",
                      help="Print only today's status line, e.g. for a status bar")
    parser.add_argument("--first-roza", type=_iso_date, metavar="YYYY-MM-DD",
                        help="Override the date of the first roza")
    parser.add_argument("--json", action="store_true", help="Print JSON instead of text")
    parser.add_argument("--watch", action="store_true", help="Refresh the countdown every minute")
    parser.add_argument("--notify", action="store_true",
                        help="Desktop reminders for sehar and iftar (implies --watch)")
    parser.add_argument("--cache-dir", help="Directory for cached API responses")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    commands = parser.add_subparsers(dest="command")

    cache = commands.add_parser("cache", help="Manage cached API responses")
    cache.add_argument("action", choices=["clear", "prune"])

    location = commands.add_parser("location", help="Manage the saved location")
    location_actions = location.add_subparsers(dest="action", required=True)
    location_actions.add_parser("show")
    location_actions.add_parser("clear")
    location_actions.add_parser("detect")
    location_set = location_actions.add_parser("set")
    location_set.add_argument("city")
    location_set.add_argument("country")
    location_set.add_argument("--lat", type=float)
    location_set.add_argument("--lon", type=float)
    location_set.add_argument("--tz", help="IANA timezone, e.g. Asia/Karachi")

    settings = commands.add_parser("config", help="Show or change settings")
    settings_actions = settings.add_subparsers(dest="action", required=True)
    settings_actions.add_parser("show")
    settings_set = settings_actions.add_parser("set")
    settings_set.add_argument("key", choices=["method", "school", "first_roza_date", "reminder_minutes"])
    settings_set.add_argument("value")

    return parser


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.verbose)

    if args.roza is not None and not 1 <= args.roza <= 30:
        parser.error("--roza must be between 1 and 30")
    if args.json and (args.watch or args.notify):
        parser.error("--json cannot be combined with --watch or --notify")
    if args.status and (args.json or args.watch or args.notify):
        parser.error("--status cannot be combined with --json, --watch or --notify")

    app = RamadanApp(cache_dir=args.cache_dir)
    handlers = {
        None: app.show,
        "cache": app.cache_command,
        "location": app.location_command,
        "config": app.config_command,
    }
    try:
        return handlers[args.command](args)
    except RamadanError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except requests.RequestException as e:
        print(f"Network error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
