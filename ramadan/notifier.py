"""Desktop notifications for sehar and iftar."""

import logging
import threading

from plyer import notification as plyer_notification

logger = logging.getLogger(__name__)

APP_NAME = "Ramadan Times"

# Aladhan timing name -> what the user is reminded about
EVENTS = {
    "Fajr": "Sehar",
    "Maghrib": "Iftar",
}


def _send_plyer(title: str, message: str, timeout: int = 10) -> None:
    """Send a desktop notification via plyer (cross-platform)."""
    try:
        plyer_notification.notify(
            app_name=APP_NAME,
            title=title,
            message=message,
            timeout=timeout,
        )
    except Exception as e:
        # plyer raises NotImplementedError, or backend-specific errors, when
        # no notification service is available.
        logger.warning(f"Desktop notification failed: {e}")


def notify_reminder(event: str, minutes: int, callback=None) -> None:
    """Notify that sehar ends / iftar starts in `minutes` minutes."""
    if event == "Sehar":
        title = f"Sehar ends in {minutes} minutes"
        message = f"Fajr is in {minutes} minutes. Finish your sehar."
    else:
        title = f"Iftar in {minutes} minutes"
        message = f"Maghrib is in {minutes} minutes. Get ready to break your fast."
    _send_plyer(title, message, timeout=15)
    if callback:
        callback(title, message)


def notify_event(event: str, callback=None) -> None:
    """Notify that sehar has ended / iftar has arrived."""
    if event == "Sehar":
        title = "Sehar time is over"
        message = "Fajr has started. Your roza begins now."
    else:
        title = "Iftar time!"
        message = "Maghrib has started. Time to break your fast."
    _send_plyer(title, message, timeout=30)
    if callback:
        callback(title, message)


def schedule_reminders(event: str, seconds_until_event: int, lead_minutes: int = 15, callback=None) -> list:
    """
    Schedule a reminder `lead_minutes` before the event and an alert at the event.

    Returns the Timer objects so they can be cancelled.
    """
    timers = []

    delay = seconds_until_event - lead_minutes * 60
    if lead_minutes > 0 and delay > 0:
        t = threading.Timer(delay, notify_reminder, args=(event, lead_minutes, callback))
        t.daemon = True
        t.start()
        timers.append(t)

    if seconds_until_event > 0:
        t = threading.Timer(seconds_until_event, notify_event, args=(event, callback))
        t.daemon = True
        t.start()
        timers.append(t)

    return timers


def schedule_day_reminders(day: dict, time_format, lead_minutes: int = 15, callback=None) -> list:
    """
    Schedule sehar and iftar notifications for `day` if it is today in the
    day's own timezone. Events that have already passed are skipped.
    """
    now = time_format.get_now_parts(day["meta"]["timezone"])
    if now is None:
        return []
    today = f"{now['day']:02d}-{now['month']:02d}-{now['year']:04d}"
    if day["date"]["gregorian"]["date"] != today:
        logger.debug(f"Not scheduling reminders for {day['date']['gregorian']['date']}, today is {today}")
        return []

    timers = []
    for timing, event in EVENTS.items():
        minutes = time_format.to_minutes(day["timings"][timing])
        if minutes is None:
            continue
        seconds = (minutes - now["minutes"]) * 60
        timers.extend(schedule_reminders(event, seconds, lead_minutes, callback))
    return timers
