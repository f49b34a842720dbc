"""User settings stored as JSON under ~/.ramadan-times."""

import json
import logging
import os

logger = logging.getLogger(__name__)

CONFIG_DIR = os.path.join(os.path.expanduser("~"), ".ramadan-times")
CONFIG_FILE = os.path.join(CONFIG_DIR, "config.json")

# Aladhan method 2 = ISNA; school 0 = Shafi, 1 = Hanafi
DEFAULT_METHOD = 2
DEFAULT_SCHOOL = 0

DEFAULT_CONFIG = {
    "method": DEFAULT_METHOD,
    "school": DEFAULT_SCHOOL,
    "first_roza_date": None,   # "YYYY-MM-DD" override for the first fast
    "reminder_minutes": 15,
}


def load_config() -> dict:
    """
    Load settings merged over DEFAULT_CONFIG.
    A missing or unreadable file yields the defaults.
    """
    config = dict(DEFAULT_CONFIG)
    if not os.path.isfile(CONFIG_FILE):
        return config
    try:
        with open(CONFIG_FILE, "r", encoding="utf-8") as f:
            data = json.load(f)
    except ValueError as e:
        logger.warning(f"Ignoring unreadable config file {CONFIG_FILE}: {e}")
        return config
    if isinstance(data, dict):
        config.update({k: v for k, v in data.items() if k in DEFAULT_CONFIG})
    return config


def save_config(config: dict) -> None:
    os.makedirs(CONFIG_DIR, exist_ok=True)
    with open(CONFIG_FILE, "w", encoding="utf-8") as f:
        json.dump(config, f, indent=2)


def update_config(**changes) -> dict:
    """Apply changes to the stored settings and return the result."""
    unknown = set(changes) - set(DEFAULT_CONFIG)
    if unknown:
        raise KeyError(f"Unknown config keys: {', '.join(sorted(unknown))}")
    config = load_config()
    config.update(changes)
    save_config(config)
    return config


def clear_config() -> None:
    if os.path.isfile(CONFIG_FILE):
        os.remove(CONFIG_FILE)
