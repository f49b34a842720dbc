"""File-based TTL cache for API responses."""

import hashlib
import json
import logging
import os
import tempfile
import time

logger = logging.getLogger(__name__)

DEFAULT_CACHE_DIR = os.path.join(
    os.path.expanduser("~"), ".cache", "ramadan-times", "prayer-timings"
)

_HOUR_MS = 60 * 60 * 1000

CACHE_TTL = {
    "single_day_timings": 6 * _HOUR_MS,
    "full_calendar": 24 * _HOUR_MS,
    "geo_ip": 1 * _HOUR_MS,
}


def _now_ms() -> int:
    return int(time.time() * 1000)


def _read_entry(path: str):
    """Return (data, expires_at) from a cache file. Raises ValueError if corrupt."""
    with open(path, "r", encoding="utf-8") as f:
        entry = json.load(f)
    if not isinstance(entry, dict) or "data" not in entry:
        raise ValueError("cache entry has no data")
    expires_at = entry.get("expiresAt")
    if isinstance(expires_at, bool) or not isinstance(expires_at, (int, float)):
        raise ValueError("cache entry has no numeric expiresAt")
    return entry["data"], expires_at


def _discard(path: str) -> bool:
    """Remove path; False if another process already removed it."""
    try:
        os.remove(path)
    except FileNotFoundError:
        return False
    return True


class CacheRepository:
    """
    One JSON file per key, named by the SHA-256 of the key.

    There is no locking. Entries are checked against the clock on every
    read, and a file that fails to parse is treated as a miss. The directory
    is created on the first write.
    """

    def __init__(self, cache_dir: str = None):
        self.cache_dir = os.path.expanduser(cache_dir or DEFAULT_CACHE_DIR)

    def _file_path(self, key: str) -> str:
        digest = hashlib.sha256(key.encode("utf-8")).hexdigest()
        return os.path.join(self.cache_dir, f"{digest}.json")

    def get(self, key: str):
        """Cached data for key, or None if missing, expired or corrupt."""
        path = self._file_path(key)
        try:
            data, expires_at = _read_entry(path)
        except FileNotFoundError:
            return None
        except ValueError as e:
            logger.debug(f"Ignoring corrupt cache entry {path}: {e}")
            return None

        if _now_ms() > expires_at:
            _discard(path)
            return None
        return data

    def set(self, key: str, data, ttl_ms: int) -> None:
        """Store data under key for ttl_ms milliseconds, replacing any old entry."""
        now = _now_ms()
        entry = {"data": data, "expiresAt": now + ttl_ms, "createdAt": now}
        os.makedirs(self.cache_dir, exist_ok=True)

        fd, tmp_path = tempfile.mkstemp(dir=self.cache_dir, suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(entry, f)
            os.replace(tmp_path, self._file_path(key))
        except BaseException:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise

    def delete(self, key: str) -> bool:
        return _discard(self._file_path(key))

    def clear(self) -> None:
        """Remove every cache entry. Does nothing if the directory is gone."""
        if not os.path.isdir(self.cache_dir):
            return
        for name in os.listdir(self.cache_dir):
            if name.endswith(".json"):
                os.remove(os.path.join(self.cache_dir, name))

    def prune_expired(self) -> int:
        """Delete expired and unreadable entries; return how many were removed."""
        if not os.path.isdir(self.cache_dir):
            return 0

        removed = 0
        now = _now_ms()
        for name in os.listdir(self.cache_dir):
            if not name.endswith(".json"):
                continue
            path = os.path.join(self.cache_dir, name)
            try:
                _, expires_at = _read_entry(path)
            except FileNotFoundError:
                continue
            except ValueError:
                expired = True
            else:
                expired = now > expires_at
            if expired and _discard(path):
                removed += 1

        logger.debug(f"Pruned {removed} cache entries from {self.cache_dir}")
        return removed


class CacheService:
    """Cache access with the key layout used for prayer and geo lookups."""

    def __init__(self, repository: CacheRepository):
        self.repository = repository

    def get(self, key: str):
        return self.repository.get(key)

    def set(self, key: str, data, ttl_ms: int) -> None:
        self.repository.set(key, data, ttl_ms)

    def delete(self, key: str) -> bool:
        return self.repository.delete(key)

    def clear(self) -> None:
        self.repository.clear()

    def prune_expired(self) -> int:
        return self.repository.prune_expired()

    def build_timings_key(self, city, country, method: int, school: int, date: str) -> str:
        return f"timings:{city}:{country}:{method}:{school}:{date}"

    def build_calendar_key(self, city, country, method: int, school: int, year: int) -> str:
        return f"calendar:{city}:{country}:{method}:{school}:{year}"

    def build_geo_key(self, provider: str) -> str:
        return f"geo:ip:{provider}"
