"""
File-backed time-to-live cache for terminal-brief.

Each key is stored as one JSON record holding the value and the time it was
written. Reads compare the record's age against a caller-supplied maximum
age. Nothing in here raises: unreadable records are misses and failed writes
are logged and dropped, so a broken cache only costs extra API calls.
"""

import contextlib
import hashlib
import json
import logging
import os
import re
import tempfile
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Awaitable, Callable, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

_UNSAFE_KEY_CHARS = re.compile(r"[^A-Za-z0-9._-]")


@dataclass(frozen=True)
class CacheResult:
    """
    Outcome of a cache lookup.

    Carries absence explicitly so that cached falsy values (0, [], None)
    are still hits.
    """
    found: bool
    value: Any = None
    age: Optional[float] = None

    @classmethod
    def hit(cls, value: Any, age: Optional[float] = None) -> 'CacheResult':
        """Factory for a live entry."""
        return cls(found=True, value=value, age=age)

    @classmethod
    def miss(cls) -> 'CacheResult':
        """Factory for an absent or expired entry."""
        return cls(found=False)


class Cache:
    """
    Key-value store with age-based expiry, one file per key.

    An entry is live while now - stored_at < max_age; an entry exactly
    max_age seconds old is expired.
    """

    def __init__(self, directory: Path, clock: Callable[[], float] = time.time,
                 refresh: bool = False):
        """
        Initialize the cache.

        Args:
            directory: Directory holding the cache records
            clock: Returns the current time in epoch seconds
            refresh: Treat every read as a miss so requests refresh their entries
        """
        self.directory = Path(directory)
        self.clock = clock
        self.refresh = refresh

    def ensure_directory(self) -> bool:
        """Create the cache directory. Returns False (after logging) on failure."""
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            return True
        except OSError as e:
            logger.error("Failed to create cache directory %s: %s", self.directory, e)
            return False

    def path_for(self, key: str) -> Path:
        """
        Get the record path for a key.

        The readable prefix is the sanitized key; the digest keeps keys that
        sanitize to the same text in separate files.
        """
        digest = hashlib.sha256(key.encode("utf-8")).hexdigest()[:12]
        return self.directory / f"{_UNSAFE_KEY_CHARS.sub('_', key)}-{digest}.json"

    def get(self, key: str, max_age: float) -> CacheResult:
        """
        Look up a live entry.

        Args:
            key: Cache key
            max_age: Maximum acceptable age in seconds

        Returns:
            CacheResult.hit with the stored value, or CacheResult.miss
        """
        if max_age <= 0 or self.refresh:
            return CacheResult.miss()

        path = self.path_for(key)
        try:
            with open(path, "r", encoding="utf-8") as f:
                record = json.load(f)
            stored_at = float(record["stored_at"])
            value = record["value"]
            stored_key = record["key"]
        except FileNotFoundError:
            return CacheResult.miss()
        except (OSError, ValueError, KeyError, TypeError) as e:
            logger.debug("Ignoring unreadable cache record %s: %s", path, e)
            return CacheResult.miss()

        if stored_key != key:
            logger.debug("Cache record %s belongs to %r, not %r", path, stored_key, key)
            return CacheResult.miss()

        age = self.clock() - stored_at
        if age < max_age:
            return CacheResult.hit(value, age)
        logger.debug("Cache entry %s expired (%.0fs old)", key, age)
        return CacheResult.miss()

    def put(self, key: str, value: Any) -> bool:
        """
        Store a value under key with the current time.

        Overwrites any previous entry. Failures are logged, never raised.

        Returns:
            True if the record was written
        """
        record = {"key": key, "stored_at": self.clock(), "value": value}
        path = self.path_for(key)
        tmp_name = None
        try:
            payload = json.dumps(record, indent=2)
            self.directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self.directory, suffix=".tmp")
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(payload)
            os.replace(tmp_name, path)
        except (OSError, TypeError, ValueError) as e:
            logger.error("Failed to cache data for %s: %s", key, e)
            if tmp_name is not None:
                with contextlib.suppress(OSError):
                    os.unlink(tmp_name)
            return False

        logger.debug("Cached data for %s", key)
        return True

    async def request_with_cache(
        self,
        key: str,
        max_age: float,
        producer: Callable[[], Awaitable[T]],
    ) -> T:
        """
        Return a live cached value, or await the producer and cache its result.

        Args:
            key: Cache key
            max_age: Maximum acceptable age in seconds
            producer: Coroutine factory fetching a fresh value

        Returns:
            Cached or freshly produced value

        Raises:
            Whatever the producer raises; nothing is cached in that case.
        """
        cached = self.get(key, max_age)
        if cached.found:
            logger.debug("Using cached data for %s", key)
            return cached.value

        logger.debug("Cache miss for %s, making API request", key)
        value = await producer()
        self.put(key, value)
        return value
