"""Session-scoped cache for country insights.

``SessionStorage`` is a per-session string key/value store with an optional
byte quota. ``SessionInsightCache`` layers the insight cache contract on
top of it: a fixed key prefix, JSON entries of the form
``{"data": <CountryInsights>, "timestamp": <epoch ms>}``, and best-effort
semantics. Reads never raise and writes never propagate storage failures.
There is no TTL; entries live until cleared or the session ends.
"""

import json
import logging
import time
from typing import Callable, Dict, List, Optional, Protocol

from pydantic import ValidationError

from app.logging_utils import log_event
from country_insights.schema import CountryInsights

logger = logging.getLogger(__name__)

DEFAULT_CACHE_PREFIX = "eu_dashboard_cache_"


class CacheStorageError(RuntimeError):
    """Raised by storage backends when a read or write cannot be served."""


class CacheQuotaExceededError(CacheStorageError):
    """Raised when a write would push the storage past its byte quota."""


class SessionStorage:
    """In-process string store owned by a single user session.

    Args:
        quota_bytes: Maximum UTF-8 size of all keys and values together.
            ``0`` disables the quota.
    """

    def __init__(self, quota_bytes: int = 0) -> None:
        self._items: Dict[str, str] = {}
        self._quota_bytes = max(0, quota_bytes)

    @staticmethod
    def _size(key: str, value: str) -> int:
        return len(key.encode("utf-8")) + len(value.encode("utf-8"))

    @property
    def used_bytes(self) -> int:
        return sum(self._size(key, value) for key, value in self._items.items())

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        if self._quota_bytes:
            current = self._items.get(key)
            freed = self._size(key, current) if current is not None else 0
            projected = self.used_bytes - freed + self._size(key, value)
            if projected > self._quota_bytes:
                raise CacheQuotaExceededError(
                    f"Storage quota of {self._quota_bytes} bytes exceeded "
                    f"({projected} bytes requested)."
                )
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)

    def keys(self) -> List[str]:
        return list(self._items)

    def clear(self) -> None:
        self._items.clear()


class InsightCache(Protocol):
    """Cache contract consumed by the insight service."""

    def get(self, key: str) -> Optional[CountryInsights]:
        ...

    def set(self, key: str, value: CountryInsights) -> None:
        ...

    def has(self, key: str) -> bool:
        ...

    def remove(self, key: str) -> None:
        ...

    def clear(self) -> None:
        ...

    def list_keys(self) -> List[str]:
        ...


class SessionInsightCache:
    """``InsightCache`` backed by a ``SessionStorage``.

    Keys are stored as ``prefix + key``; ``list_keys`` returns them with the
    prefix stripped and ``clear`` only touches prefixed keys.
    """

    def __init__(
        self,
        storage: SessionStorage,
        prefix: str = DEFAULT_CACHE_PREFIX,
        clock: Optional[Callable[[], float]] = None,
    ) -> None:
        self._storage = storage
        self._prefix = prefix
        self._clock = clock or time.time

    def _full_key(self, key: str) -> str:
        return self._prefix + key

    def get(self, key: str) -> Optional[CountryInsights]:
        """Return the cached insights for *key*, or None.

        Unreadable or corrupt entries are logged and reported as absent.
        """
        try:
            raw = self._storage.get_item(self._full_key(key))
            if raw is None:
                return None
            entry = json.loads(raw)
            return CountryInsights.model_validate(entry["data"])
        except (CacheStorageError, json.JSONDecodeError, TypeError, KeyError, ValidationError) as exc:
            log_event(
                logger,
                logging.ERROR,
                "insight_cache_get_failed",
                key=key,
                error_type=type(exc).__name__,
                error=str(exc),
            )
            return None

    def set(self, key: str, value: CountryInsights) -> None:
        """Store *value* under *key*; storage failures are logged and dropped."""
        entry = {
            "data": value.model_dump(mode="json"),
            "timestamp": int(self._clock() * 1000),
        }
        try:
            self._storage.set_item(self._full_key(key), json.dumps(entry))
        except CacheStorageError as exc:
            log_event(
                logger,
                logging.ERROR,
                "insight_cache_set_failed",
                key=key,
                error_type=type(exc).__name__,
                error=str(exc),
            )

    def has(self, key: str) -> bool:
        try:
            return self._storage.get_item(self._full_key(key)) is not None
        except CacheStorageError:
            return False

    def remove(self, key: str) -> None:
        self._storage.remove_item(self._full_key(key))

    def clear(self) -> None:
        for full_key in self._storage.keys():
            if full_key.startswith(self._prefix):
                self._storage.remove_item(full_key)

    def list_keys(self) -> List[str]:
        return [
            full_key[len(self._prefix) :]
            for full_key in self._storage.keys()
            if full_key.startswith(self._prefix)
        ]
