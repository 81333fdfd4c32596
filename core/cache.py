"""
Process-lifetime caches for enrichment results.

Entries never expire while the process lives; staleness of Wikidata and
Wikipedia data over that span is acceptable. Call sites only depend on the
EnrichmentCache interface so a bounded policy can be dropped in later.
"""

from abc import ABC, abstractmethod
from typing import Dict, Generic, Optional, TypeVar
from pydantic import BaseModel
import threading

T = TypeVar("T", bound=BaseModel)


class EnrichmentCache(ABC, Generic[T]):
    """get / put / merge-non-null access to cached records."""

    @abstractmethod
    def get(self, key: str) -> Optional[T]:
        pass

    @abstractmethod
    def put(self, key: str, value: T) -> None:
        pass

    @abstractmethod
    def merge_non_null(self, key: str, value: T) -> T:
        """Merge value into the cached entry without erasing known fields."""
        pass

    @abstractmethod
    def __contains__(self, key: str) -> bool:
        pass

    @abstractmethod
    def __len__(self) -> int:
        pass


class InMemoryCache(EnrichmentCache[T]):
    """Unbounded dict guarded by a mutex."""

    def __init__(self):
        self._entries: Dict[str, T] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[T]:
        with self._lock:
            return self._entries.get(key)

    def put(self, key: str, value: T) -> None:
        with self._lock:
            self._entries[key] = value

    def merge_non_null(self, key: str, value: T) -> T:
        with self._lock:
            existing = self._entries.get(key)
            if existing is None:
                merged = value
            else:
                updates = {
                    field: new_value
                    for field, new_value in value.model_dump().items()
                    if new_value is not None
                }
                merged = existing.model_copy(update=updates)
            self._entries[key] = merged
            return merged

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __contains__(self, key: str) -> bool:
        with self._lock:
            return key in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
