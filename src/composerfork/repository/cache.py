"""In-memory cache for remote composer.json lookups."""

from __future__ import annotations

from typing import Dict, Generic, Optional, Tuple, TypeVar

T = TypeVar("T")

CacheKey = Tuple[str, Optional[str]]


class ManifestCache(Generic[T]):
    """Cache of resolved remote manifests.

    Entries live for as long as the cache object does; a command builds one
    cache and drops it when it finishes, so there is no expiry. Keys are the
    raw reference string the user typed plus the explicit branch, if any.
    """

    def __init__(self) -> None:
        self._cache: Dict[CacheKey, T] = {}
        self.hits = 0
        self.misses = 0

    @staticmethod
    def _make_key(raw: str, branch: Optional[str] = None) -> CacheKey:
        """Generate cache key."""
        return raw, branch

    def get(self, raw: str, branch: Optional[str] = None) -> Optional[T]:
        """Get a cached manifest, or None if it hasn't been resolved yet."""
        entry = self._cache.get(self._make_key(raw, branch))
        if entry is None:
            self.misses += 1
        else:
            self.hits += 1
        return entry

    def set(self, raw: str, branch: Optional[str], value: T) -> None:
        """Cache a resolved manifest."""
        self._cache[self._make_key(raw, branch)] = value

    def invalidate(self, raw: str, branch: Optional[str] = None) -> None:
        """Drop one cached entry."""
        self._cache.pop(self._make_key(raw, branch), None)

    def clear(self) -> None:
        """Drop every entry and reset statistics."""
        self._cache.clear()
        self.hits = 0
        self.misses = 0

    def __contains__(self, key: object) -> bool:
        if isinstance(key, str):
            key = self._make_key(key)
        return key in self._cache

    def __len__(self) -> int:
        return len(self._cache)
