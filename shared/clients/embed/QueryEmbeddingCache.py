"""Short-lived cache for query embeddings.

Suggestion searches for the same roadmap node are often repeated within a few
minutes; caching the query vector saves one provider round trip per repeat.
Document embeddings never go through this cache.
"""

import time
from typing import Callable

from shared.helper.HelperConfig import HelperConfig

DEFAULT_TTL_SECONDS = 300
DEFAULT_MAX_ENTRIES = 100
EVICTION_HEADROOM = 10


class QueryEmbeddingCache:
    """Bounded TTL cache keyed by (input_type, exact query text).

    Vectors are copied on the way in and on the way out, so a caller that
    mutates a returned vector does not alter the cached one.

    Entries expire ttl_seconds after insertion. When an insert pushes the size
    above max_entries, the oldest entries are evicted until the size is
    max_entries - EVICTION_HEADROOM, so the next few inserts do not trigger
    another eviction pass.

    Not guarded by a lock: all access happens on the event loop thread and no
    method awaits.
    """

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        max_entries: int = DEFAULT_MAX_ENTRIES,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.ttl_seconds = ttl_seconds
        self.max_entries = max_entries
        self._clock = clock
        # insertion-ordered: first key is the oldest entry
        self._entries: dict[tuple[str, str], tuple[float, list[float]]] = {}

    @classmethod
    def from_config(cls, helper_config: HelperConfig) -> "QueryEmbeddingCache":
        """Build a cache from EMBED_QUERY_CACHE_TTL / EMBED_QUERY_CACHE_MAX_ENTRIES."""
        return cls(
            ttl_seconds=helper_config.get_number_val("EMBED_QUERY_CACHE_TTL", default=DEFAULT_TTL_SECONDS),
            max_entries=int(helper_config.get_number_val("EMBED_QUERY_CACHE_MAX_ENTRIES", default=DEFAULT_MAX_ENTRIES)),
        )

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, text: str, input_type: str) -> list[float] | None:
        """Return a copy of the cached vector for (input_type, text), or None if absent or expired."""
        key = (input_type, text)
        entry = self._entries.get(key)
        if entry is None:
            return None
        stored_at, vector = entry
        if self._clock() - stored_at > self.ttl_seconds:
            del self._entries[key]
            return None
        return list(vector)

    def set(self, text: str, input_type: str, vector: list[float]) -> None:
        """Store a copy of vector and evict the oldest entries if the cap is exceeded."""
        key = (input_type, text)
        self._entries.pop(key, None)
        self._entries[key] = (self._clock(), list(vector))
        if len(self._entries) > self.max_entries:
            self._evict_oldest(target_size=max(0, self.max_entries - EVICTION_HEADROOM))

    def clear(self) -> None:
        self._entries.clear()

    def _evict_oldest(self, target_size: int) -> None:
        overflow = len(self._entries) - target_size
        for key in list(self._entries)[:overflow]:
            del self._entries[key]
