"""Resolution cache - epoch-stamped memoization in front of the resolver."""

import logging
import threading
from collections import OrderedDict
from collections.abc import Iterable
from dataclasses import dataclass

from rolegate.application.services.epoch import EpochTracker
from rolegate.application.services.resolver import PermissionResolver, normalize_role_names
from rolegate.domain.entities import EffectivePermissionSet

logger = logging.getLogger(__name__)

CacheKey = tuple[str, tuple[str, ...]]


@dataclass
class CacheStats:
    """Hit/miss counters since the cache was created."""

    hits: int = 0
    misses: int = 0
    size: int = 0


class ResolutionCache:
    """LRU of resolved sets keyed by (user_id, sorted role names).

    An entry is served only while its stamp equals the tracker's current stamp
    for the same key; anything else is recomputed and overwritten.
    """

    def __init__(
        self,
        resolver: PermissionResolver,
        epochs: EpochTracker,
        max_entries: int = 10_000,
    ) -> None:
        self._resolver = resolver
        self._epochs = epochs
        self._max_entries = max_entries
        self._entries: OrderedDict[CacheKey, EffectivePermissionSet] = OrderedDict()
        self._lock = threading.Lock()
        self._hits = 0
        self._misses = 0

    def _lookup(self, key: CacheKey) -> EffectivePermissionSet | None:
        user_id, names = key
        current = self._epochs.stamp(user_id, names)
        with self._lock:
            entry = self._entries.get(key)
            if entry is None or entry.epoch != current:
                self._misses += 1
                return None
            self._entries.move_to_end(key)
            self._hits += 1
            return entry

    def _store(self, key: CacheKey, entry: EffectivePermissionSet) -> None:
        with self._lock:
            existing = self._entries.get(key)
            if existing is not None and existing.epoch > entry.epoch:
                return
            self._entries[key] = entry
            self._entries.move_to_end(key)
            if self._max_entries and len(self._entries) > self._max_entries:
                self._entries.popitem(last=False)

    async def resolve(self, user_id: str, role_names: Iterable[str]) -> EffectivePermissionSet:
        key = (user_id, normalize_role_names(role_names))
        entry = self._lookup(key)
        if entry is not None:
            logger.debug("Cache hit for user %s roles %s", user_id, key[1])
            return entry

        logger.debug("Cache miss for user %s roles %s", user_id, key[1])
        entry = await self._resolver.resolve(user_id, key[1])
        self._store(key, entry)
        return entry

    async def has_permission(
        self, user_id: str, role_names: Iterable[str], permission_name: str
    ) -> bool:
        """Membership test; a fresh entry answers without touching the stores."""
        entry = await self.resolve(user_id, role_names)
        return permission_name in entry.permissions

    def invalidate(self) -> None:
        """Drop every entry. Always safe; entries are recomputable."""
        with self._lock:
            self._entries.clear()

    @property
    def stats(self) -> CacheStats:
        with self._lock:
            return CacheStats(hits=self._hits, misses=self._misses, size=len(self._entries))
