"""Epoch tracking for cache invalidation.

In ``global`` scope a single counter is advanced by every mutation. In
``scoped`` scope roles and users get their own epochs, all drawn from one
monotonic clock, plus a catalog-wide floor; the stamp for a (user, roles)
pair is the maximum of the relevant values, so it only moves when something
that pair depends on changed.
"""

import threading
from collections.abc import Iterable


class EpochTracker:
    """Process-local epoch counters. Starts at zero; a restart invalidates everything."""

    def __init__(self, scoped: bool = False) -> None:
        self._scoped = scoped
        self._lock = threading.Lock()
        self._clock = 0
        self._floor = 0
        self._roles: dict[str, int] = {}
        self._users: dict[str, int] = {}

    @property
    def scoped(self) -> bool:
        return self._scoped

    @property
    def catalog_epoch(self) -> int:
        """Moves whenever the global epoch is advanced, e.g. on any catalog change."""
        return self._floor

    @property
    def current(self) -> int:
        """Latest value handed out by the clock."""
        return self._clock

    def advance(self) -> int:
        """Advance the global epoch, invalidating every stamp."""
        with self._lock:
            self._clock += 1
            self._floor = self._clock
            return self._clock

    def advance_role(self, role_name: str) -> int:
        if not self._scoped:
            return self.advance()
        with self._lock:
            self._clock += 1
            self._roles[role_name] = self._clock
            return self._clock

    def advance_user(self, user_id: str) -> int:
        if not self._scoped:
            return self.advance()
        with self._lock:
            self._clock += 1
            self._users[user_id] = self._clock
            return self._clock

    def stamp(self, user_id: str, role_names: Iterable[str]) -> int:
        """Epoch a resolution for this user and role list depends on."""
        if not self._scoped:
            return self._clock
        return max(
            self._floor,
            self._users.get(user_id, 0),
            *(self._roles.get(name, 0) for name in role_names),
        )
