"""Shared in-memory state for the memory adapter."""

import threading

from rolegate.domain.entities import Override, Permission, Role


class InMemoryStore:
    """Maps guarded by one lock so compare-and-swap is atomic across threads."""

    def __init__(self) -> None:
        self.lock = threading.RLock()
        self.permissions: dict[str, Permission] = {}
        self.roles: dict[str, Role] = {}
        self.overrides: dict[str, Override] = {}
