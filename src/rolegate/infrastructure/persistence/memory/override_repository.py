"""In-memory override repository."""

from dataclasses import replace

from rolegate.domain.entities import Override
from rolegate.domain.exceptions import StaleVersion
from rolegate.infrastructure.persistence.memory.store import InMemoryStore


class InMemoryOverrideRepository:
    """Override repository backed by InMemoryStore."""

    def __init__(self, store: InMemoryStore) -> None:
        self._store = store

    async def get(self, user_id: str) -> Override | None:
        with self._store.lock:
            override = self._store.overrides.get(user_id)
            return replace(override) if override else None

    async def save(self, override: Override, expected_version: int) -> Override:
        with self._store.lock:
            current = self._store.overrides.get(override.user_id)
            current_version = current.version if current else 0
            if current_version != expected_version:
                raise StaleVersion(
                    f"Overrides for user '{override.user_id}' are at version "
                    f"{current_version}, not {expected_version}"
                )
            stored = replace(override, version=expected_version + 1)
            self._store.overrides[override.user_id] = stored
            return replace(stored)
