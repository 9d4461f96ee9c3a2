"""In-memory permission repository."""

from dataclasses import replace

from rolegate.domain.entities import Permission
from rolegate.domain.exceptions import Conflict, NotFound, StaleVersion
from rolegate.infrastructure.persistence.memory.store import InMemoryStore


def _sort_key(p: Permission) -> tuple[str, str]:
    return (p.category, p.name)


class InMemoryPermissionRepository:
    """Permission repository backed by InMemoryStore."""

    def __init__(self, store: InMemoryStore) -> None:
        self._store = store

    async def get(self, name: str) -> Permission | None:
        with self._store.lock:
            permission = self._store.permissions.get(name)
            return replace(permission) if permission else None

    async def list_all(self) -> list[Permission]:
        with self._store.lock:
            items = [replace(p) for p in self._store.permissions.values()]
        return sorted(items, key=_sort_key)

    async def list_by_categories(self, categories: list[str]) -> list[Permission]:
        wanted = set(categories)
        with self._store.lock:
            items = [replace(p) for p in self._store.permissions.values() if p.category in wanted]
        return sorted(items, key=_sort_key)

    async def list_names(self) -> frozenset[str]:
        with self._store.lock:
            return frozenset(self._store.permissions)

    async def create(self, permission: Permission) -> Permission:
        with self._store.lock:
            if permission.name in self._store.permissions:
                raise Conflict(f"Permission '{permission.name}' already exists")
            stored = replace(permission, version=1)
            self._store.permissions[permission.name] = stored
            return replace(stored)

    async def save(self, permission: Permission, expected_version: int) -> Permission:
        with self._store.lock:
            current = self._store.permissions.get(permission.name)
            if current is None:
                raise NotFound(f"Permission '{permission.name}' not found")
            if current.version != expected_version:
                raise StaleVersion(
                    f"Permission '{permission.name}' is at version {current.version}, not {expected_version}"
                )
            stored = replace(permission, version=expected_version + 1)
            self._store.permissions[permission.name] = stored
            return replace(stored)

    async def delete(self, name: str) -> None:
        """Remove ``name`` unless an active role lists it; check and delete under one lock."""
        with self._store.lock:
            if name not in self._store.permissions:
                raise NotFound(f"Permission '{name}' not found")
            referencing = sorted(
                r.name
                for r in self._store.roles.values()
                if r.is_active and name in r.permissions
            )
            if referencing:
                raise Conflict(
                    f"Permission '{name}' is referenced by active roles: {', '.join(referencing)}"
                )
            del self._store.permissions[name]
