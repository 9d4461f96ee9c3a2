"""In-memory role repository."""

from dataclasses import replace

from rolegate.domain.entities import Role, role_order_key
from rolegate.domain.exceptions import Conflict, NotFound, StaleVersion
from rolegate.infrastructure.persistence.memory.store import InMemoryStore


class InMemoryRoleRepository:
    """Role repository backed by InMemoryStore.

    Writes check catalog references and the parent link under the store lock,
    in the same step as the write.
    """

    def __init__(self, store: InMemoryStore) -> None:
        self._store = store

    def _check(self, name: str, expected_version: int) -> Role:
        current = self._store.roles.get(name)
        if current is None:
            raise NotFound(f"Role '{name}' not found")
        if current.version != expected_version:
            raise StaleVersion(
                f"Role '{name}' is at version {current.version}, not {expected_version}"
            )
        return current

    def _check_references(self, role: Role) -> None:
        if role.parent is not None and role.parent not in self._store.roles:
            raise NotFound(f"Parent role '{role.parent}' not found")
        if not role.is_active:
            return
        missing = role.uncatalogued(self._store.permissions.keys())
        if missing:
            raise Conflict(
                f"Role '{role.name}' references uncatalogued permissions: {', '.join(missing)}"
            )

    def _children(self, name: str) -> list[Role]:
        return [r for r in self._store.roles.values() if r.parent == name]

    async def get(self, name: str) -> Role | None:
        with self._store.lock:
            role = self._store.roles.get(name)
            return replace(role) if role else None

    async def get_many(self, names: list[str]) -> list[Role]:
        with self._store.lock:
            return [replace(self._store.roles[n]) for n in names if n in self._store.roles]

    async def list_all(self) -> list[Role]:
        with self._store.lock:
            roles = [replace(r) for r in self._store.roles.values()]
        return sorted(roles, key=role_order_key)

    async def list_referencing(self, permission_name: str, active_only: bool = True) -> list[Role]:
        with self._store.lock:
            return [
                replace(r)
                for r in self._store.roles.values()
                if permission_name in r.permissions and (r.is_active or not active_only)
            ]

    async def list_children(self, name: str) -> list[Role]:
        with self._store.lock:
            return sorted((replace(r) for r in self._children(name)), key=role_order_key)

    async def create(self, role: Role) -> Role:
        with self._store.lock:
            if role.name in self._store.roles:
                raise Conflict(f"Role '{role.name}' already exists")
            self._check_references(role)
            stored = replace(role, version=1)
            self._store.roles[role.name] = stored
            return replace(stored)

    async def save(self, role: Role, expected_version: int) -> Role:
        with self._store.lock:
            self._check(role.name, expected_version)
            self._check_references(role)
            stored = replace(role, version=expected_version + 1)
            self._store.roles[role.name] = stored
            return replace(stored)

    async def rename(self, old_name: str, role: Role, expected_version: int) -> Role:
        with self._store.lock:
            self._check(old_name, expected_version)
            if role.name in self._store.roles:
                raise Conflict(f"Role '{role.name}' already exists")
            if self._children(old_name):
                raise Conflict(f"Role '{old_name}' has child roles and cannot be renamed")
            self._check_references(role)
            stored = replace(role, version=expected_version + 1)
            del self._store.roles[old_name]
            self._store.roles[role.name] = stored
            return replace(stored)

    async def delete(self, name: str, expected_version: int) -> None:
        with self._store.lock:
            self._check(name, expected_version)
            if self._children(name):
                raise Conflict(f"Role '{name}' has child roles")
            del self._store.roles[name]
