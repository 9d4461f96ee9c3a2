"""In-memory Unit of Work.

Writes land in the shared store immediately. Services validate before they
write and make at most one write per unit of work, so there is nothing to
roll back.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from rolegate.infrastructure.persistence.memory.override_repository import (
    InMemoryOverrideRepository,
)
from rolegate.infrastructure.persistence.memory.permission_repository import (
    InMemoryPermissionRepository,
)
from rolegate.infrastructure.persistence.memory.role_repository import (
    InMemoryRoleRepository,
)
from rolegate.infrastructure.persistence.memory.store import InMemoryStore


class InMemoryUnitOfWork:
    """Repositories over one shared InMemoryStore."""

    def __init__(self, store: InMemoryStore) -> None:
        self.permissions = InMemoryPermissionRepository(store)
        self.roles = InMemoryRoleRepository(store)
        self.overrides = InMemoryOverrideRepository(store)

    async def commit(self) -> None:
        pass

    async def rollback(self) -> None:
        pass


def create_memory_uow_factory(store: InMemoryStore | None = None) -> object:
    """Create UnitOfWork factory (async context manager) over ``store``."""
    store = store if store is not None else InMemoryStore()

    @asynccontextmanager
    async def factory() -> AsyncIterator[InMemoryUnitOfWork]:
        yield InMemoryUnitOfWork(store)

    return factory
