"""Pytest fixtures for rolegate tests."""

from __future__ import annotations

import asyncio
import inspect
from contextlib import asynccontextmanager
from datetime import UTC, datetime

import pytest

from rolegate.application.services import (
    EpochTracker,
    OverrideStore,
    PermissionCatalog,
    PermissionResolver,
    ResolutionCache,
    RoleStore,
)
from rolegate.config import Settings
from rolegate.domain.entities import Override, Permission
from rolegate.infrastructure.persistence.memory.store import InMemoryStore
from rolegate.infrastructure.persistence.memory.unit_of_work import (
    InMemoryUnitOfWork,
    create_memory_uow_factory,
)
from rolegate.main import build_facade


# --- Fakes ---


class FakeRoleAssignments:
    """RoleAssignmentLookup with fixed counts per role."""

    def __init__(self, counts: dict[str, int] | None = None) -> None:
        self.counts = counts or {}
        self.calls: list[str] = []

    async def count_users_with_role(self, role_name: str) -> int:
        self.calls.append(role_name)
        return self.counts.get(role_name, 0)


class YieldingRepository:
    """Wraps a repository so every call suspends first, like a networked backend."""

    def __init__(self, inner) -> None:
        self._inner = inner

    def __getattr__(self, name):
        attr = getattr(self._inner, name)
        if not inspect.iscoroutinefunction(attr):
            return attr

        async def call(*args, **kwargs):
            await asyncio.sleep(0)
            return await attr(*args, **kwargs)

        return call


def create_yielding_uow_factory(store: InMemoryStore):
    """UoW factory over ``store`` whose repositories interleave under asyncio.gather."""

    @asynccontextmanager
    async def factory():
        uow = InMemoryUnitOfWork(store)
        uow.permissions = YieldingRepository(uow.permissions)
        uow.roles = YieldingRepository(uow.roles)
        uow.overrides = YieldingRepository(uow.overrides)
        yield uow

    return factory


def put_permission(store: InMemoryStore, name: str, category: str | None = None) -> None:
    """Insert a catalog entry directly, bypassing validation."""
    now = datetime.now(UTC)
    store.permissions[name] = Permission(
        name=name,
        description=f"{name} permission",
        category=category or name.split(":")[0],
        created_at=now,
        updated_at=now,
    )


def put_override(
    store: InMemoryStore, user_id: str, granted: set[str], denied: set[str], version: int = 1
) -> None:
    """Insert raw override data, e.g. overlapping sets from a bad migration."""
    store.overrides[user_id] = Override(
        user_id=user_id,
        granted=frozenset(granted),
        denied=frozenset(denied),
        version=version,
    )


# --- Fixtures ---


@pytest.fixture
def store() -> InMemoryStore:
    """Fresh in-memory store for each test."""
    return InMemoryStore()


@pytest.fixture
def uow_factory(store):
    """Factory returning async context manager with an InMemoryUnitOfWork."""
    return create_memory_uow_factory(store)


@pytest.fixture
def epochs() -> EpochTracker:
    return EpochTracker()


@pytest.fixture
def scoped_epochs() -> EpochTracker:
    return EpochTracker(scoped=True)


@pytest.fixture
def catalog(uow_factory, epochs) -> PermissionCatalog:
    return PermissionCatalog(uow_factory, epochs)


@pytest.fixture
def role_assignments() -> FakeRoleAssignments:
    return FakeRoleAssignments()


@pytest.fixture
def role_store(uow_factory, epochs, role_assignments) -> RoleStore:
    return RoleStore(uow_factory, epochs, role_assignments)


@pytest.fixture
def override_store(uow_factory, epochs) -> OverrideStore:
    return OverrideStore(uow_factory, epochs)


@pytest.fixture
def resolver(uow_factory, epochs) -> PermissionResolver:
    return PermissionResolver(uow_factory, epochs)


@pytest.fixture
def cache(resolver, epochs) -> ResolutionCache:
    return ResolutionCache(resolver, epochs, max_entries=100)


@pytest.fixture
def settings() -> Settings:
    """Settings isolated from any local .env file."""
    return Settings(_env_file=None, persistence_backend="memory", epoch_scope="global")


@pytest.fixture
def facade(uow_factory, settings, role_assignments):
    """AuthorizationFacade over the in-memory store."""
    return build_facade(uow_factory, settings, role_assignments)


@pytest.fixture
def inspection_catalog(store) -> InMemoryStore:
    """Store pre-populated with a small catalog."""
    for name in (
        "inspection:read",
        "inspection:write",
        "inspection:approve",
        "supplier:read",
        "supplier:manage",
        "report:read",
    ):
        put_permission(store, name)
    return store


@pytest.fixture
def yielding_uow_factory(store):
    return create_yielding_uow_factory(store)


@pytest.fixture
def yielding_catalog(yielding_uow_factory, epochs) -> PermissionCatalog:
    return PermissionCatalog(yielding_uow_factory, epochs)


@pytest.fixture
def yielding_role_store(yielding_uow_factory, epochs) -> RoleStore:
    return RoleStore(yielding_uow_factory, epochs)


@pytest.fixture
def yielding_override_store(yielding_uow_factory, epochs) -> OverrideStore:
    return OverrideStore(yielding_uow_factory, epochs)
