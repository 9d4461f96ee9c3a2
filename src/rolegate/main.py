"""Application entry point and composition root."""

import argparse
import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from rolegate import __version__
from rolegate.application.ports import RoleAssignmentLookup, UnitOfWorkFactory
from rolegate.application.services import (
    EpochTracker,
    OverrideStore,
    PermissionCatalog,
    PermissionResolver,
    ResolutionCache,
    RoleStore,
)
from rolegate.application.use_cases.get_effective_permissions import (
    GetEffectivePermissionsUseCase,
)
from rolegate.application.use_cases.initialize_system import InitializeSystemUseCase
from rolegate.config import Settings, get_settings
from rolegate.infrastructure.persistence.memory.unit_of_work import create_memory_uow_factory
from rolegate.infrastructure.persistence.postgres.connection import create_pool
from rolegate.infrastructure.persistence.postgres.unit_of_work import create_uow_factory
from rolegate.interfaces.facade import AuthorizationFacade

logger = logging.getLogger(__name__)


def configure_logging(level: str, debug: bool = False) -> None:
    """Logging setup for processes that run the engine standalone. ``debug`` forces DEBUG."""
    logging.basicConfig(format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    logging.getLogger("rolegate").setLevel(logging.DEBUG if debug else level.upper())


def build_facade(
    uow_factory: UnitOfWorkFactory,
    settings: Settings | None = None,
    role_assignments: RoleAssignmentLookup | None = None,
) -> AuthorizationFacade:
    """Composition root - wire stores, resolver and cache over one UoW factory."""
    settings = settings or get_settings()
    epochs = EpochTracker(scoped=settings.epoch_scope == "scoped")

    catalog = PermissionCatalog(uow_factory, epochs)
    role_store = RoleStore(uow_factory, epochs, role_assignments)
    override_store = OverrideStore(uow_factory, epochs)
    resolver = PermissionResolver(uow_factory, epochs)
    cache = ResolutionCache(resolver, epochs, max_entries=settings.cache_max_entries)

    return AuthorizationFacade(
        catalog=catalog,
        role_store=role_store,
        override_store=override_store,
        cache=cache,
        get_effective_permissions=GetEffectivePermissionsUseCase(uow_factory, cache, epochs),
        initialize_system=InitializeSystemUseCase(catalog, role_store),
    )


@asynccontextmanager
async def open_engine(
    settings: Settings | None = None,
    role_assignments: RoleAssignmentLookup | None = None,
) -> AsyncIterator[AuthorizationFacade]:
    """Build the facade for the configured backend; owns the pool lifetime."""
    settings = settings or get_settings()
    pool = None
    if settings.persistence_backend == "postgres":
        pool = create_pool(
            settings.database_url,
            min_size=settings.pool_min_size,
            max_size=settings.pool_max_size,
        )
        await pool.open()
        uow_factory = create_uow_factory(pool)
    else:
        uow_factory = create_memory_uow_factory()

    try:
        facade = build_facade(uow_factory, settings, role_assignments)
        if settings.seed_defaults:
            await facade.initialize_system()
        logger.info(
            "rolegate %s ready (backend=%s, epoch_scope=%s)",
            __version__,
            settings.persistence_backend,
            settings.epoch_scope,
        )
        yield facade
    finally:
        if pool is not None:
            await pool.close()


async def _initialize(settings: Settings) -> None:
    async with open_engine(settings) as facade:
        report = await facade.initialize_system()
    print(
        f"Created {len(report.permissions_created)} permissions, "
        f"{len(report.roles_created)} roles"
    )


def main() -> None:
    """CLI entry point."""
    parser = argparse.ArgumentParser(description="rolegate permission engine")
    parser.add_argument(
        "--init",
        action="store_true",
        help="Seed default permissions and system roles into the configured backend",
    )
    args = parser.parse_args()

    settings = get_settings()
    configure_logging(settings.log_level, settings.debug)
    print(f"rolegate v{__version__}")
    if args.init:
        asyncio.run(_initialize(settings))
