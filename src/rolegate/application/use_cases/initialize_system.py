"""Initialize system use case - seed default catalog and system roles."""

import logging

from rolegate.application.defaults import DEFAULT_PERMISSIONS, SYSTEM_ROLES
from rolegate.application.dto.seed_dto import PermissionSeed, RoleSeed, SeedReport
from rolegate.application.services import PermissionCatalog, RoleStore

logger = logging.getLogger(__name__)


class InitializeSystemUseCase:
    """Create missing default permissions and system roles. Existing entries are left as they are."""

    def __init__(
        self,
        catalog: PermissionCatalog,
        role_store: RoleStore,
        permissions: list[PermissionSeed] | None = None,
        roles: list[RoleSeed] | None = None,
    ) -> None:
        self._catalog = catalog
        self._role_store = role_store
        self._permissions = DEFAULT_PERMISSIONS if permissions is None else permissions
        self._roles = SYSTEM_ROLES if roles is None else roles

    async def execute(self) -> SeedReport:
        report = SeedReport()

        existing = await self._catalog.names()
        for seed in self._permissions:
            if seed.name in existing:
                continue
            await self._catalog.register(seed.name, seed.description)
            report.permissions_created.append(seed.name)

        existing_roles = {r.name for r in await self._role_store.list()}
        for seed in self._roles:
            if seed.name in existing_roles:
                continue
            await self._role_store.create_role(
                seed.name,
                seed.description,
                seed.permissions,
                priority=seed.priority,
                is_system=True,
            )
            report.roles_created.append(seed.name)

        logger.info(
            "System initialized: %d permissions, %d roles created",
            len(report.permissions_created),
            len(report.roles_created),
        )
        return report
