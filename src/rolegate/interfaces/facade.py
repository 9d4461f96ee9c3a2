"""Administrative facade - the engine's external contract.

Transport layers (HTTP handlers, RPC, CLI) call this class and map the
domain exceptions to their own responses.
"""

from rolegate.application.dto.seed_dto import SeedReport
from rolegate.application.services import (
    CacheStats,
    OverrideStore,
    PermissionCatalog,
    ResolutionCache,
    RoleStore,
)
from rolegate.application.services.validation import (
    parse_enum,
    validate_role_names,
    validate_user_id,
)
from rolegate.application.use_cases.get_effective_permissions import (
    GetEffectivePermissionsUseCase,
)
from rolegate.application.use_cases.initialize_system import InitializeSystemUseCase
from rolegate.domain.entities import EffectivePermissionSet, Override, Permission, Role
from rolegate.domain.exceptions import InvalidArgument
from rolegate.domain.value_objects import OverrideKind, UpdateMode


class AuthorizationFacade:
    """Catalog, role and override administration plus effective-permission queries."""

    def __init__(
        self,
        catalog: PermissionCatalog,
        role_store: RoleStore,
        override_store: OverrideStore,
        cache: ResolutionCache,
        get_effective_permissions: GetEffectivePermissionsUseCase,
        initialize_system: InitializeSystemUseCase,
    ) -> None:
        self._catalog = catalog
        self._roles = role_store
        self._overrides = override_store
        self._cache = cache
        self._get_effective_permissions = get_effective_permissions
        self._initialize_system = initialize_system

    # --- Permissions ---

    async def create_permission(
        self, name: str, description: str, category: str | None = None
    ) -> Permission:
        return await self._catalog.register(name, description, category)

    async def list_permissions(self, categories: list[str] | None = None) -> list[Permission]:
        """All permissions, or the union of the given categories."""
        if categories is None:
            return await self._catalog.list_all()
        if isinstance(categories, str):
            raise InvalidArgument("categories must be a list")
        return await self._catalog.list_by_categories(list(categories))

    async def get_permission(self, name: str) -> Permission:
        return await self._catalog.get(name)

    async def update_permission(
        self,
        name: str,
        description: str | None = None,
        category: str | None = None,
        expected_version: int | None = None,
    ) -> Permission:
        return await self._catalog.update(name, description, category, expected_version)

    async def delete_permission(self, name: str) -> None:
        await self._catalog.unregister(name)

    # --- Roles ---

    async def create_role(
        self,
        name: str,
        description: str,
        permissions: list[str],
        priority: int = 0,
        parent: str | None = None,
    ) -> Role:
        return await self._roles.create_role(name, description, permissions, priority, parent=parent)

    async def update_role_permissions(
        self,
        name: str,
        permissions: list[str],
        mode: UpdateMode | str,
        expected_version: int | None = None,
    ) -> Role:
        mode = parse_enum(UpdateMode, mode, "mode")
        return await self._roles.update_permissions(name, permissions, mode, expected_version)

    async def update_role(
        self,
        name: str,
        description: str | None = None,
        priority: int | None = None,
        new_name: str | None = None,
        expected_version: int | None = None,
    ) -> Role:
        return await self._roles.update(name, description, priority, new_name, expected_version)

    async def set_role_active(
        self, name: str, active: bool, expected_version: int | None = None
    ) -> Role:
        return await self._roles.set_active(name, active, expected_version)

    async def set_role_parent(
        self, name: str, parent: str | None, expected_version: int | None = None
    ) -> Role:
        """Inherit permissions from ``parent``, or stop inheriting when None."""
        return await self._roles.set_parent(name, parent, expected_version)

    async def delete_role(self, name: str) -> None:
        await self._roles.delete(name)

    async def get_role(self, name: str) -> Role:
        return await self._roles.get(name)

    async def list_roles(self) -> list[Role]:
        return await self._roles.list()

    async def primary_role(self, role_names: list[str]) -> str | None:
        """Highest-priority active role among ``role_names``."""
        return await self._roles.primary_role(validate_role_names(role_names))

    # --- User overrides ---

    async def set_user_overrides(
        self,
        user_id: str,
        permissions: list[str],
        kind: OverrideKind | str,
        expected_version: int | None = None,
    ) -> Override:
        kind = parse_enum(OverrideKind, kind, "kind")
        if kind is OverrideKind.GRANTED:
            return await self._overrides.set_granted(user_id, permissions, expected_version)
        return await self._overrides.set_denied(user_id, permissions, expected_version)

    async def remove_user_overrides(
        self,
        user_id: str,
        permissions: list[str],
        kind: OverrideKind | str,
        expected_version: int | None = None,
    ) -> Override:
        kind = parse_enum(OverrideKind, kind, "kind")
        return await self._overrides.remove(user_id, permissions, kind, expected_version)

    async def clear_user_overrides(self, user_id: str, kind: OverrideKind | str | None = None) -> None:
        if kind is not None:
            kind = parse_enum(OverrideKind, kind, "kind")
        await self._overrides.clear(user_id, kind)

    async def get_user_overrides(self, user_id: str) -> Override:
        return await self._overrides.get(user_id)

    # --- Queries ---

    async def get_effective_permissions(
        self, user_id: str, role_names: list[str]
    ) -> list[Permission]:
        return await self._get_effective_permissions.execute(
            user_id, validate_role_names(role_names)
        )

    async def resolve(self, user_id: str, role_names: list[str]) -> EffectivePermissionSet:
        validate_user_id(user_id)
        return await self._cache.resolve(user_id, validate_role_names(role_names))

    async def has_permission(
        self, user_id: str, role_names: list[str], permission_name: str
    ) -> bool:
        validate_user_id(user_id)
        return await self._cache.has_permission(
            user_id, validate_role_names(role_names), permission_name
        )

    @property
    def cache_stats(self) -> CacheStats:
        return self._cache.stats

    # --- Bootstrap ---

    async def initialize_system(self) -> SeedReport:
        return await self._initialize_system.execute()
