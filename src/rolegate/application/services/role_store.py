"""Role store - named, priority-ordered permission collections."""

import logging
from collections.abc import Iterable
from dataclasses import replace
from datetime import UTC, datetime

from rolegate.application.ports import RoleAssignmentLookup, UnitOfWork, UnitOfWorkFactory
from rolegate.application.services.epoch import EpochTracker
from rolegate.application.services.validation import (
    parse_enum,
    validate_references,
    validate_role_name,
)
from rolegate.domain.entities import Role, role_order_key
from rolegate.domain.exceptions import Conflict, InvalidArgument, NotFound, StaleVersion
from rolegate.domain.value_objects import UpdateMode

logger = logging.getLogger(__name__)


def primary_role(roles: Iterable[Role]) -> str | None:
    """Highest-priority active role, ties broken by name."""
    active = sorted((r for r in roles if r.is_active), key=role_order_key)
    return active[0].name if active else None


class RoleStore:
    """Creates, edits and retires roles with optimistic concurrency."""

    def __init__(
        self,
        unit_of_work_factory: UnitOfWorkFactory,
        epochs: EpochTracker,
        role_assignments: RoleAssignmentLookup | None = None,
    ) -> None:
        self._uow_factory = unit_of_work_factory
        self._epochs = epochs
        self._role_assignments = role_assignments

    async def _load(self, uow: UnitOfWork, name: str, expected_version: int | None) -> tuple[Role, int]:
        role = await uow.roles.get(name)
        if not role:
            raise NotFound(f"Role '{name}' not found")
        version = role.version if expected_version is None else expected_version
        if version != role.version:
            raise StaleVersion(f"Role '{name}' is at version {role.version}, not {version}")
        return role, version

    async def _check_parent(self, uow: UnitOfWork, name: str, parent: str) -> None:
        """Parent must exist and must not already inherit from ``name``."""
        seen: set[str] = set()
        current: str | None = parent
        while current is not None and current not in seen:
            if current == name:
                raise InvalidArgument(f"Parent '{parent}' would make role '{name}' inherit from itself")
            seen.add(current)
            role = await uow.roles.get(current)
            if role is None:
                if current == parent:
                    raise NotFound(f"Parent role '{parent}' not found")
                break
            current = role.parent

    def _advance(self, name: str, has_children: bool) -> None:
        # Cached sets of descendant roles are keyed by their own names.
        if has_children:
            self._epochs.advance()
        else:
            self._epochs.advance_role(name)

    async def create_role(
        self,
        name: str,
        description: str,
        permissions: Iterable[str] = (),
        priority: int = 0,
        is_system: bool = False,
        parent: str | None = None,
    ) -> Role:
        """Create a role. Every exact permission must be catalogued."""
        validate_role_name(name)
        if not isinstance(priority, int) or isinstance(priority, bool):
            raise InvalidArgument(f"Invalid priority {priority!r}")
        if parent is not None:
            validate_role_name(parent)
        references = validate_references(permissions)

        now = datetime.now(UTC)
        async with self._uow_factory() as uow:
            validate_references(references, await uow.permissions.list_names())
            if parent is not None:
                await self._check_parent(uow, name, parent)
            created = await uow.roles.create(
                Role(
                    name=name,
                    description=description or "",
                    permissions=references,
                    priority=priority,
                    is_system=is_system,
                    is_active=True,
                    version=1,
                    created_at=now,
                    updated_at=now,
                    parent=parent,
                )
            )

        self._epochs.advance_role(name)
        logger.info(
            "Created role %s (priority=%d, permissions=%d)", name, priority, len(references)
        )
        return created

    async def update_permissions(
        self,
        name: str,
        permissions: Iterable[str],
        mode: UpdateMode | str = UpdateMode.REPLACE,
        expected_version: int | None = None,
    ) -> Role:
        """Replace, extend or shrink a role's permission set."""
        mode = parse_enum(UpdateMode, mode, "mode")
        references = validate_references(permissions)

        async with self._uow_factory() as uow:
            role, version = await self._load(uow, name, expected_version)
            if mode is UpdateMode.REMOVE:
                new_permissions = role.permissions - references
            else:
                validate_references(references, await uow.permissions.list_names())
                if mode is UpdateMode.ADD:
                    new_permissions = role.permissions | references
                else:
                    new_permissions = references
            saved = await uow.roles.save(
                replace(role, permissions=new_permissions, updated_at=datetime.now(UTC)),
                version,
            )
            has_children = bool(await uow.roles.list_children(name))

        self._advance(name, has_children)
        logger.info(
            "Updated role %s permissions (mode=%s, version=%d)", name, mode.value, saved.version
        )
        return saved

    async def set_active(self, name: str, active: bool, expected_version: int | None = None) -> Role:
        """Activate or deactivate a role.

        Activation fails with Conflict while the role lists permissions that
        were unregistered during its inactivity.
        """
        async with self._uow_factory() as uow:
            role, version = await self._load(uow, name, expected_version)
            if role.is_active == active:
                return role
            if active:
                missing = role.uncatalogued(await uow.permissions.list_names())
                if missing:
                    raise Conflict(
                        f"Role '{name}' references uncatalogued permissions: {', '.join(missing)}"
                    )
            saved = await uow.roles.save(
                replace(role, is_active=active, updated_at=datetime.now(UTC)), version
            )
            has_children = bool(await uow.roles.list_children(name))

        self._advance(name, has_children)
        logger.info("Role %s %s", name, "activated" if active else "deactivated")
        return saved

    async def set_parent(
        self, name: str, parent: str | None, expected_version: int | None = None
    ) -> Role:
        """Set or clear the role this one inherits permissions from."""
        if parent is not None:
            validate_role_name(parent)

        async with self._uow_factory() as uow:
            role, version = await self._load(uow, name, expected_version)
            if role.parent == parent:
                return role
            if parent is not None:
                await self._check_parent(uow, name, parent)
            saved = await uow.roles.save(
                replace(role, parent=parent, updated_at=datetime.now(UTC)), version
            )
            has_children = bool(await uow.roles.list_children(name))

        self._advance(name, has_children)
        logger.info("Role %s now inherits from %s", name, parent or "nothing")
        return saved

    async def update(
        self,
        name: str,
        description: str | None = None,
        priority: int | None = None,
        new_name: str | None = None,
        expected_version: int | None = None,
    ) -> Role:
        """Edit role metadata; system roles and roles with children cannot be renamed."""
        if priority is not None and (not isinstance(priority, int) or isinstance(priority, bool)):
            raise InvalidArgument(f"Invalid priority {priority!r}")
        renaming = new_name is not None and new_name != name
        if renaming:
            validate_role_name(new_name)

        async with self._uow_factory() as uow:
            role, version = await self._load(uow, name, expected_version)
            changed = replace(
                role,
                description=description if description is not None else role.description,
                priority=priority if priority is not None else role.priority,
                updated_at=datetime.now(UTC),
            )
            has_children = bool(await uow.roles.list_children(name))
            if renaming:
                if role.is_system:
                    raise Conflict(f"System role '{name}' cannot be renamed")
                if has_children:
                    raise Conflict(f"Role '{name}' has child roles and cannot be renamed")
                if await uow.roles.get(new_name):
                    raise Conflict(f"Role '{new_name}' already exists")
                saved = await uow.roles.rename(name, replace(changed, name=new_name), version)
            else:
                saved = await uow.roles.save(changed, version)

        self._advance(name, has_children)
        if renaming:
            self._epochs.advance_role(new_name)
            logger.info("Renamed role %s to %s", name, new_name)
        else:
            logger.info("Updated role %s (version=%d)", name, saved.version)
        return saved

    async def delete(self, name: str) -> None:
        """Delete a non-system role that no user is assigned and no role inherits from."""
        async with self._uow_factory() as uow:
            role = await uow.roles.get(name)
            if not role:
                raise NotFound(f"Role '{name}' not found")
            if role.is_system:
                raise Conflict(f"System role '{name}' cannot be deleted")
            children = await uow.roles.list_children(name)
            if children:
                raise Conflict(
                    f"Role '{name}' is inherited by: {', '.join(r.name for r in children)}"
                )
            if self._role_assignments is not None:
                assigned = await self._role_assignments.count_users_with_role(name)
                if assigned > 0:
                    raise Conflict(f"Role '{name}' is assigned to {assigned} users")
            await uow.roles.delete(name, role.version)

        self._epochs.advance_role(name)
        logger.info("Deleted role %s", name)

    async def get(self, name: str) -> Role:
        async with self._uow_factory() as uow:
            role = await uow.roles.get(name)
        if not role:
            raise NotFound(f"Role '{name}' not found")
        return role

    async def list(self) -> list[Role]:
        """All roles, priority descending then name."""
        async with self._uow_factory() as uow:
            roles = await uow.roles.list_all()
        return sorted(roles, key=role_order_key)

    async def primary_role(self, role_names: Iterable[str]) -> str | None:
        async with self._uow_factory() as uow:
            roles = await uow.roles.get_many(sorted(set(role_names)))
        return primary_role(roles)
