"""Permission catalog - registry of valid permission identifiers."""

import logging
from dataclasses import replace
from datetime import UTC, datetime

from rolegate.application.ports import UnitOfWorkFactory
from rolegate.application.services.epoch import EpochTracker
from rolegate.application.services.validation import validate_category
from rolegate.domain.entities import Permission
from rolegate.domain.exceptions import InvalidArgument, NotFound, StaleVersion
from rolegate.domain.value_objects import PermissionName

logger = logging.getLogger(__name__)


class PermissionCatalog:
    """Registers, lists and retires permissions."""

    def __init__(self, unit_of_work_factory: UnitOfWorkFactory, epochs: EpochTracker) -> None:
        self._uow_factory = unit_of_work_factory
        self._epochs = epochs

    async def register(
        self,
        name: str,
        description: str,
        category: str | None = None,
    ) -> Permission:
        """Add a permission. Category defaults to the first name segment."""
        try:
            parsed = PermissionName(name)
        except ValueError as e:
            raise InvalidArgument(str(e)) from None
        if not isinstance(description, str) or not description.strip():
            raise InvalidArgument("Permission description is required")
        category = validate_category(category if category is not None else parsed.category)

        now = datetime.now(UTC)
        permission = Permission(
            name=parsed.value,
            description=description.strip(),
            category=category,
            created_at=now,
            updated_at=now,
        )
        async with self._uow_factory() as uow:
            created = await uow.permissions.create(permission)

        self._epochs.advance()
        logger.info("Registered permission %s (category=%s)", created.name, created.category)
        return created

    async def get(self, name: str) -> Permission:
        async with self._uow_factory() as uow:
            permission = await uow.permissions.get(name)
        if not permission:
            raise NotFound(f"Permission '{name}' not found")
        return permission

    async def list_all(self) -> list[Permission]:
        async with self._uow_factory() as uow:
            return await uow.permissions.list_all()

    async def list_by_category(self, category: str) -> list[Permission]:
        return await self.list_by_categories([category])

    async def list_by_categories(self, categories: list[str]) -> list[Permission]:
        """Union of the given categories, each permission once."""
        wanted = sorted(set(categories))
        if not wanted:
            return []
        async with self._uow_factory() as uow:
            return await uow.permissions.list_by_categories(wanted)

    async def names(self) -> frozenset[str]:
        async with self._uow_factory() as uow:
            return await uow.permissions.list_names()

    async def update(
        self,
        name: str,
        description: str | None = None,
        category: str | None = None,
        expected_version: int | None = None,
    ) -> Permission:
        """Change description or category. Names are immutable."""
        if description is not None and (not isinstance(description, str) or not description.strip()):
            raise InvalidArgument("Permission description must not be empty")
        if category is not None:
            validate_category(category)

        async with self._uow_factory() as uow:
            current = await uow.permissions.get(name)
            if not current:
                raise NotFound(f"Permission '{name}' not found")
            version = current.version if expected_version is None else expected_version
            if version != current.version:
                raise StaleVersion(
                    f"Permission '{name}' is at version {current.version}, not {version}"
                )
            updated = replace(
                current,
                description=description.strip() if description is not None else current.description,
                category=category if category is not None else current.category,
                updated_at=datetime.now(UTC),
            )
            saved = await uow.permissions.save(updated, version)

        self._epochs.advance()
        logger.info("Updated permission %s (version=%d)", name, saved.version)
        return saved

    async def unregister(self, name: str) -> None:
        """Remove a permission unless an active role references it by name."""
        async with self._uow_factory() as uow:
            await uow.permissions.delete(name)

        self._epochs.advance()
        logger.info("Unregistered permission %s", name)
