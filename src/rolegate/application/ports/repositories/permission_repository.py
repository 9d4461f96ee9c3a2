"""Permission repository port."""

from typing import Protocol

from rolegate.domain.entities import Permission


class PermissionRepository(Protocol):
    """Port for permission catalog persistence."""

    async def get(self, name: str) -> Permission | None: ...

    async def list_all(self) -> list[Permission]: ...

    async def list_by_categories(self, categories: list[str]) -> list[Permission]: ...

    async def list_names(self) -> frozenset[str]: ...

    async def create(self, permission: Permission) -> Permission:
        """Insert a new permission. Raises Conflict if the name exists."""
        ...

    async def save(self, permission: Permission, expected_version: int) -> Permission:
        """Compare-and-swap update. Raises StaleVersion or NotFound."""
        ...

    async def delete(self, name: str) -> None:
        """Remove a permission. Raises NotFound, or Conflict while an active role lists it.

        The check and the delete are one atomic step with respect to role writes.
        """
        ...
