"""Role repository port."""

from typing import Protocol

from rolegate.domain.entities import Role


class RoleRepository(Protocol):
    """Port for role persistence.

    Writes of an active role fail with Conflict if any exact permission it
    lists is not catalogued at the moment of the write, and with NotFound if
    its parent role does not exist.
    """

    async def get(self, name: str) -> Role | None: ...

    async def get_many(self, names: list[str]) -> list[Role]:
        """Roles for the given names; unknown names are skipped."""
        ...

    async def list_all(self) -> list[Role]: ...

    async def list_referencing(self, permission_name: str, active_only: bool = True) -> list[Role]: ...

    async def list_children(self, name: str) -> list[Role]:
        """Roles whose parent is ``name``."""
        ...

    async def create(self, role: Role) -> Role:
        """Insert a new role. Raises Conflict if the name exists."""
        ...

    async def save(self, role: Role, expected_version: int) -> Role:
        """Compare-and-swap update keyed by role name. Raises StaleVersion or NotFound."""
        ...

    async def rename(self, old_name: str, role: Role, expected_version: int) -> Role:
        """Compare-and-swap update that moves the role to ``role.name``.

        Raises Conflict if other roles inherit from ``old_name``.
        """
        ...

    async def delete(self, name: str, expected_version: int) -> None:
        """Raises Conflict if other roles inherit from ``name``."""
        ...
