"""Role entity for RBAC."""

from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime

from rolegate.domain.value_objects import is_pattern


@dataclass
class Role:
    """Role - named set of permission references with priority and active flag.

    ``parent`` names a role whose permissions this role inherits while both are
    active.
    """

    name: str
    description: str
    permissions: frozenset[str] = field(default_factory=frozenset)
    priority: int = 0
    is_system: bool = False
    is_active: bool = True
    version: int = 1
    created_at: datetime | None = None
    updated_at: datetime | None = None
    parent: str | None = None

    def explicit_permissions(self) -> frozenset[str]:
        """Exact permission names, wildcard patterns excluded."""
        return frozenset(p for p in self.permissions if not is_pattern(p))

    def uncatalogued(self, catalog: Iterable[str]) -> list[str]:
        """Exact names missing from ``catalog``, sorted."""
        return sorted(self.explicit_permissions().difference(catalog))


def role_order_key(role: Role) -> tuple[int, str]:
    """Sort key: priority descending, then name."""
    return (-role.priority, role.name)
