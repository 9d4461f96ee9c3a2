"""Repository ports."""

from rolegate.application.ports.repositories.override_repository import (
    OverrideRepository,
)
from rolegate.application.ports.repositories.permission_repository import (
    PermissionRepository,
)
from rolegate.application.ports.repositories.role_repository import RoleRepository

__all__ = [
    "OverrideRepository",
    "PermissionRepository",
    "RoleRepository",
]
