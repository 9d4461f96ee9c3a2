"""Domain entities."""

from rolegate.domain.entities.effective_permission_set import EffectivePermissionSet
from rolegate.domain.entities.override import Override
from rolegate.domain.entities.permission import Permission
from rolegate.domain.entities.role import Role, role_order_key

__all__ = [
    "EffectivePermissionSet",
    "Override",
    "Permission",
    "Role",
    "role_order_key",
]
