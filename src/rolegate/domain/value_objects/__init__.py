"""Domain value objects."""

from rolegate.domain.value_objects.override_kind import OverrideKind
from rolegate.domain.value_objects.permission_name import (
    WILDCARD,
    PermissionName,
    PermissionPattern,
    is_pattern,
)
from rolegate.domain.value_objects.permission_source import PermissionSource, SourceKind
from rolegate.domain.value_objects.update_mode import UpdateMode

__all__ = [
    "OverrideKind",
    "PermissionName",
    "PermissionPattern",
    "PermissionSource",
    "SourceKind",
    "UpdateMode",
    "WILDCARD",
    "is_pattern",
]
