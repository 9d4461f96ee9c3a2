"""Engine components."""

from rolegate.application.services.catalog import PermissionCatalog
from rolegate.application.services.epoch import EpochTracker
from rolegate.application.services.override_store import OverrideStore
from rolegate.application.services.resolution_cache import CacheStats, ResolutionCache
from rolegate.application.services.resolver import PermissionResolver
from rolegate.application.services.role_store import RoleStore

__all__ = [
    "CacheStats",
    "EpochTracker",
    "OverrideStore",
    "PermissionCatalog",
    "PermissionResolver",
    "ResolutionCache",
    "RoleStore",
]
