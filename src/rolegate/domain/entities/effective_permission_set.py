"""Effective permission set - derived, never persisted."""

from collections.abc import Iterator
from dataclasses import dataclass, field

from rolegate.domain.value_objects import PermissionSource


@dataclass(frozen=True)
class EffectivePermissionSet:
    """Resolved permissions for a user and role list, stamped with the epoch it was computed under.

    ``sources`` maps each effective permission to the roles and grants that
    contributed it.
    """

    user_id: str
    role_names: tuple[str, ...]
    permissions: frozenset[str]
    epoch: int
    primary_role: str | None = None
    sources: dict[str, tuple[PermissionSource, ...]] = field(default_factory=dict)

    def __contains__(self, name: object) -> bool:
        return name in self.permissions

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self.permissions))

    def __len__(self) -> int:
        return len(self.permissions)

    def sources_of(self, name: str) -> tuple[PermissionSource, ...]:
        return self.sources.get(name, ())
