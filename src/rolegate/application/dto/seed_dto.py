"""Seed DTOs for system initialization."""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class PermissionSeed:
    """Default catalog entry."""

    name: str
    description: str


@dataclass(frozen=True)
class RoleSeed:
    """Default system role."""

    name: str
    description: str
    priority: int
    permissions: tuple[str, ...]


@dataclass
class SeedReport:
    """What an initialization run created."""

    permissions_created: list[str] = field(default_factory=list)
    roles_created: list[str] = field(default_factory=list)
