"""Permission resolver - composes roles and overrides into an effective set.

    Effective(u) = (union of active role permissions | granted) - denied

An active role also contributes the permissions of its active ancestors;
inheritance stops at the first inactive or missing ancestor. Patterns are
expanded against the catalog snapshot read in the same unit of work;
references to permissions that are no longer catalogued contribute nothing.
"""

import logging
from collections.abc import Iterable

from rolegate.application.ports import UnitOfWork, UnitOfWorkFactory
from rolegate.application.services.epoch import EpochTracker
from rolegate.application.services.role_store import primary_role
from rolegate.domain.entities import EffectivePermissionSet, Override, Role, role_order_key
from rolegate.domain.value_objects import (
    WILDCARD,
    PermissionPattern,
    PermissionSource,
    SourceKind,
    is_pattern,
)

logger = logging.getLogger(__name__)


def normalize_role_names(role_names: Iterable[str]) -> tuple[str, ...]:
    """Sorted, de-duplicated role names; the cache key form."""
    if isinstance(role_names, str):
        return (role_names,)
    return tuple(sorted(set(role_names)))


def expand(references: Iterable[str], catalog: frozenset[str]) -> frozenset[str]:
    """Catalogued names covered by ``references``."""
    names: set[str] = set()
    for ref in references:
        if ref == WILDCARD:
            return catalog
        if is_pattern(ref):
            names |= PermissionPattern(ref).expand(catalog)
        elif ref in catalog:
            names.add(ref)
    return frozenset(names)


def lineage(role: Role, known: dict[str, Role]) -> list[Role]:
    """``role`` followed by the active ancestors it inherits from."""
    chain: list[Role] = []
    seen: set[str] = set()
    current: Role | None = role
    while current is not None and current.is_active and current.name not in seen:
        chain.append(current)
        seen.add(current.name)
        current = known.get(current.parent) if current.parent else None
    return chain


def combine(roles: Iterable[Role], override: Override, catalog: frozenset[str]) -> frozenset[str]:
    """Apply the resolution formula to a snapshot."""
    granted: set[str] = set()
    for role in roles:
        if role.is_active:
            granted |= role.permissions
    granted |= override.granted

    overlap = override.overlap
    if overlap:
        logger.warning(
            "User %s has permissions both granted and denied, treating as denied: %s",
            override.user_id,
            ", ".join(sorted(overlap)),
        )
    return expand(granted, catalog) - expand(override.denied, catalog)


def attribute(
    assigned: Iterable[Role],
    known: dict[str, Role],
    override: Override,
    catalog: frozenset[str],
    permissions: frozenset[str],
) -> dict[str, tuple[PermissionSource, ...]]:
    """Map each effective permission to the roles and grants that contribute it."""
    sources: dict[str, list[PermissionSource]] = {}
    for role in assigned:
        for contributor in lineage(role, known):
            source = PermissionSource(
                kind=SourceKind.ROLE,
                role=role.name,
                inherited_from=None if contributor is role else contributor.name,
            )
            for name in expand(contributor.permissions, catalog) & permissions:
                sources.setdefault(name, []).append(source)
    for name in expand(override.granted, catalog) & permissions:
        sources.setdefault(name, []).append(PermissionSource(kind=SourceKind.GRANTED))
    return {name: tuple(found) for name, found in sorted(sources.items())}


async def load_roles(uow: UnitOfWork, names: Iterable[str]) -> dict[str, Role]:
    """Named roles plus every ancestor reachable through parent links."""
    known = {r.name: r for r in await uow.roles.get_many(list(names))}
    pending = {r.parent for r in known.values() if r.parent} - known.keys()
    while pending:
        fetched = await uow.roles.get_many(sorted(pending))
        known.update((r.name, r) for r in fetched)
        pending = {r.parent for r in fetched if r.parent} - known.keys()
    return known


class PermissionResolver:
    """Computes effective permission sets. Holds no state of its own."""

    def __init__(self, unit_of_work_factory: UnitOfWorkFactory, epochs: EpochTracker) -> None:
        self._uow_factory = unit_of_work_factory
        self._epochs = epochs

    async def resolve(self, user_id: str, role_names: Iterable[str]) -> EffectivePermissionSet:
        """Resolve permissions, stamped with the epoch observed before reading."""
        names = normalize_role_names(role_names)
        epoch = self._epochs.stamp(user_id, names)

        async with self._uow_factory() as uow:
            known = await load_roles(uow, names) if names else {}
            override = await uow.overrides.get(user_id) or Override.empty(user_id)
            catalog = await uow.permissions.list_names()

        assigned = sorted((known[n] for n in names if n in known), key=role_order_key)
        missing = [n for n in names if n not in known]
        if missing:
            logger.debug(
                "Roles not found for user %s, contributing nothing: %s",
                user_id,
                ", ".join(missing),
            )

        contributing = [r for role in assigned for r in lineage(role, known)]
        permissions = combine(contributing, override, catalog)
        return EffectivePermissionSet(
            user_id=user_id,
            role_names=names,
            permissions=permissions,
            epoch=epoch,
            primary_role=primary_role(assigned),
            sources=attribute(assigned, known, override, catalog, permissions),
        )

    async def has_permission(
        self, user_id: str, role_names: Iterable[str], permission_name: str
    ) -> bool:
        result = await self.resolve(user_id, role_names)
        return permission_name in result.permissions
