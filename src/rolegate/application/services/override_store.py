"""Override store - per-user granted and denied permission sets."""

import logging
from collections.abc import Iterable
from dataclasses import replace
from datetime import UTC, datetime

from rolegate.application.ports import UnitOfWork, UnitOfWorkFactory
from rolegate.application.services.epoch import EpochTracker
from rolegate.application.services.validation import (
    covers,
    parse_enum,
    validate_references,
    validate_user_id,
)
from rolegate.domain.entities import Override
from rolegate.domain.exceptions import StaleVersion
from rolegate.domain.value_objects import OverrideKind

logger = logging.getLogger(__name__)


def _without_covered(references: frozenset[str], denials: Iterable[str]) -> frozenset[str]:
    denials = tuple(denials)
    return frozenset(r for r in references if not any(covers(d, r) for d in denials))


class OverrideStore:
    """Keeps granted and denied disjoint on every write; a denial always wins."""

    def __init__(self, unit_of_work_factory: UnitOfWorkFactory, epochs: EpochTracker) -> None:
        self._uow_factory = unit_of_work_factory
        self._epochs = epochs

    async def _load(self, uow: UnitOfWork, user_id: str, expected_version: int | None) -> tuple[Override, int]:
        current = await uow.overrides.get(user_id) or Override.empty(user_id)
        version = current.version if expected_version is None else expected_version
        if version != current.version:
            raise StaleVersion(
                f"Overrides for user '{user_id}' are at version {current.version}, not {version}"
            )
        return current, version

    async def _write(
        self,
        uow: UnitOfWork,
        current: Override,
        version: int,
        granted: frozenset[str],
        denied: frozenset[str],
    ) -> Override | None:
        if granted == current.granted and denied == current.denied:
            return None
        return await uow.overrides.save(
            replace(current, granted=granted, denied=denied, updated_at=datetime.now(UTC)),
            version,
        )

    async def set_granted(
        self,
        user_id: str,
        permissions: Iterable[str],
        expected_version: int | None = None,
    ) -> Override:
        """Add grants. Entries covered by an existing denial stay denied."""
        validate_user_id(user_id)
        references = validate_references(permissions)

        async with self._uow_factory() as uow:
            validate_references(references, await uow.permissions.list_names())
            current, version = await self._load(uow, user_id, expected_version)
            accepted = _without_covered(references, current.denied)
            if accepted != references:
                logger.info(
                    "Ignoring grants for user %s already denied: %s",
                    user_id,
                    ", ".join(sorted(references - accepted)),
                )
            saved = await self._write(
                uow, current, version, current.granted | accepted, current.denied
            )

        if saved is None:
            return current
        self._epochs.advance_user(user_id)
        logger.info("Granted %d permissions to user %s", len(accepted), user_id)
        return saved

    async def set_denied(
        self,
        user_id: str,
        permissions: Iterable[str],
        expected_version: int | None = None,
    ) -> Override:
        """Add denials and drop every grant they cover, in one write."""
        validate_user_id(user_id)
        references = validate_references(permissions)

        async with self._uow_factory() as uow:
            validate_references(references, await uow.permissions.list_names())
            current, version = await self._load(uow, user_id, expected_version)
            saved = await self._write(
                uow,
                current,
                version,
                _without_covered(current.granted, references),
                current.denied | references,
            )

        if saved is None:
            return current
        self._epochs.advance_user(user_id)
        logger.info("Denied %d permissions for user %s", len(references), user_id)
        return saved

    async def remove(
        self,
        user_id: str,
        permissions: Iterable[str],
        kind: OverrideKind | str,
        expected_version: int | None = None,
    ) -> Override:
        """Drop specific entries from one override set."""
        validate_user_id(user_id)
        kind = parse_enum(OverrideKind, kind, "kind")
        references = validate_references(permissions)

        async with self._uow_factory() as uow:
            current, version = await self._load(uow, user_id, expected_version)
            granted, denied = current.granted, current.denied
            if kind is OverrideKind.GRANTED:
                granted = granted - references
            else:
                denied = denied - references
            saved = await self._write(uow, current, version, granted, denied)

        if saved is None:
            return current
        self._epochs.advance_user(user_id)
        logger.info("Removed %s overrides for user %s", kind.value, user_id)
        return saved

    async def clear(
        self,
        user_id: str,
        kind: OverrideKind | str | None = None,
        expected_version: int | None = None,
    ) -> Override:
        """Empty one override set, or both when ``kind`` is omitted."""
        validate_user_id(user_id)
        if kind is not None:
            kind = parse_enum(OverrideKind, kind, "kind")

        async with self._uow_factory() as uow:
            current, version = await self._load(uow, user_id, expected_version)
            granted = frozenset() if kind in (None, OverrideKind.GRANTED) else current.granted
            denied = frozenset() if kind in (None, OverrideKind.DENIED) else current.denied
            saved = await self._write(uow, current, version, granted, denied)

        if saved is None:
            return current
        self._epochs.advance_user(user_id)
        logger.info("Cleared %s overrides for user %s", kind.value if kind else "all", user_id)
        return saved

    async def get(self, user_id: str) -> Override:
        """Recorded overrides, or an empty override (version 0) if none."""
        validate_user_id(user_id)
        async with self._uow_factory() as uow:
            override = await uow.overrides.get(user_id)
        return override or Override.empty(user_id)
