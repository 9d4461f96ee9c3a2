"""Get effective permissions use case."""

import logging

from rolegate.application.ports import UnitOfWorkFactory
from rolegate.application.services import EpochTracker, ResolutionCache
from rolegate.application.services.validation import validate_user_id
from rolegate.domain.entities import Permission

logger = logging.getLogger(__name__)


class GetEffectivePermissionsUseCase:
    """Resolve a user's permissions and return the catalogued entries.

    The name-to-Permission map is reloaded only when the catalog epoch moves.
    """

    def __init__(
        self,
        unit_of_work_factory: UnitOfWorkFactory,
        cache: ResolutionCache,
        epochs: EpochTracker,
    ) -> None:
        self._uow_factory = unit_of_work_factory
        self._cache = cache
        self._epochs = epochs
        self._catalog: tuple[int, dict[str, Permission]] | None = None

    async def _catalog_by_name(self) -> dict[str, Permission]:
        epoch = self._epochs.catalog_epoch
        if self._catalog is not None and self._catalog[0] == epoch:
            return self._catalog[1]

        async with self._uow_factory() as uow:
            by_name = {p.name: p for p in await uow.permissions.list_all()}
        self._catalog = (epoch, by_name)
        return by_name

    async def execute(self, user_id: str, role_names: list[str]) -> list[Permission]:
        """Effective permissions sorted by name."""
        validate_user_id(user_id)
        effective = await self._cache.resolve(user_id, role_names)
        if not effective.permissions:
            return []

        catalog = await self._catalog_by_name()
        result = []
        for name in sorted(effective.permissions):
            permission = catalog.get(name)
            # Unregistered between resolution and lookup; the next resolve drops it.
            if permission is None:
                logger.debug("Permission %s vanished from catalog during lookup", name)
                continue
            result.append(permission)
        return result
