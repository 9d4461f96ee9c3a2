"""Override repository port."""

from typing import Protocol

from rolegate.domain.entities import Override


class OverrideRepository(Protocol):
    """Port for per-user override persistence."""

    async def get(self, user_id: str) -> Override | None: ...

    async def save(self, override: Override, expected_version: int) -> Override:
        """Compare-and-swap write. ``expected_version`` 0 inserts; raises StaleVersion."""
        ...
