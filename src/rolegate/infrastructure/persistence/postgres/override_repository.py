"""PostgreSQL override repository implementation."""

from psycopg import AsyncConnection

from rolegate.domain.entities import Override
from rolegate.domain.exceptions import StaleVersion

_COLUMNS = "user_id, granted, denied, version, updated_at"


def _row_to_override(r: tuple) -> Override:
    return Override(
        user_id=r[0],
        granted=frozenset(r[1] or ()),
        denied=frozenset(r[2] or ()),
        version=r[3],
        updated_at=r[4],
    )


class PostgresOverrideRepository:
    """Override repository implementation."""

    def __init__(self, conn: AsyncConnection) -> None:
        self._conn = conn

    async def get(self, user_id: str) -> Override | None:
        """Get overrides for user."""
        cur = await self._conn.execute(
            f"SELECT {_COLUMNS} FROM user_override WHERE user_id = %s",
            (user_id,),
        )
        r = await cur.fetchone()
        return _row_to_override(r) if r else None

    async def save(self, override: Override, expected_version: int) -> Override:
        """Insert at version 1 when expected_version is 0, otherwise compare-and-swap."""
        params = (sorted(override.granted), sorted(override.denied), override.updated_at)
        if expected_version == 0:
            cur = await self._conn.execute(
                f"INSERT INTO user_override ({_COLUMNS}) VALUES (%s, %s, %s, 1, %s) "
                "ON CONFLICT (user_id) DO NOTHING "
                f"RETURNING {_COLUMNS}",
                (override.user_id, *params),
            )
        else:
            cur = await self._conn.execute(
                "UPDATE user_override SET granted = %s, denied = %s, updated_at = %s, "
                "version = version + 1 "
                "WHERE user_id = %s AND version = %s "
                f"RETURNING {_COLUMNS}",
                (*params, override.user_id, expected_version),
            )
        r = await cur.fetchone()
        if not r:
            raise StaleVersion(
                f"Overrides for user '{override.user_id}' changed since version {expected_version}"
            )
        return _row_to_override(r)
