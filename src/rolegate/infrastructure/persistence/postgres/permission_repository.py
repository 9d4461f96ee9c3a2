"""PostgreSQL permission repository implementation."""

from psycopg import AsyncConnection

from rolegate.domain.entities import Permission
from rolegate.domain.exceptions import Conflict, NotFound, StaleVersion

_COLUMNS = "name, description, category, version, created_at, updated_at"


def _row_to_permission(r: tuple) -> Permission:
    return Permission(
        name=r[0],
        description=r[1],
        category=r[2],
        version=r[3],
        created_at=r[4],
        updated_at=r[5],
    )


class PostgresPermissionRepository:
    """Permission repository implementation."""

    def __init__(self, conn: AsyncConnection) -> None:
        self._conn = conn

    async def get(self, name: str) -> Permission | None:
        """Get permission by name."""
        cur = await self._conn.execute(
            f"SELECT {_COLUMNS} FROM permission WHERE name = %s",
            (name,),
        )
        r = await cur.fetchone()
        return _row_to_permission(r) if r else None

    async def list_all(self) -> list[Permission]:
        """List all permissions by category, then name."""
        cur = await self._conn.execute(
            f"SELECT {_COLUMNS} FROM permission ORDER BY category, name"
        )
        return [_row_to_permission(r) for r in await cur.fetchall()]

    async def list_by_categories(self, categories: list[str]) -> list[Permission]:
        """List permissions in any of the given categories."""
        cur = await self._conn.execute(
            f"SELECT {_COLUMNS} FROM permission WHERE category = ANY(%s) ORDER BY category, name",
            (list(categories),),
        )
        return [_row_to_permission(r) for r in await cur.fetchall()]

    async def list_names(self) -> frozenset[str]:
        cur = await self._conn.execute("SELECT name FROM permission")
        return frozenset(r[0] for r in await cur.fetchall())

    async def create(self, permission: Permission) -> Permission:
        """Insert permission at version 1."""
        cur = await self._conn.execute(
            f"INSERT INTO permission ({_COLUMNS}) VALUES (%s, %s, %s, 1, %s, %s) "
            "ON CONFLICT (name) DO NOTHING "
            f"RETURNING {_COLUMNS}",
            (
                permission.name,
                permission.description,
                permission.category,
                permission.created_at,
                permission.updated_at,
            ),
        )
        r = await cur.fetchone()
        if not r:
            raise Conflict(f"Permission '{permission.name}' already exists")
        return _row_to_permission(r)

    async def save(self, permission: Permission, expected_version: int) -> Permission:
        """Update metadata if the stored version still equals expected_version."""
        cur = await self._conn.execute(
            "UPDATE permission SET description = %s, category = %s, updated_at = %s, "
            "version = version + 1 "
            "WHERE name = %s AND version = %s "
            f"RETURNING {_COLUMNS}",
            (
                permission.description,
                permission.category,
                permission.updated_at,
                permission.name,
                expected_version,
            ),
        )
        r = await cur.fetchone()
        if r:
            return _row_to_permission(r)
        if await self.get(permission.name) is None:
            raise NotFound(f"Permission '{permission.name}' not found")
        raise StaleVersion(
            f"Permission '{permission.name}' changed since version {expected_version}"
        )

    async def delete(self, name: str) -> None:
        """Delete unless an active role lists the name.

        The row is locked FOR UPDATE first; role writes lock the names they
        reference FOR SHARE, so the two cannot interleave.
        """
        cur = await self._conn.execute(
            "SELECT name FROM permission WHERE name = %s FOR UPDATE",
            (name,),
        )
        if not await cur.fetchone():
            raise NotFound(f"Permission '{name}' not found")
        cur = await self._conn.execute(
            "SELECT name FROM role WHERE %s = ANY(permissions) AND is_active ORDER BY name",
            (name,),
        )
        referencing = [r[0] for r in await cur.fetchall()]
        if referencing:
            raise Conflict(
                f"Permission '{name}' is referenced by active roles: {', '.join(referencing)}"
            )
        await self._conn.execute("DELETE FROM permission WHERE name = %s", (name,))
