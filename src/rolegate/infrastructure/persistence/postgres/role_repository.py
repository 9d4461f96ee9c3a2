"""PostgreSQL role repository implementation."""

from psycopg import AsyncConnection
from psycopg.errors import ForeignKeyViolation, UniqueViolation

from rolegate.domain.entities import Role
from rolegate.domain.exceptions import Conflict, NotFound, StaleVersion

_COLUMNS = (
    "name, description, permissions, priority, is_system, is_active, "
    "version, created_at, updated_at, parent"
)


def _row_to_role(r: tuple) -> Role:
    return Role(
        name=r[0],
        description=r[1],
        permissions=frozenset(r[2] or ()),
        priority=r[3],
        is_system=r[4],
        is_active=r[5],
        version=r[6],
        created_at=r[7],
        updated_at=r[8],
        parent=r[9],
    )


class PostgresRoleRepository:
    """Role repository implementation."""

    def __init__(self, conn: AsyncConnection) -> None:
        self._conn = conn

    async def _missing_or_stale(self, name: str, expected_version: int) -> Exception:
        if await self.get(name) is None:
            return NotFound(f"Role '{name}' not found")
        return StaleVersion(f"Role '{name}' changed since version {expected_version}")

    async def _lock_references(self, role: Role) -> None:
        """Share-lock the catalog rows an active role lists; fail if any is gone.

        Held until commit, so a concurrent unregister (FOR UPDATE) waits for
        this transaction and then sees the role.
        """
        names = sorted(role.explicit_permissions()) if role.is_active else []
        if not names:
            return
        cur = await self._conn.execute(
            "SELECT name FROM permission WHERE name = ANY(%s) FOR SHARE",
            (names,),
        )
        missing = role.uncatalogued({r[0] for r in await cur.fetchall()})
        if missing:
            raise Conflict(
                f"Role '{role.name}' references uncatalogued permissions: {', '.join(missing)}"
            )

    async def get(self, name: str) -> Role | None:
        """Get role by name."""
        cur = await self._conn.execute(
            f"SELECT {_COLUMNS} FROM role WHERE name = %s",
            (name,),
        )
        r = await cur.fetchone()
        return _row_to_role(r) if r else None

    async def get_many(self, names: list[str]) -> list[Role]:
        """Get roles by name; unknown names are skipped."""
        cur = await self._conn.execute(
            f"SELECT {_COLUMNS} FROM role WHERE name = ANY(%s)",
            (list(names),),
        )
        return [_row_to_role(r) for r in await cur.fetchall()]

    async def list_all(self) -> list[Role]:
        """List all roles, priority descending then name."""
        cur = await self._conn.execute(
            f"SELECT {_COLUMNS} FROM role ORDER BY priority DESC, name"
        )
        return [_row_to_role(r) for r in await cur.fetchall()]

    async def list_referencing(self, permission_name: str, active_only: bool = True) -> list[Role]:
        """Roles whose permission list contains permission_name."""
        cur = await self._conn.execute(
            f"SELECT {_COLUMNS} FROM role "
            "WHERE %s = ANY(permissions) AND (is_active OR NOT %s)",
            (permission_name, active_only),
        )
        return [_row_to_role(r) for r in await cur.fetchall()]

    async def list_children(self, name: str) -> list[Role]:
        """Roles inheriting from name."""
        cur = await self._conn.execute(
            f"SELECT {_COLUMNS} FROM role WHERE parent = %s ORDER BY priority DESC, name",
            (name,),
        )
        return [_row_to_role(r) for r in await cur.fetchall()]

    async def create(self, role: Role) -> Role:
        """Insert role at version 1."""
        await self._lock_references(role)
        try:
            cur = await self._conn.execute(
                f"INSERT INTO role ({_COLUMNS}) VALUES (%s, %s, %s, %s, %s, %s, 1, %s, %s, %s) "
                "ON CONFLICT (name) DO NOTHING "
                f"RETURNING {_COLUMNS}",
                (
                    role.name,
                    role.description,
                    sorted(role.permissions),
                    role.priority,
                    role.is_system,
                    role.is_active,
                    role.created_at,
                    role.updated_at,
                    role.parent,
                ),
            )
        except ForeignKeyViolation:
            raise NotFound(f"Parent role '{role.parent}' not found") from None
        r = await cur.fetchone()
        if not r:
            raise Conflict(f"Role '{role.name}' already exists")
        return _row_to_role(r)

    async def save(self, role: Role, expected_version: int) -> Role:
        """Compare-and-swap update keyed by name."""
        return await self.rename(role.name, role, expected_version)

    async def rename(self, old_name: str, role: Role, expected_version: int) -> Role:
        """Compare-and-swap update; moves the row when role.name differs from old_name."""
        await self._lock_references(role)
        try:
            cur = await self._conn.execute(
                "UPDATE role SET name = %s, description = %s, permissions = %s, priority = %s, "
                "is_active = %s, parent = %s, updated_at = %s, version = version + 1 "
                "WHERE name = %s AND version = %s "
                f"RETURNING {_COLUMNS}",
                (
                    role.name,
                    role.description,
                    sorted(role.permissions),
                    role.priority,
                    role.is_active,
                    role.parent,
                    role.updated_at,
                    old_name,
                    expected_version,
                ),
            )
        except UniqueViolation:
            raise Conflict(f"Role '{role.name}' already exists") from None
        except ForeignKeyViolation:
            if role.name != old_name:
                raise Conflict(f"Role '{old_name}' has child roles and cannot be renamed") from None
            raise NotFound(f"Parent role '{role.parent}' not found") from None
        r = await cur.fetchone()
        if r:
            return _row_to_role(r)
        raise await self._missing_or_stale(old_name, expected_version)

    async def delete(self, name: str, expected_version: int) -> None:
        try:
            cur = await self._conn.execute(
                "DELETE FROM role WHERE name = %s AND version = %s",
                (name, expected_version),
            )
        except ForeignKeyViolation:
            raise Conflict(f"Role '{name}' has child roles") from None
        if cur.rowcount == 0:
            raise await self._missing_or_stale(name, expected_version)
