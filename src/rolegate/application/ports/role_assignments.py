"""Role assignment lookup port - supplied by the calling application."""

from typing import Protocol


class RoleAssignmentLookup(Protocol):
    """Port for asking how many users currently hold a role."""

    async def count_users_with_role(self, role_name: str) -> int: ...
