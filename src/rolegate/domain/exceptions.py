"""Domain exceptions."""


class RoleGateError(Exception):
    """Base exception for rolegate."""

    pass


class InvalidArgument(RoleGateError):
    """Input is malformed or references unknown permissions."""

    pass


class NotFound(RoleGateError):
    """Requested resource was not found."""

    pass


class Conflict(RoleGateError):
    """Write conflicts with existing state."""

    pass


class StaleVersion(Conflict):
    """Entity version changed since it was read."""

    pass


class Unavailable(RoleGateError):
    """Persistence backend failed or timed out."""

    pass
