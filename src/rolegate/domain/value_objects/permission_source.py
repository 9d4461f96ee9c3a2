"""Where an effective permission comes from."""

from dataclasses import dataclass
from enum import StrEnum


class SourceKind(StrEnum):
    """Origin of an effective permission."""

    ROLE = "role"
    GRANTED = "granted"


@dataclass(frozen=True)
class PermissionSource:
    """One contribution to an effective permission.

    For ``ROLE`` sources, ``role`` is the role the user holds and
    ``inherited_from`` the ancestor whose permission list matched, if any.
    """

    kind: SourceKind
    role: str | None = None
    inherited_from: str | None = None
