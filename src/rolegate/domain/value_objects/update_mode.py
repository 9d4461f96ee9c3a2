"""Role permission update modes."""

from enum import StrEnum


class UpdateMode(StrEnum):
    """How a permission list is applied to a role."""

    REPLACE = "replace"
    ADD = "add"
    REMOVE = "remove"
