"""Permission identifiers and wildcard patterns.

A permission name has one to three lowercase segments separated by colons:
``category[:action[:resource]]``. A pattern is either ``*`` or a name prefix
of at most two segments followed by ``:*``.
"""

import re
from dataclasses import dataclass

_SEGMENT = r"[a-z][a-z0-9_-]*"
_NAME_RE = re.compile(rf"^{_SEGMENT}(?::{_SEGMENT}){{0,2}}$")
_PATTERN_RE = re.compile(rf"^(?:\*|{_SEGMENT}(?::{_SEGMENT})?:\*)$")

WILDCARD = "*"


def is_pattern(reference: str) -> bool:
    """True if reference is written as a wildcard pattern."""
    return reference == WILDCARD or reference.endswith(":" + WILDCARD)


@dataclass(frozen=True)
class PermissionName:
    """Validated ``category:action:resource`` identifier."""

    value: str

    def __post_init__(self) -> None:
        if not isinstance(self.value, str) or not _NAME_RE.match(self.value):
            raise ValueError(
                f"Invalid permission name {self.value!r}: expected category[:action[:resource]]"
            )

    @property
    def segments(self) -> tuple[str, ...]:
        return tuple(self.value.split(":"))

    @property
    def category(self) -> str:
        return self.segments[0]

    @property
    def action(self) -> str | None:
        parts = self.segments
        return parts[1] if len(parts) > 1 else None

    @property
    def resource(self) -> str | None:
        parts = self.segments
        return parts[2] if len(parts) > 2 else None


@dataclass(frozen=True)
class PermissionPattern:
    """Wildcard reference expanded against the catalog at resolution time."""

    value: str

    def __post_init__(self) -> None:
        if not isinstance(self.value, str) or not _PATTERN_RE.match(self.value):
            raise ValueError(
                f"Invalid permission pattern {self.value!r}: expected '*' or 'prefix:*'"
            )

    @property
    def prefix(self) -> str:
        """Name prefix including the trailing colon, empty for ``*``."""
        return self.value[:-1]

    def matches(self, name: str) -> bool:
        return name.startswith(self.prefix)

    def expand(self, names: frozenset[str] | set[str]) -> frozenset[str]:
        """Names from ``names`` covered by this pattern."""
        if self.value == WILDCARD:
            return frozenset(names)
        return frozenset(n for n in names if n.startswith(self.prefix))
