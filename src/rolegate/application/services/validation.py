"""Input validation shared by the stores and the facade."""

import re
from collections.abc import Iterable
from enum import StrEnum
from typing import TypeVar

from rolegate.domain.exceptions import InvalidArgument
from rolegate.domain.value_objects import PermissionName, PermissionPattern, is_pattern

E = TypeVar("E", bound=StrEnum)

_ROLE_NAME_RE = re.compile(r"^[a-z][a-z0-9_-]*$")


def parse_enum(enum_cls: type[E], value: object, label: str) -> E:
    """Coerce a string or enum member to ``enum_cls``; raise InvalidArgument otherwise."""
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(m.value for m in enum_cls)
        raise InvalidArgument(f"Invalid {label} {value!r}: expected one of {allowed}") from None


def validate_role_name(name: object) -> str:
    if not isinstance(name, str) or not _ROLE_NAME_RE.match(name):
        raise InvalidArgument(f"Invalid role name {name!r}")
    return name


def validate_user_id(user_id: object) -> str:
    if not isinstance(user_id, str) or not user_id.strip():
        raise InvalidArgument("user_id must be a non-empty string")
    return user_id


def validate_category(category: object) -> str:
    if not isinstance(category, str) or ":" in category:
        raise InvalidArgument(f"Invalid category {category!r}")
    try:
        PermissionName(category)
    except ValueError:
        raise InvalidArgument(f"Invalid category {category!r}") from None
    return category


def validate_references(
    references: Iterable[object],
    catalog: frozenset[str] | None = None,
) -> frozenset[str]:
    """Check permission references and return them as a set.

    Every entry must be a well-formed name or pattern. When ``catalog`` is
    given, exact names must also be catalogued.
    """
    if isinstance(references, str):
        raise InvalidArgument("permissions must be a list of names, not a string")
    valid: set[str] = set()
    invalid: list[str] = []
    for ref in references:
        try:
            if not isinstance(ref, str):
                raise ValueError(ref)
            if is_pattern(ref):
                PermissionPattern(ref)
            else:
                PermissionName(ref)
        except ValueError:
            invalid.append(repr(ref))
            continue
        if catalog is not None and not is_pattern(ref) and ref not in catalog:
            invalid.append(ref)
            continue
        valid.add(ref)
    if invalid:
        raise InvalidArgument(f"Invalid permissions: {', '.join(sorted(invalid))}")
    return frozenset(valid)


def covers(denial: str, reference: str) -> bool:
    """True if ``denial`` (a name or pattern) covers ``reference``."""
    if denial == reference:
        return True
    if is_pattern(denial):
        return PermissionPattern(denial).matches(reference)
    return False


def validate_role_names(role_names: object) -> list[str]:
    if isinstance(role_names, str) or not isinstance(role_names, Iterable):
        raise InvalidArgument("role_names must be a list of role names")
    names = list(role_names)
    if not all(isinstance(n, str) for n in names):
        raise InvalidArgument("role_names must contain only strings")
    return names
