"""Override set kinds."""

from enum import StrEnum


class OverrideKind(StrEnum):
    """Which per-user override set an operation targets."""

    GRANTED = "granted"
    DENIED = "denied"
