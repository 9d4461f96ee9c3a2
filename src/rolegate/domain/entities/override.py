"""Override entity - per-user grants and denials."""

from dataclasses import dataclass, field
from datetime import datetime


@dataclass
class Override:
    """Per-user exceptions to role-derived permissions.

    ``version`` 0 means nothing has been recorded for the user yet.
    """

    user_id: str
    granted: frozenset[str] = field(default_factory=frozenset)
    denied: frozenset[str] = field(default_factory=frozenset)
    version: int = 0
    updated_at: datetime | None = None

    @classmethod
    def empty(cls, user_id: str) -> "Override":
        return cls(user_id=user_id)

    @property
    def overlap(self) -> frozenset[str]:
        """Entries present in both sets; always empty for data written by the engine."""
        return self.granted & self.denied

    def is_empty(self) -> bool:
        return not self.granted and not self.denied
