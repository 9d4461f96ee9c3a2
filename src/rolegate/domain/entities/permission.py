"""Permission entity - catalogued capability."""

from dataclasses import dataclass
from datetime import datetime


@dataclass
class Permission:
    """Permission - unique ``category:action:resource`` name with metadata."""

    name: str
    description: str
    category: str
    created_at: datetime
    updated_at: datetime
    version: int = 1
