"""Application ports - interfaces for external adapters."""

from rolegate.application.ports.role_assignments import RoleAssignmentLookup
from rolegate.application.ports.unit_of_work import UnitOfWork, UnitOfWorkFactory

__all__ = [
    "RoleAssignmentLookup",
    "UnitOfWork",
    "UnitOfWorkFactory",
]
