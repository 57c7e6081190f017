"""
Client Intake Core - Business Logic

1. Section Registry (thirteen named sections, object or sequence)
2. Validation Engine (per-section, creation and required-contact rules)
3. Progress Calculator (completion percentage and derived status)
4. Update Coordinator (create, section update, bulk update, reads)
5. Persistence Gateway (versioned client aggregate store)
"""

from .intake import (
    ClientRecord,
    ClientStatus,
    SectionName,
    IntakeCoordinator,
    ClientRepository,
    IntakeError,
)

__all__ = [
    "ClientRecord",
    "ClientStatus",
    "SectionName",
    "IntakeCoordinator",
    "ClientRepository",
    "IntakeError",
]
