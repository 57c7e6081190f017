"""
Client Intake - Multi-Section Client Records

Section Registry, validation, progress calculation and the coordinator
that applies create, section update and bulk update operations to a
client aggregate.

Every write is validated in full before anything is stored. Completion
and status are always recomputed from the stored sections.
"""

from core.intake.schema import (
    ClientRecord,
    ClientStatus,
    SectionName,
)
from core.intake.registry import (
    SECTION_REGISTRY,
    SectionKind,
    SectionRegistration,
    all_names,
    all_sections,
    describe,
    lookup,
    total_sections,
)
from core.intake.validation import (
    ValidationResult,
    Violation,
    validate_create,
    validate_required_contact,
    validate_section,
)
from core.intake.progress import (
    ProgressReport,
    compute_progress,
    derive_status,
)
from core.intake.errors import (
    ClientNotFound,
    ConcurrentModification,
    IntakeError,
    InvalidRequest,
    InvalidSection,
    MissingSectionData,
    PersistenceError,
    ValidationFailed,
)
from core.intake.repository import (
    ClientGateway,
    ClientRepository,
    get_client_repository,
    reset_client_repository,
)
from core.intake.audit import AuditEntry, AuditTrail
from core.intake.coordinator import IntakeCoordinator

__all__ = [
    # Schema
    "ClientRecord",
    "ClientStatus",
    "SectionName",
    # Registry
    "SECTION_REGISTRY",
    "SectionKind",
    "SectionRegistration",
    "all_names",
    "all_sections",
    "describe",
    "lookup",
    "total_sections",
    # Validation
    "ValidationResult",
    "Violation",
    "validate_create",
    "validate_required_contact",
    "validate_section",
    # Progress
    "ProgressReport",
    "compute_progress",
    "derive_status",
    # Errors
    "ClientNotFound",
    "ConcurrentModification",
    "IntakeError",
    "InvalidRequest",
    "InvalidSection",
    "MissingSectionData",
    "PersistenceError",
    "ValidationFailed",
    # Persistence
    "ClientGateway",
    "ClientRepository",
    "get_client_repository",
    "reset_client_repository",
    "AuditEntry",
    "AuditTrail",
    # Coordinator
    "IntakeCoordinator",
]
