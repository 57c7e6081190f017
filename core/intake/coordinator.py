"""
Intake Coordinator - Create, Update and Read Client Intake Sections

Orchestrates every write against a client aggregate: validate, merge into
the loaded record, recompute progress, persist once. A rejected operation
never reaches the gateway, so the stored aggregate is left unchanged.

Writes are read-modify-write against a versioned gateway; a concurrent
writer that got there first causes ConcurrentModification instead of a
silent overwrite.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Mapping, Optional, Union

from core.intake.audit import BULK_UPDATED, CLIENT_CREATED, SECTION_UPDATED, AuditTrail
from core.intake.errors import (
    ClientNotFound,
    InvalidRequest,
    InvalidSection,
    MissingSectionData,
    ValidationFailed,
)
from core.intake.progress import ProgressReport, apply_progress, compute_progress
from core.intake.registry import SectionRegistration, all_names, lookup
from core.intake.repository import ClientGateway, new_record_id, utc_now
from core.intake.schema import ClientRecord, ClientStatus, SectionName
from core.intake.validation import (
    ValidationResult,
    Violation,
    parse_create,
    parse_section,
)


logger = logging.getLogger(__name__)


# =============================================================================
# Results
# =============================================================================


@dataclass(frozen=True)
class CreateResult:
    record_id: str
    client_id: str
    completion_percentage: int
    status: ClientStatus
    completed_sections: tuple[str, ...]

    def to_dict(self) -> dict:
        return {
            "id": self.record_id,
            "clientId": self.client_id,
            "completionPercentage": self.completion_percentage,
            "status": self.status.value,
        }


@dataclass(frozen=True)
class SectionUpdateResult:
    record_id: str
    client_id: str
    updated_section: str
    data: Any
    completion_percentage: int
    status: ClientStatus

    def to_dict(self) -> dict:
        return {
            "updatedSection": self.updated_section,
            "completionPercentage": self.completion_percentage,
            "status": self.status.value,
        }


@dataclass(frozen=True)
class SectionReadResult:
    section: str
    client_id: str
    data: Any

    def to_dict(self) -> dict:
        return {
            "section": self.section,
            "clientId": self.client_id,
            "data": self.data,
        }


@dataclass(frozen=True)
class BulkUpdateResult:
    record_id: str
    client_id: str
    updated_sections: tuple[str, ...]
    completion_percentage: int
    status: ClientStatus

    def to_dict(self) -> dict:
        return {
            "updatedSections": list(self.updated_sections),
            "completionPercentage": self.completion_percentage,
            "status": self.status.value,
        }


@dataclass(frozen=True)
class ClientProgress:
    client_id: str
    report: ProgressReport

    def to_dict(self) -> dict:
        data = self.report.to_dict()
        data["clientId"] = self.client_id
        return data


@dataclass(frozen=True)
class ClientSummary:
    """Row for workflow listings."""

    record_id: str
    client_id: str
    status: ClientStatus
    completion_percentage: int
    completed_count: int
    applicant_name: Optional[str]
    updated_at: Optional[datetime]

    def to_dict(self) -> dict:
        return {
            "id": self.record_id,
            "clientId": self.client_id,
            "status": self.status.value,
            "completionPercentage": self.completion_percentage,
            "completedCount": self.completed_count,
            "applicantName": self.applicant_name,
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
        }


# =============================================================================
# Coordinator
# =============================================================================


class IntakeCoordinator:
    """
    Entry point for all client intake operations.

    Args:
        gateway: Where client aggregates are loaded from and saved to
        clock: Timestamp source for audit entries
        audit: Optional audit trail receiving one entry per accepted write
    """

    def __init__(
        self,
        gateway: ClientGateway,
        clock: Optional[Callable[[], datetime]] = None,
        audit: Optional[AuditTrail] = None,
    ):
        self._gateway = gateway
        self._clock = clock or utc_now
        self._audit = audit

    @property
    def gateway(self) -> ClientGateway:
        return self._gateway

    # =========================================================================
    # Helpers
    # =========================================================================

    @staticmethod
    def _resolve_section(name: Union[str, SectionName, None]) -> SectionRegistration:
        key = name.value if isinstance(name, SectionName) else name
        registration = lookup(key)
        if registration is None:
            raise InvalidSection([str(key)], all_names())
        return registration

    def _load(self, record_id: str) -> ClientRecord:
        record = self._gateway.load(record_id)
        if record is None:
            logger.warning("Client %s not found", record_id)
            raise ClientNotFound(record_id)
        return record

    def _record_audit(
        self,
        action: str,
        record: ClientRecord,
        sections: tuple[str, ...],
    ) -> None:
        if self._audit is None:
            return
        self._audit.record(
            action=action,
            record_id=record.id,
            client_id=record.client_id,
            sections=sections,
            completion_percentage=record.completion_percentage,
            recorded_at=self._clock(),
            status=record.status.value,
        )

    # =========================================================================
    # Operations
    # =========================================================================

    def create_client(self, payload: Any, require_contact: bool = False) -> CreateResult:
        """
        Create a client from a full or partial multi-section payload.

        Args:
            payload: Mapping of section wire name to section data
            require_contact: Apply the required-contact rule to person sections

        Raises:
            ValidationFailed: With every violation in the payload
            PersistenceError: If storage is unavailable
        """
        sections, validation = parse_create(payload, require_contact=require_contact)
        if not validation.valid:
            logger.warning(
                "Client creation rejected: %d violation(s)", len(validation.violations)
            )
            raise ValidationFailed(validation.violations)

        record = ClientRecord(id=new_record_id(), client_id=self._gateway.next_client_id())
        for section in sections:
            record.set_section(section.name, section.data)
        report = apply_progress(record)

        stored = self._gateway.save(record, expected_version=0)
        self._record_audit(CLIENT_CREATED, stored, report.completed_sections)
        logger.info(
            "Created client %s (%s) at %d%%",
            stored.client_id,
            stored.id,
            stored.completion_percentage,
        )

        return CreateResult(
            record_id=stored.id,
            client_id=stored.client_id,
            completion_percentage=stored.completion_percentage,
            status=stored.status,
            completed_sections=report.completed_sections,
        )

    def update_section(
        self,
        record_id: str,
        section_name: Union[str, SectionName, None],
        data: Any,
    ) -> SectionUpdateResult:
        """
        Replace one section of a client.

        Object sections are replaced wholesale; sequence sections take the
        new list in place of the old one.

        Raises:
            InvalidSection: If section_name is not a registered section
            MissingSectionData: If data is None
            ClientNotFound: If no client has record_id
            ValidationFailed: With every violation in the payload
            ConcurrentModification: If the client changed since it was loaded
        """
        registration = self._resolve_section(section_name)
        if data is None:
            raise MissingSectionData()

        record = self._load(record_id)
        payload, validation = parse_section(registration.name, data)
        if not validation.valid:
            logger.warning(
                "Update of %s on client %s rejected: %d violation(s)",
                registration.name.value,
                record.client_id,
                len(validation.violations),
            )
            raise ValidationFailed(validation.violations)

        expected_version = record.version
        record.set_section(payload.name, payload.data)
        apply_progress(record)
        stored = self._gateway.save(record, expected_version=expected_version)

        self._record_audit(SECTION_UPDATED, stored, (registration.name.value,))
        logger.info(
            "Updated %s on client %s, now %d%%",
            registration.name.value,
            stored.client_id,
            stored.completion_percentage,
        )

        return SectionUpdateResult(
            record_id=stored.id,
            client_id=stored.client_id,
            updated_section=registration.name.value,
            data=stored.get_section(registration.name),
            completion_percentage=stored.completion_percentage,
            status=stored.status,
        )

    def get_section(
        self,
        record_id: str,
        section_name: Union[str, SectionName, None],
    ) -> SectionReadResult:
        """
        Read one section's stored data ({} if never written).

        Raises:
            InvalidSection: If section_name is not a registered section
            ClientNotFound: If no client has record_id
        """
        registration = self._resolve_section(section_name)
        record = self._load(record_id)
        data = record.get_section(registration.name)
        return SectionReadResult(
            section=registration.name.value,
            client_id=record.client_id,
            data=data if data is not None else {},
        )

    def get_progress(self, record_id: str) -> ClientProgress:
        """
        Completion report for a client, computed from its current sections.

        Raises:
            ClientNotFound: If no client has record_id
        """
        record = self._load(record_id)
        return ClientProgress(client_id=record.client_id, report=compute_progress(record))

    def bulk_update(self, record_id: str, sections: Any) -> BulkUpdateResult:
        """
        Replace several sections atomically.

        Every entry is validated before anything is written. If any entry
        fails, the call fails with all violations and no section changes.

        Raises:
            InvalidRequest: If sections is not a non-empty mapping
            InvalidSection: If any key is not a registered section
            ClientNotFound: If no client has record_id
            ValidationFailed: With every violation across all entries
            ConcurrentModification: If the client changed since it was loaded
        """
        if not isinstance(sections, Mapping) or not sections:
            raise InvalidRequest("Sections object is required")

        unknown = [str(name) for name in sections if lookup(name) is None]
        if unknown:
            raise InvalidSection(unknown, all_names())

        record = self._load(record_id)

        parsed = []
        validation = ValidationResult()
        for name, data in sections.items():
            if data is None:
                validation = validation.merged(
                    ValidationResult((Violation(field=name, message="Section data is required"),))
                )
                continue
            payload, result = parse_section(name, data)
            validation = validation.merged(result)
            if payload is not None:
                parsed.append(payload)

        if not validation.valid:
            logger.warning(
                "Bulk update on client %s rejected: %d violation(s)",
                record.client_id,
                len(validation.violations),
            )
            raise ValidationFailed(validation.violations)

        expected_version = record.version
        for payload in parsed:
            record.set_section(payload.name, payload.data)
        apply_progress(record)
        stored = self._gateway.save(record, expected_version=expected_version)

        updated = tuple(payload.name.value for payload in parsed)
        self._record_audit(BULK_UPDATED, stored, updated)
        logger.info(
            "Bulk updated %s on client %s, now %d%%",
            ", ".join(updated),
            stored.client_id,
            stored.completion_percentage,
        )

        return BulkUpdateResult(
            record_id=stored.id,
            client_id=stored.client_id,
            updated_sections=updated,
            completion_percentage=stored.completion_percentage,
            status=stored.status,
        )

    def list_clients(self, status: Optional[ClientStatus] = None) -> list[ClientSummary]:
        """Client summaries, most recently updated first."""
        if status is None:
            records = self._gateway.list_all()
        else:
            records = self._gateway.list_by_status(status)
        records.sort(
            key=lambda r: r.updated_at or r.created_at or datetime.min,
            reverse=True,
        )
        return [
            ClientSummary(
                record_id=r.id,
                client_id=r.client_id,
                status=r.status,
                completion_percentage=r.completion_percentage,
                completed_count=compute_progress(r).completed_count,
                applicant_name=r.applicant_name,
                updated_at=r.updated_at,
            )
            for r in records
        ]
