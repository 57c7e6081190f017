"""
Intake Errors - Failure Taxonomy for Client Intake Operations

Every rejected operation raises one of these. Each carries the HTTP status
it maps to and, for validation failures, the complete violation list.
"""

from __future__ import annotations

from typing import Iterable, Optional, Sequence


class IntakeError(Exception):
    """Base class for all intake failures."""

    status_code: int = 500

    def __init__(self, error: str, details: Optional[Sequence[dict]] = None):
        super().__init__(error)
        self.error = error
        self.details = list(details) if details else []

    def to_dict(self) -> dict:
        """Convert to the error response body."""
        body = {"success": False, "error": self.error}
        if self.details:
            body["details"] = self.details
        return body


class ValidationFailed(IntakeError):
    """One or more field-level violations."""

    status_code = 400

    def __init__(self, violations: Iterable, error: str = "Validation failed"):
        self.violations = tuple(violations)
        super().__init__(error, [v.to_dict() for v in self.violations])


class InvalidSection(IntakeError):
    """Section name outside the registry."""

    status_code = 400

    def __init__(self, names: Sequence[str], valid_names: Sequence[str]):
        self.names = tuple(names)
        label = "Invalid section" if len(self.names) == 1 else "Invalid sections"
        super().__init__(
            f"{label}: {', '.join(self.names)}. "
            f"Valid sections are: {', '.join(valid_names)}"
        )


class MissingSectionData(IntakeError):
    """Section write without a payload."""

    status_code = 400

    def __init__(self, error: str = "Section name and data are required"):
        super().__init__(error)


class InvalidRequest(IntakeError):
    """Request body is structurally unusable."""

    status_code = 400


class ClientNotFound(IntakeError):
    status_code = 404

    def __init__(self, record_id: str):
        self.record_id = record_id
        super().__init__("Client not found")


class ConcurrentModification(IntakeError):
    """The stored aggregate changed since it was loaded."""

    status_code = 409

    def __init__(self, record_id: str, expected: int, actual: int):
        self.record_id = record_id
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Client {record_id} was modified concurrently "
            f"(expected version {expected}, found {actual})"
        )


class PersistenceError(IntakeError):
    """Storage unavailable. Not retried here."""

    status_code = 500

    def __init__(self, error: str = "Client storage unavailable"):
        super().__init__(error)
