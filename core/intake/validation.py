"""
Intake Validation - Section, Creation and Contact Rules

Validates partial client payloads against the Section Registry. Every
violation in a payload is collected in one pass; nothing stops at the
first error. Successful parses yield normalised section data ready to
store.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Final, Mapping, Optional, Union

from pydantic import EmailStr, TypeAdapter, ValidationError

from core.intake.errors import InvalidSection
from core.intake.registry import SectionRegistration, all_names, all_sections, lookup
from core.intake.schema import SectionName


# =============================================================================
# Constants
# =============================================================================

PHONE_REGEX: Final = re.compile(r"^[\+]?[1-9][\d\s\-\(\)]{7,15}$")

# At least one of these must be present in a required-contact block
CONTACT_PHONE_FIELDS: Final[tuple[str, ...]] = ("homePhone", "mobilePhone", "otherPhone")

_EMAIL_ADAPTER: Final = TypeAdapter(EmailStr)


# =============================================================================
# Validation Result
# =============================================================================


@dataclass(frozen=True)
class Violation:
    """A single field-level failure."""

    field: str
    message: str

    def to_dict(self) -> dict:
        return {"field": self.field, "message": self.message}


@dataclass(frozen=True)
class ValidationResult:
    """
    Outcome of a validation pass.

    Valid iff there are no violations. Violations keep payload order.
    """

    violations: tuple[Violation, ...] = ()

    @property
    def valid(self) -> bool:
        return not self.violations

    def merged(self, other: "ValidationResult") -> "ValidationResult":
        """Combine two results, keeping order."""
        return ValidationResult(self.violations + other.violations)

    def to_dict(self) -> dict:
        """Convert result to dictionary."""
        return {
            "valid": self.valid,
            "errors": [v.to_dict() for v in self.violations],
        }


@dataclass(frozen=True)
class SectionPayload:
    """Validated, normalised data for one section."""

    name: SectionName
    data: Any


# =============================================================================
# Helpers
# =============================================================================


def _join_path(*parts: Any) -> str:
    return ".".join(str(p) for p in parts if p != "" and p is not None)


def _violations_from_error(error: ValidationError, prefix: str) -> list[Violation]:
    """Translate pydantic errors into dotted-path violations."""
    return [
        Violation(field=_join_path(prefix, *detail["loc"]), message=detail["msg"])
        for detail in error.errors()
    ]


def _resolve(name: Union[str, SectionName]) -> SectionRegistration:
    key = name.value if isinstance(name, SectionName) else name
    registration = lookup(key)
    if registration is None:
        raise InvalidSection([str(key)], all_names())
    return registration


def _is_included(registration: SectionRegistration, data: Any) -> bool:
    """Whether a payload switches on its section's inclusion flags."""
    return registration.schema_for(data) is not registration.model


# =============================================================================
# Validation Functions
# =============================================================================


def parse_section(
    name: Union[str, SectionName],
    data: Any,
    require_contact: bool = False,
) -> tuple[Optional[SectionPayload], ValidationResult]:
    """
    Validate one section's payload and normalise it.

    Sections with inclusion flags are validated in two phases: the flag is
    read first, then the strict or lax schema is applied.

    Args:
        name: Section wire name
        data: Raw section payload
        require_contact: Also apply the required-contact rule to person sections

    Returns:
        Tuple of (SectionPayload or None, ValidationResult)

    Raises:
        InvalidSection: If name is not a registered section
    """
    registration = _resolve(name)
    prefix = registration.name.value
    adapter = registration.adapter_for(data)

    violations: list[Violation] = []
    parsed = None
    try:
        parsed = adapter.validate_python(data)
    except ValidationError as e:
        violations.extend(_violations_from_error(e, prefix))

    if require_contact and isinstance(data, dict):
        if registration.name == SectionName.APPLICANT or (
            registration.name == SectionName.CO_APPLICANT
            and _is_included(registration, data)
        ):
            contact = validate_required_contact(data, prefix=prefix)
            reported = {v.field for v in violations}
            violations.extend(v for v in contact.violations if v.field not in reported)

    result = ValidationResult(tuple(violations))
    if not result.valid:
        return None, result

    normalised = adapter.dump_python(
        parsed, mode="json", by_alias=True, exclude_unset=True
    )
    return SectionPayload(name=registration.name, data=normalised), result


def validate_section(
    name: Union[str, SectionName],
    data: Any,
    require_contact: bool = False,
) -> ValidationResult:
    """
    Validate a single section's payload in isolation.

    Raises:
        InvalidSection: If name is not a registered section
    """
    _, result = parse_section(name, data, require_contact=require_contact)
    return result


def parse_create(
    payload: Any,
    require_contact: bool = False,
) -> tuple[Optional[list[SectionPayload]], ValidationResult]:
    """
    Validate a multi-section creation payload.

    Every section is optional. Unknown top-level keys are ignored. A null
    section is treated as absent.

    Returns:
        Tuple of (section payloads in registry order or None, ValidationResult)
    """
    if not isinstance(payload, Mapping):
        return None, ValidationResult(
            (Violation(field="body", message="Client payload must be an object"),)
        )

    sections: list[SectionPayload] = []
    result = ValidationResult()
    for registration in all_sections():
        key = registration.name.value
        if payload.get(key) is None:
            continue
        parsed, section_result = parse_section(
            registration.name, payload[key], require_contact=require_contact
        )
        result = result.merged(section_result)
        if parsed is not None:
            sections.append(parsed)

    if not result.valid:
        return None, result
    return sections, result


def validate_create(payload: Any, require_contact: bool = False) -> ValidationResult:
    """Validate the full multi-section payload used at client creation."""
    _, result = parse_create(payload, require_contact=require_contact)
    return result


def validate_required_contact(payload: Any, prefix: str = "") -> ValidationResult:
    """
    Validate a contact block for required-basic-info flows.

    At least one of homePhone, mobilePhone or otherPhone must be present,
    any phone given must be well formed, and email is always required and
    must be a valid address.

    Args:
        payload: Contact block (applicant or co-applicant section)
        prefix: Field path prefix for reported violations
    """
    if not isinstance(payload, Mapping):
        return ValidationResult(
            (Violation(field=prefix or "contact", message="Contact details must be an object"),)
        )

    violations: list[Violation] = []

    phones = {
        key: payload.get(key)
        for key in CONTACT_PHONE_FIELDS
        if isinstance(payload.get(key), str) and payload.get(key).strip()
    }
    if not phones:
        violations.append(
            Violation(
                field=_join_path(prefix, "phone"),
                message="At least one phone number is required "
                "(homePhone, mobilePhone or otherPhone)",
            )
        )
    for key, value in phones.items():
        if not PHONE_REGEX.match(value.strip()):
            violations.append(
                Violation(
                    field=_join_path(prefix, key),
                    message="Please enter a valid phone number",
                )
            )

    email = payload.get("email")
    if email is None or (isinstance(email, str) and not email.strip()):
        violations.append(
            Violation(field=_join_path(prefix, "email"), message="Email is required")
        )
    else:
        try:
            _EMAIL_ADAPTER.validate_python(email.strip() if isinstance(email, str) else email)
        except ValidationError:
            violations.append(
                Violation(
                    field=_join_path(prefix, "email"),
                    message="Please enter a valid email address",
                )
            )

    return ValidationResult(tuple(violations))
