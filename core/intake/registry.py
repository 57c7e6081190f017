"""
Section Registry - The Canonical Table of Intake Sections

Single source of truth for which sections exist, the schema each one is
validated against, whether it holds one object or a sequence of objects,
and how to tell whether it carries meaningful data.

Registration order is reporting order.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Final, Optional

from pydantic import BaseModel, TypeAdapter
from pydantic.alias_generators import to_camel

from core.intake.schema import (
    ApplicantSection,
    CoApplicantSection,
    Driver,
    HomeownersSection,
    IncludedCoApplicantSection,
    IncomeProtectionSection,
    Liability,
    LineageSection,
    LoanStatusSection,
    Mortgage,
    RentersSection,
    RetirementSection,
    SectionName,
    UnderwritingSection,
    VehicleCoverageSection,
)


class SectionKind(Enum):
    """Shape of a section's data."""

    OBJECT = "object"
    SEQUENCE = "sequence"


# =============================================================================
# Meaningful Data
# =============================================================================


def has_meaningful_value(value: Any) -> bool:
    """
    Check whether a single stored value counts as captured data.

    Non-empty strings, non-zero numbers and True count. False, zero, None
    and empty containers do not. Containers count if anything inside does.
    """
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0
    if isinstance(value, str):
        return bool(value.strip())
    if isinstance(value, dict):
        return any(has_meaningful_value(v) for v in value.values())
    if isinstance(value, (list, tuple)):
        return any(has_meaningful_value(v) for v in value)
    return True


def _declared_keys(model: type[BaseModel]) -> frozenset[str]:
    """Wire names of a model's top-level fields."""
    return frozenset(
        info.alias or to_camel(name) for name, info in model.model_fields.items()
    )


# =============================================================================
# Registration
# =============================================================================


@dataclass(frozen=True)
class SectionRegistration:
    """
    Immutable description of one intake section.

    For SEQUENCE sections, `model` is the schema of a single item.
    Sections with `inclusion_flags` validate against `included_model` while
    any of those flags is true, and against `model` otherwise.
    """

    name: SectionName
    kind: SectionKind
    model: type[BaseModel]
    order: int
    inclusion_flags: tuple[str, ...] = ()
    included_model: Optional[type[BaseModel]] = None

    def __post_init__(self) -> None:
        if self.inclusion_flags and self.included_model is None:
            raise ValueError(
                f"{self.name.value}: inclusion_flags require an included_model"
            )

    @property
    def is_sequence(self) -> bool:
        return self.kind == SectionKind.SEQUENCE

    @property
    def declared_keys(self) -> frozenset[str]:
        """Wire names the section's schema declares."""
        keys = _declared_keys(self.model)
        if self.included_model is not None:
            keys = keys | _declared_keys(self.included_model)
        return keys

    def schema_for(self, data: Any) -> type[BaseModel]:
        """Pick the schema for a payload based on its inclusion flags."""
        if self.inclusion_flags and isinstance(data, dict):
            if any(data.get(flag) is True for flag in self.inclusion_flags):
                return self.included_model
        return self.model

    def adapter_for(self, data: Any) -> TypeAdapter:
        """Validator for a payload: the object schema or a list of items."""
        if self.is_sequence:
            return _sequence_adapter(self.model)
        return _object_adapter(self.schema_for(data))

    def is_populated(self, data: Any) -> bool:
        """
        Check whether stored section data counts as complete.

        Sequences: at least one item. Objects: at least one declared key
        holding a meaningful value. A lone False flag is not enough.
        """
        if data is None:
            return False
        if self.is_sequence:
            return isinstance(data, list) and len(data) >= 1
        if not isinstance(data, dict):
            return False
        keys = self.declared_keys
        return any(
            has_meaningful_value(value)
            for key, value in data.items()
            if key in keys
        )

    def fill_percentage(self, data: Any) -> int:
        """Share of supplied top-level keys that hold meaningful data."""
        if data is None:
            return 0
        if self.is_sequence:
            return 100 if self.is_populated(data) else 0
        if not isinstance(data, dict) or not data:
            return 0
        filled = sum(1 for value in data.values() if has_meaningful_value(value))
        return round_half_up(100 * filled, len(data))


def round_half_up(numerator: int, denominator: int) -> int:
    """Integer division rounded half away from zero, for non-negative input."""
    return (2 * numerator + denominator) // (2 * denominator)


_ADAPTERS: dict[tuple[str, type], TypeAdapter] = {}


def _object_adapter(model: type[BaseModel]) -> TypeAdapter:
    key = ("object", model)
    if key not in _ADAPTERS:
        _ADAPTERS[key] = TypeAdapter(model)
    return _ADAPTERS[key]


def _sequence_adapter(model: type[BaseModel]) -> TypeAdapter:
    key = ("sequence", model)
    if key not in _ADAPTERS:
        _ADAPTERS[key] = TypeAdapter(list[model])
    return _ADAPTERS[key]


# =============================================================================
# Section Registry
# =============================================================================

_SECTION_REGISTRY: dict[SectionName, SectionRegistration] = {}


def register_section(registration: SectionRegistration) -> None:
    """
    Register an intake section.

    Raises:
        ValueError: If the section is already registered
    """
    if registration.name in _SECTION_REGISTRY:
        raise ValueError(f"Section already registered: {registration.name.value}")
    _SECTION_REGISTRY[registration.name] = registration


def describe(name: SectionName) -> SectionRegistration:
    """
    Get the registration for a section.

    Raises:
        KeyError: If the section is not registered
    """
    return _SECTION_REGISTRY[name]


def lookup(name: Any) -> Optional[SectionRegistration]:
    """Registration for a wire name, or None if it is not a section."""
    section = SectionName.from_string(name)
    if section is None:
        return None
    return _SECTION_REGISTRY.get(section)


def all_sections() -> list[SectionRegistration]:
    """All registrations in reporting order."""
    return sorted(_SECTION_REGISTRY.values(), key=lambda r: r.order)


def all_names() -> list[str]:
    """Wire names of all sections in reporting order."""
    return [r.name.value for r in all_sections()]


def total_sections() -> int:
    return len(_SECTION_REGISTRY)


# Expose registry for inspection (read-only view)
SECTION_REGISTRY: Final = _SECTION_REGISTRY


# =============================================================================
# Default Registrations
# =============================================================================

_DEFAULTS: Final[tuple[tuple[SectionName, SectionKind, type[BaseModel]], ...]] = (
    (SectionName.APPLICANT, SectionKind.OBJECT, ApplicantSection),
    (SectionName.CO_APPLICANT, SectionKind.OBJECT, CoApplicantSection),
    (SectionName.LIABILITIES, SectionKind.SEQUENCE, Liability),
    (SectionName.MORTGAGES, SectionKind.SEQUENCE, Mortgage),
    (SectionName.UNDERWRITING, SectionKind.OBJECT, UnderwritingSection),
    (SectionName.LOAN_STATUS, SectionKind.OBJECT, LoanStatusSection),
    (SectionName.DRIVERS, SectionKind.SEQUENCE, Driver),
    (SectionName.VEHICLE_COVERAGE, SectionKind.OBJECT, VehicleCoverageSection),
    (SectionName.HOMEOWNERS, SectionKind.OBJECT, HomeownersSection),
    (SectionName.RENTERS, SectionKind.OBJECT, RentersSection),
    (SectionName.INCOME_PROTECTION, SectionKind.OBJECT, IncomeProtectionSection),
    (SectionName.RETIREMENT, SectionKind.OBJECT, RetirementSection),
    (SectionName.LINEAGE, SectionKind.OBJECT, LineageSection),
)

for _order, (_name, _kind, _model) in enumerate(_DEFAULTS):
    if _name == SectionName.CO_APPLICANT:
        register_section(
            SectionRegistration(
                name=_name,
                kind=_kind,
                model=_model,
                order=_order,
                inclusion_flags=("includeCoApplicant", "hasCoApplicant"),
                included_model=IncludedCoApplicantSection,
            )
        )
    else:
        register_section(
            SectionRegistration(name=_name, kind=_kind, model=_model, order=_order)
        )
