"""
Intake Progress - Completion Percentage and Status Derivation

Completion is the share of the thirteen sections holding meaningful data,
rounded half up to a whole percent. Status follows completion:

    0%        -> prospect
    1% - 99%  -> pending
    100%      -> active
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, Union

from core.intake.registry import all_sections, round_half_up
from core.intake.schema import ClientRecord, ClientStatus


@dataclass(frozen=True)
class SectionProgress:
    """Completion of a single section."""

    completed: bool
    completion_percentage: int

    def to_dict(self) -> dict:
        return {
            "completed": self.completed,
            "completionPercentage": self.completion_percentage,
        }


@dataclass(frozen=True)
class ProgressReport:
    """Result of a progress computation over one client."""

    completed_sections: tuple[str, ...]
    total_sections: int
    completion_percentage: int
    status: ClientStatus
    section_progress: dict[str, SectionProgress] = field(default_factory=dict)

    @property
    def completed_count(self) -> int:
        return len(self.completed_sections)

    @property
    def is_complete(self) -> bool:
        return self.completion_percentage == 100

    def to_dict(self) -> dict:
        """Convert report to dictionary."""
        return {
            "completionPercentage": self.completion_percentage,
            "status": self.status.value,
            "completedCount": self.completed_count,
            "totalSections": self.total_sections,
            "completedSections": list(self.completed_sections),
            "sectionProgress": {
                name: progress.to_dict()
                for name, progress in self.section_progress.items()
            },
        }


def completion_percentage(completed: int, total: int) -> int:
    """round(100 * completed / total), halves rounded up."""
    if total <= 0:
        return 0
    return round_half_up(100 * completed, total)


def derive_status(percentage: int) -> ClientStatus:
    """Map a completion percentage to a client status."""
    if percentage <= 0:
        return ClientStatus.PROSPECT
    if percentage >= 100:
        return ClientStatus.ACTIVE
    return ClientStatus.PENDING


def compute_progress(source: Union[ClientRecord, Mapping[str, Any]]) -> ProgressReport:
    """
    Compute completion for a client.

    Args:
        source: A ClientRecord, or a mapping of section wire name to data

    Returns:
        ProgressReport with completed sections in registry order
    """
    sections = source.sections if isinstance(source, ClientRecord) else source

    registrations = all_sections()
    completed: list[str] = []
    per_section: dict[str, SectionProgress] = {}

    for registration in registrations:
        name = registration.name.value
        data = sections.get(name)
        is_done = registration.is_populated(data)
        if is_done:
            completed.append(name)
        per_section[name] = SectionProgress(
            completed=is_done,
            completion_percentage=registration.fill_percentage(data),
        )

    percentage = completion_percentage(len(completed), len(registrations))
    return ProgressReport(
        completed_sections=tuple(completed),
        total_sections=len(registrations),
        completion_percentage=percentage,
        status=derive_status(percentage),
        section_progress=per_section,
    )


def apply_progress(record: ClientRecord) -> ProgressReport:
    """Recompute progress and write percentage and status onto the record."""
    report = compute_progress(record)
    record.completion_percentage = report.completion_percentage
    record.status = report.status
    return report
