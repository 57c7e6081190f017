"""
Intake Audit Trail - Record of Accepted Client Writes

Appends one entry per accepted create, section update or bulk update.
Internal only; never returned through the client API.
"""

from __future__ import annotations

import json
import logging
import uuid
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Final, Optional


logger = logging.getLogger(__name__)


# =============================================================================
# Constants
# =============================================================================

CLIENT_CREATED: Final = "MULTISTAGE_CLIENT_CREATED"
SECTION_UPDATED: Final = "CLIENT_SECTION_UPDATED"
BULK_UPDATED: Final = "CLIENT_BULK_UPDATE"

AUDIT_ACTIONS: Final[tuple[str, ...]] = (CLIENT_CREATED, SECTION_UPDATED, BULK_UPDATED)


# =============================================================================
# Audit Entry
# =============================================================================


@dataclass(frozen=True)
class AuditEntry:
    """Single accepted write."""

    entry_id: str
    action: str
    record_id: str
    client_id: str
    sections: tuple[str, ...]
    completion_percentage: int
    recorded_at: datetime
    status: Optional[str] = None

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialisation."""
        return {
            "entry_id": self.entry_id,
            "action": self.action,
            "record_id": self.record_id,
            "client_id": self.client_id,
            "sections": list(self.sections),
            "completion_percentage": self.completion_percentage,
            "recorded_at": self.recorded_at.isoformat(),
            "status": self.status,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "AuditEntry":
        """Create from dictionary."""
        return cls(
            entry_id=data["entry_id"],
            action=data["action"],
            record_id=data["record_id"],
            client_id=data["client_id"],
            sections=tuple(data.get("sections", [])),
            completion_percentage=int(data.get("completion_percentage", 0)),
            recorded_at=datetime.fromisoformat(data["recorded_at"]),
            status=data.get("status"),
        )


# =============================================================================
# Audit Trail
# =============================================================================


class AuditTrail:
    """
    Append-only list of audit entries.

    With a persist_path, entries are also appended to a JSON Lines file.
    """

    def __init__(self, persist_path: Optional[str] = None):
        self.persist_path = Path(persist_path) if persist_path else None
        self._entries: list[AuditEntry] = []

        if self.persist_path and self.persist_path.exists():
            self._load_from_file()

    def _load_from_file(self) -> None:
        """Load earlier entries from the JSON Lines file."""
        try:
            lines = self.persist_path.read_text(encoding="utf-8").splitlines()
        except OSError as e:
            logger.error("Could not read audit log %s: %s", self.persist_path, e)
            return

        for number, line in enumerate(lines, start=1):
            if not line.strip():
                continue
            try:
                self._entries.append(AuditEntry.from_dict(json.loads(line)))
            except (json.JSONDecodeError, KeyError, TypeError, ValueError) as e:
                logger.warning("Skipping audit line %d in %s: %s", number, self.persist_path, e)

    def record(
        self,
        action: str,
        record_id: str,
        client_id: str,
        sections: tuple[str, ...],
        completion_percentage: int,
        recorded_at: datetime,
        status: Optional[str] = None,
    ) -> AuditEntry:
        """
        Append an entry.

        Raises:
            ValueError: If action is not a known audit action
        """
        if action not in AUDIT_ACTIONS:
            raise ValueError(f"Unknown audit action: {action}")

        entry = AuditEntry(
            entry_id=uuid.uuid4().hex,
            action=action,
            record_id=record_id,
            client_id=client_id,
            sections=tuple(sections),
            completion_percentage=completion_percentage,
            recorded_at=recorded_at,
            status=status,
        )
        self._entries.append(entry)
        self._append_to_file(entry)
        return entry

    def _append_to_file(self, entry: AuditEntry) -> None:
        if not self.persist_path:
            return
        try:
            self.persist_path.parent.mkdir(parents=True, exist_ok=True)
            with self.persist_path.open("a", encoding="utf-8") as fh:
                fh.write(json.dumps(entry.to_dict()) + "\n")
        except OSError as e:
            # The client write already committed; keep the in-memory entry
            logger.error("Could not append audit entry %s: %s", entry.entry_id, e)

    @property
    def entries(self) -> list[AuditEntry]:
        return list(self._entries)

    def for_record(self, record_id: str) -> list[AuditEntry]:
        """Entries for one client, oldest first."""
        return [e for e in self._entries if e.record_id == record_id]
