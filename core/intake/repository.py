"""
Client Repository - Persistence Gateway for Client Aggregates

Opaque document store keyed by record id. The bundled implementation keeps
records in memory with optional JSON file persistence; production should
back ClientGateway with a database.

Writes are versioned: a save carrying a stale expected version is rejected
rather than silently overwriting a concurrent change.
"""

from __future__ import annotations

import copy
import json
import logging
import threading
import uuid
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Final, Optional

from core.intake.errors import ConcurrentModification, PersistenceError
from core.intake.schema import ClientRecord, ClientStatus


logger = logging.getLogger(__name__)

CLIENT_ID_PREFIX: Final = "CLI"
CLIENT_ID_DIGITS: Final = 6


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def format_client_id(number: int) -> str:
    """Business key for a sequence number, e.g. 1 -> CLI000001."""
    return f"{CLIENT_ID_PREFIX}{number:0{CLIENT_ID_DIGITS}d}"


def new_record_id() -> str:
    return uuid.uuid4().hex


# =============================================================================
# Gateway Interface
# =============================================================================


class ClientGateway(ABC):
    """Storage boundary for client aggregates."""

    @abstractmethod
    def load(self, record_id: str) -> Optional[ClientRecord]:
        """Return a private copy of the record, or None if absent."""

    @abstractmethod
    def save(
        self,
        record: ClientRecord,
        expected_version: Optional[int] = None,
    ) -> ClientRecord:
        """
        Persist a record and return the stored copy.

        Raises:
            ConcurrentModification: If expected_version is stale
            PersistenceError: If storage is unavailable
        """

    @abstractmethod
    def next_client_id(self) -> str:
        """Allocate the next business key. Never reused."""

    @abstractmethod
    def list_all(self) -> list[ClientRecord]:
        """Copies of all stored records."""

    def list_by_status(self, status: ClientStatus) -> list[ClientRecord]:
        """Copies of the stored records with a given status."""
        return [r for r in self.list_all() if r.status == status]


# =============================================================================
# Repository
# =============================================================================


class ClientRepository(ClientGateway):
    """
    In-memory client store with optional JSON file persistence.

    Every successful save stamps createdAt/updatedAt from the injected
    clock and increments the record version.
    """

    def __init__(
        self,
        persist_path: Optional[str] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        """
        Initialise repository.

        Args:
            persist_path: Optional path to persist data to JSON file
            clock: Timestamp source, defaults to current UTC time
        """
        self._records: dict[str, ClientRecord] = {}
        self._sequence = 0
        self._persist_path = Path(persist_path) if persist_path else None
        self._clock = clock or utc_now
        self._lock = threading.Lock()

        if self._persist_path and self._persist_path.exists():
            self._load_from_file()

    def _save_to_file(self) -> None:
        """Persist data to file."""
        if not self._persist_path:
            return

        data = {
            "sequence": self._sequence,
            "clients": {rid: rec.to_dict() for rid, rec in self._records.items()},
            "saved_at": self._clock().isoformat(),
        }

        try:
            self._persist_path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path = self._persist_path.with_suffix(self._persist_path.suffix + ".tmp")
            tmp_path.write_text(json.dumps(data, indent=2))
            tmp_path.replace(self._persist_path)
        except OSError as e:
            logger.error("Could not write client store %s: %s", self._persist_path, e)
            raise PersistenceError() from e

    def _load_from_file(self) -> None:
        """Load data from file."""
        try:
            data = json.loads(self._persist_path.read_text())
            for rid, rec_data in data.get("clients", {}).items():
                self._records[rid] = ClientRecord.from_dict(rec_data)
            self._sequence = int(data.get("sequence", 0))
        except (json.JSONDecodeError, KeyError, ValueError, OSError) as e:
            logger.error("Could not load client store %s: %s", self._persist_path, e)
            raise PersistenceError() from e

        # Keep the sequence ahead of every stored business key
        for record in self._records.values():
            suffix = record.client_id[len(CLIENT_ID_PREFIX):]
            if suffix.isdigit():
                self._sequence = max(self._sequence, int(suffix))

    # =========================================================================
    # Gateway Operations
    # =========================================================================

    def load(self, record_id: str) -> Optional[ClientRecord]:
        with self._lock:
            record = self._records.get(record_id)
            return copy.deepcopy(record) if record else None

    def save(
        self,
        record: ClientRecord,
        expected_version: Optional[int] = None,
    ) -> ClientRecord:
        with self._lock:
            existing = self._records.get(record.id)
            current_version = existing.version if existing else 0

            if expected_version is not None and expected_version != current_version:
                raise ConcurrentModification(record.id, expected_version, current_version)

            now = self._clock()
            stored = copy.deepcopy(record)
            stored.created_at = existing.created_at if existing else now
            stored.updated_at = now
            stored.version = current_version + 1

            self._records[record.id] = stored
            try:
                self._save_to_file()
            except PersistenceError:
                # Roll back so memory matches what is on disk
                if existing is None:
                    del self._records[record.id]
                else:
                    self._records[record.id] = existing
                raise

            return copy.deepcopy(stored)

    def next_client_id(self) -> str:
        with self._lock:
            self._sequence += 1
            # Allocations must survive a restart
            self._save_to_file()
            return format_client_id(self._sequence)

    def list_all(self) -> list[ClientRecord]:
        with self._lock:
            return [copy.deepcopy(r) for r in self._records.values()]

    # =========================================================================
    # Query Operations
    # =========================================================================

    def list_by_status(self, status: ClientStatus) -> list[ClientRecord]:
        with self._lock:
            return [copy.deepcopy(r) for r in self._records.values() if r.status == status]


# =============================================================================
# Singleton Instance
# =============================================================================

_repository_instance: Optional[ClientRepository] = None


def get_client_repository(persist_path: Optional[str] = None) -> ClientRepository:
    """
    Get the client repository singleton.

    Args:
        persist_path: Optional path for persistence (only used on first call)

    Returns:
        ClientRepository instance
    """
    global _repository_instance
    if _repository_instance is None:
        _repository_instance = ClientRepository(persist_path)
    return _repository_instance


def reset_client_repository() -> None:
    """Drop the singleton (for tests)."""
    global _repository_instance
    _repository_instance = None
