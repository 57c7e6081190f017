"""
Client Intake Routes - Web API for Multi-Section Client Records

JSON endpoints for creating clients, writing and reading individual
sections, bulk updates and completion progress. Authentication is applied
upstream of these handlers.

Every success response is {"success": true, "data": ...}; failures are
rendered by the IntakeError handlers registered in web.app.
"""

from __future__ import annotations

from typing import Any, Optional

from fastapi import APIRouter, Body, Depends, Query
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from core.intake import (
    AuditTrail,
    ClientStatus,
    IntakeCoordinator,
    InvalidRequest,
    get_client_repository,
)
from utils.config import Config


# =============================================================================
# Router Setup
# =============================================================================

router = APIRouter(prefix="/clients", tags=["clients"])


# =============================================================================
# Coordinator Dependency
# =============================================================================

_coordinator_instance: Optional[IntakeCoordinator] = None


def get_intake_coordinator() -> IntakeCoordinator:
    """
    Get the intake coordinator singleton.

    Storage and audit paths come from Config on first use. Tests override
    this dependency with a coordinator over a temporary store.
    """
    global _coordinator_instance
    if _coordinator_instance is None:
        config = Config.load()
        _coordinator_instance = IntakeCoordinator(
            gateway=get_client_repository(config.store_path),
            audit=AuditTrail(config.audit_path),
        )
    return _coordinator_instance


def reset_intake_coordinator() -> None:
    """Drop the singleton (for tests)."""
    global _coordinator_instance
    _coordinator_instance = None


# =============================================================================
# Request Bodies
# =============================================================================


class SectionUpdateBody(BaseModel):
    """Body of a single-section write. Data is validated by the registry."""

    section: Optional[str] = None
    data: Any = None


class BulkUpdateBody(BaseModel):
    sections: Any = None


def _ok(data: dict, status_code: int = 200) -> JSONResponse:
    return JSONResponse({"success": True, "data": data}, status_code=status_code)


# =============================================================================
# Routes
# =============================================================================


@router.post("/multistage")
async def create_client(
    payload: dict[str, Any] = Body(...),
    require_contact: bool = Query(False, alias="requireContact"),
    coordinator: IntakeCoordinator = Depends(get_intake_coordinator),
):
    """Create a client from a full or partial multi-section payload."""
    result = coordinator.create_client(payload, require_contact=require_contact)
    return _ok(result.to_dict(), status_code=201)


@router.get("")
async def list_clients(
    status: Optional[ClientStatus] = Query(None),
    coordinator: IntakeCoordinator = Depends(get_intake_coordinator),
):
    """List client summaries, most recently updated first."""
    summaries = coordinator.list_clients(status=status)
    return _ok(
        {
            "clients": [s.to_dict() for s in summaries],
            "total": len(summaries),
        }
    )


@router.put("/{record_id}/section/{section}")
async def update_section(
    record_id: str,
    section: str,
    body: SectionUpdateBody = Body(...),
    coordinator: IntakeCoordinator = Depends(get_intake_coordinator),
):
    """Replace one section of a client."""
    if body.section is not None and body.section != section:
        raise InvalidRequest(
            f"Section in body ({body.section}) does not match path ({section})"
        )
    result = coordinator.update_section(record_id, section, body.data)
    return _ok(result.to_dict())


@router.get("/{record_id}/section/{section}")
async def get_section(
    record_id: str,
    section: str,
    coordinator: IntakeCoordinator = Depends(get_intake_coordinator),
):
    """Read one section's stored data."""
    result = coordinator.get_section(record_id, section)
    return _ok(result.to_dict())


@router.get("/{record_id}/progress")
async def get_progress(
    record_id: str,
    coordinator: IntakeCoordinator = Depends(get_intake_coordinator),
):
    """Completion report for a client."""
    result = coordinator.get_progress(record_id)
    return _ok(result.to_dict())


@router.put("/{record_id}/bulk-update")
async def bulk_update(
    record_id: str,
    body: BulkUpdateBody = Body(...),
    coordinator: IntakeCoordinator = Depends(get_intake_coordinator),
):
    """Replace several sections atomically."""
    result = coordinator.bulk_update(record_id, body.sections)
    return _ok(result.to_dict())
