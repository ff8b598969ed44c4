"""
Audit log API endpoints.

Logging goes through AuditLogService with the current request's
RequestMetadata registered as a listener, so every audit written
over HTTP records the caller's ip, url and user.
"""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from audit_stash.meta.request_metadata import (
    RequestMetadata,
    get_request_metadata,
)
from audit_stash.models.base import get_db
from audit_stash.services.audit_log_service import AuditLogService
from audit_stash.schemas.audit import (
    AuditLogEntry,
    AuditLogResponse,
    LogicalAuditResponse,
)

router = APIRouter(prefix="/audits", tags=["Audits"])


@router.post("", response_model=AuditLogResponse, status_code=201)
def log_audit(
    entry: AuditLogEntry,
    db: Session = Depends(get_db),
    metadata: RequestMetadata = Depends(get_request_metadata),
):
    """Record a change, enriched with the request's metadata."""
    service = AuditLogService(db, listeners=[metadata])
    try:
        [audit] = service.log([entry])
        db.commit()
        return AuditLogResponse(id=audit.id, entry=entry)
    except ValueError as e:
        db.rollback()
        raise HTTPException(status_code=400, detail=str(e))


@router.get("/{audit_id}", response_model=LogicalAuditResponse)
def get_audit(
    audit_id: str,
    db: Session = Depends(get_db),
):
    """Return an audit with its original and changed values."""
    service = AuditLogService(db)
    try:
        record = service.get_logical_record(audit_id)
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))

    audit = record.audit
    return LogicalAuditResponse(
        id=audit.id,
        event=audit.event,
        model=audit.model,
        entity_id=audit.entity_id,
        created=audit.created,
        source_ip=audit.source_ip,
        source_url=audit.source_url,
        source_id=audit.source_id,
        original=record.original,
        changed=record.changed,
    )
