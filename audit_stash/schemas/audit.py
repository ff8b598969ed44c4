"""
Pydantic schemas for the audit log API.

These define the HTTP contract for logging an audit and
reading one back. They are separate from the database
models because a logged entry carries whole original and
changed maps while the tables store one row per property.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from audit_stash.models.enums import AuditEventType


# --- Request Schemas ---

class AuditLogEntry(BaseModel):
    """
    A change about to be written to the audit log.

    meta is filled in by listeners such as RequestMetadata
    before the entry is persisted.
    """
    event: AuditEventType
    model: str = Field(min_length=1, max_length=255)
    entity_id: str = Field(min_length=1, max_length=36)
    original: dict[str, Any] = Field(default_factory=dict)
    changed: dict[str, Any] = Field(default_factory=dict)
    description: str | None = None
    meta: dict[str, Any] = Field(default_factory=dict)


# --- Response Schemas ---

class AuditLogResponse(BaseModel):
    """Response after logging an audit."""
    id: str
    entry: AuditLogEntry


class LogicalAuditResponse(BaseModel):
    """An audit read back with its deltas folded together."""
    id: str
    event: str
    model: str
    entity_id: str
    created: datetime
    source_ip: str | None
    source_url: str | None
    source_id: str | None
    original: dict[str, Any]
    changed: dict[str, Any]
