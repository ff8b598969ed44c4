"""
Values that flow through the import pipeline.

Rows come out of the database as DetailRow, get grouped and
folded into a LogicalAuditRecord, and leave as a Document.
None of these outlive a single pass of the pipeline.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any


@dataclass(frozen=True)
class AuditEventRecord:
    """The parent audit fields, repeated on every joined row."""

    id: Any
    created: datetime | str
    model: str
    event: str
    entity_id: Any
    source_ip: str | None = None
    source_url: str | None = None
    source_id: Any = None


@dataclass(frozen=True)
class DetailRow:
    """One changed property of one audit event."""

    audit: AuditEventRecord
    property_name: str
    old_value: Any = None
    new_value: Any = None

    @property
    def audit_event_id(self) -> Any:
        return self.audit.id


@dataclass
class LogicalAuditRecord:
    """An audit event with its deltas folded into two maps."""

    audit: AuditEventRecord
    original: dict[str, Any] = field(default_factory=dict)
    changed: dict[str, Any] = field(default_factory=dict)


@dataclass
class Document:
    """A search document addressed to a specific index and type."""

    id: Any
    index: str
    type: str
    body: dict[str, Any]


@dataclass(frozen=True)
class WriteResult:
    """Outcome of a single bulk write."""

    documents: int = 0


@dataclass
class ImportSummary:
    """Counters for one import run."""

    groups: int = 0
    documents: int = 0
    batches: int = 0

    def add(self, result: WriteResult) -> None:
        if result.documents:
            self.documents += result.documents
            self.batches += 1
