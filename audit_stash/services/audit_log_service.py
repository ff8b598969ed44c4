"""
Audit log service: records live audits in the legacy tables.

Each logged entry becomes one Audit row plus one AuditDelta row
per property that appears in its original or changed map. Before
anything is written, registered listeners get a chance to enrich
the entries (RequestMetadata adds ip, url and user).

The caller controls the commit.
"""

import json
from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import Session

from audit_stash.meta.request_metadata import BEFORE_LOG
from audit_stash.models.audit import Audit, AuditDelta
from audit_stash.schemas.audit import AuditLogEntry
from audit_stash.schemas.records import (
    AuditEventRecord,
    DetailRow,
    LogicalAuditRecord,
)
from audit_stash.services.change_set_extractor import ChangeSetExtractor


def encode_value(value: Any) -> str | None:
    """
    Encode a value for an audit_deltas column.

    Lists are stored comma separated, which is how the legacy
    logger stored many-to-many references.
    """
    if value is None or isinstance(value, str):
        return value
    if isinstance(value, (list, tuple)):
        return ",".join(str(item) for item in value)
    if isinstance(value, (dict, bool)):
        return json.dumps(value)
    return str(value)


def audit_record(audit: Audit) -> AuditEventRecord:
    return AuditEventRecord(
        id=audit.id,
        created=audit.created,
        model=audit.model,
        event=audit.event,
        entity_id=audit.entity_id,
        source_ip=audit.source_ip,
        source_url=audit.source_url,
        source_id=audit.source_id,
    )


class AuditLogService:

    def __init__(self, db: Session, listeners: list | None = None):
        self.db = db
        self.listeners = list(listeners or [])
        self.extractor = ChangeSetExtractor()

    def add_listener(self, listener) -> None:
        self.listeners.append(listener)

    def _dispatch(self, event: str, entries: list[AuditLogEntry]) -> None:
        for listener in self.listeners:
            method = listener.implemented_events().get(event)
            if method:
                getattr(listener, method)(entries)

    def log(self, entries: list[AuditLogEntry]) -> list[Audit]:
        """
        Persist audit log entries after enriching them.

        The entries are modified in place by the listeners, so the
        caller sees the metadata that was stored.
        """
        self._dispatch(BEFORE_LOG, entries)

        audits = []
        for entry in entries:
            properties = list(entry.changed)
            properties += [k for k in entry.original if k not in entry.changed]

            audit = Audit(
                event=entry.event.value,
                model=entry.model,
                entity_id=entry.entity_id,
                json_object=json.dumps(
                    {**entry.original, **entry.changed}, default=str
                ),
                description=entry.description,
                source_id=encode_value(entry.meta.get("user")),
                source_ip=entry.meta.get("ip"),
                source_url=entry.meta.get("url"),
                delta_count=len(properties),
            )
            audit.deltas = [
                AuditDelta(
                    property_name=name,
                    old_value=encode_value(entry.original.get(name)),
                    new_value=encode_value(entry.changed.get(name)),
                )
                for name in properties
            ]
            self.db.add(audit)
            audits.append(audit)

        self.db.flush()
        return audits

    def get_logical_record(self, audit_id: str) -> LogicalAuditRecord:
        """
        Read an audit back with its deltas folded together.

        Raises ValueError if the audit does not exist.
        """
        audit = self.db.execute(
            select(Audit).where(Audit.id == audit_id)
        ).scalar_one_or_none()

        if not audit:
            raise ValueError(f"Audit {audit_id} not found")

        record = audit_record(audit)
        if not audit.deltas:
            return LogicalAuditRecord(audit=record)

        return self.extractor.extract([
            DetailRow(
                audit=record,
                property_name=delta.property_name,
                old_value=delta.old_value,
                new_value=delta.new_value,
            )
            for delta in audit.deltas
        ])
