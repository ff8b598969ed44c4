"""
Document formatter: maps a logical audit record to a search document.

Documents go to a daily index (audits-2016.01.31 for the
template "audits%s") so old audits can be dropped or archived
a day at a time. The document type is the table name of the
audited model unless a type map says otherwise.
"""

from datetime import datetime
from typing import Any

from inflection import tableize

from audit_stash.exceptions import FormatError
from audit_stash.schemas.records import Document, LogicalAuditRecord

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"
INDEX_DATE_FORMAT = "-%Y.%m.%d"
INDEX_PLACEHOLDER = "%s"


def event_type(event: str) -> str:
    """EDIT is stored as "update", everything else lower-cased."""
    event = str(event)
    if event.upper() == "EDIT":
        return "update"
    return event.lower()


def parse_created(created: datetime | str) -> datetime:
    if isinstance(created, datetime):
        return created
    try:
        return datetime.strptime(str(created), TIMESTAMP_FORMAT)
    except ValueError as e:
        raise FormatError(
            f"Cannot parse audit timestamp '{created}', "
            f"expected {TIMESTAMP_FORMAT}"
        ) from e


def index_name(template: str, created: datetime) -> str:
    """Fill the template's %s with the -YYYY.MM.DD of created."""
    if INDEX_PLACEHOLDER not in template:
        return template
    return template.replace(
        INDEX_PLACEHOLDER, created.strftime(INDEX_DATE_FORMAT), 1
    )


class DocumentFormatter:
    """
    Formats LogicalAuditRecord objects as Documents.

    type_map overrides the derived document type per model
    name, e.g. {"ParentCategory": "categories"}.
    """

    def __init__(self, type_map: dict[str, str] | None = None):
        self.type_map = dict(type_map or {})

    def document_type(self, model: str) -> str:
        return self.type_map.get(model) or tableize(model)

    def format(
        self,
        record: LogicalAuditRecord,
        index_template: str,
        extra_meta: dict[str, Any] | None = None,
    ) -> Document:
        audit = record.audit
        created = parse_created(audit.created)

        # Derived request fields win over extra meta with the same key
        meta = dict(extra_meta or {})
        meta.update({
            "ip": audit.source_ip,
            "url": audit.source_url,
            "user": audit.source_id,
        })

        body = {
            "@timestamp": created.strftime(TIMESTAMP_FORMAT),
            "transaction": audit.id,
            "type": event_type(audit.event),
            "primary_key": audit.entity_id,
            "original": dict(record.original),
            "changed": dict(record.changed),
            "meta": meta,
        }

        return Document(
            id=audit.id,
            index=index_name(index_template, created),
            type=self.document_type(audit.model),
            body=body,
        )
