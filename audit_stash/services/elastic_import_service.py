"""
Elasticsearch import service: the legacy audit backfill.

Copies audits from the relational audits / audit_deltas tables
into Elasticsearch in a single forward pass:

1. Stream joined audit + delta rows, ordered so each audit's
   rows are contiguous
2. Group rows into one batch per audit (RowGrouper)
3. Fold each group into original/changed maps (ChangeSetExtractor)
4. Turn each audit into a document (DocumentFormatter)
5. Write documents in batches of bulk_size (BulkWriter)

Only the open group and the pending batch are held in memory.
When the rows run out, both are flushed so the last audit and
the last partial batch are not lost.

There is no checkpointing. A failed run is re-run from the
start, or from a later --from date.
"""

import logging
from typing import Any, Iterable, Iterator

from sqlalchemy import select
from sqlalchemy.orm import Session

from audit_stash.models.audit import Audit, AuditDelta
from audit_stash.schemas.import_options import ImportOptions
from audit_stash.schemas.records import (
    AuditEventRecord,
    DetailRow,
    Document,
    ImportSummary,
)
from audit_stash.services.bulk_writer import BulkWriter
from audit_stash.services.change_set_extractor import ChangeSetExtractor
from audit_stash.services.document_formatter import DocumentFormatter
from audit_stash.services.row_grouper import RowGrouper

logger = logging.getLogger(__name__)

DEFAULT_BULK_SIZE = 50


def build_import_query(options: ImportOptions):
    """
    Select one row per audit delta within the options' range.

    Ordering by created, then audit id, keeps each audit's rows
    together; the delta id keeps them in the order they were
    logged.
    """
    stmt = (
        select(
            Audit.id,
            Audit.created,
            Audit.model,
            Audit.event,
            Audit.entity_id,
            Audit.source_ip,
            Audit.source_url,
            Audit.source_id,
            AuditDelta.property_name,
            AuditDelta.old_value,
            AuditDelta.new_value,
        )
        .join(AuditDelta, AuditDelta.audit_id == Audit.id)
        .where(Audit.created.between(options.date_from, options.date_until))
    )

    if options.exclude_models:
        stmt = stmt.where(Audit.model.not_in(options.exclude_models))
    if options.models:
        stmt = stmt.where(Audit.model.in_(options.models))

    return stmt.order_by(Audit.created, Audit.id, AuditDelta.id)


def row_to_detail(row) -> DetailRow:
    """Map a joined result row to a DetailRow."""
    return DetailRow(
        audit=AuditEventRecord(
            id=row.id,
            created=row.created,
            model=row.model,
            event=row.event,
            entity_id=row.entity_id,
            source_ip=row.source_ip,
            source_url=row.source_url,
            source_id=row.source_id,
        ),
        property_name=row.property_name,
        old_value=row.old_value,
        new_value=row.new_value,
    )


class ElasticImportService:
    """
    Drives one import pass.

    The destination is injected through the writer and the
    index template, so nothing here reads global connection
    configuration.
    """

    def __init__(
        self,
        db: Session,
        writer: BulkWriter,
        index_template: str,
        extractor: ChangeSetExtractor | None = None,
        bulk_size: int = DEFAULT_BULK_SIZE,
        yield_per: int = 500,
    ):
        if bulk_size < 1:
            raise ValueError("bulk_size must be at least 1")
        self.db = db
        self.writer = writer
        self.index_template = index_template
        self.extractor = extractor or ChangeSetExtractor()
        self.bulk_size = bulk_size
        self.yield_per = yield_per

    def iter_rows(self, options: ImportOptions) -> Iterator[DetailRow]:
        """Stream rows without loading the whole result set."""
        stmt = build_import_query(options).execution_options(
            yield_per=self.yield_per
        )
        for row in self.db.execute(stmt):
            yield row_to_detail(row)

    def run(self, options: ImportOptions) -> ImportSummary:
        """Import every audit matching the options."""
        logger.info(
            "Importing audits created between %s and %s",
            options.date_from, options.date_until,
        )
        return self.import_rows(
            self.iter_rows(options),
            formatter=DocumentFormatter(options.type_map),
            extra_meta=options.extra_meta,
        )

    def import_rows(
        self,
        rows: Iterable[DetailRow],
        formatter: DocumentFormatter | None = None,
        extra_meta: dict[str, Any] | None = None,
    ) -> ImportSummary:
        """
        Group, format and write an ordered stream of rows.

        Every completed group is written as soon as its batch
        fills up. The trailing group and partial batch are
        flushed once the stream ends.
        """
        formatter = formatter or DocumentFormatter()
        extra_meta = extra_meta or {}
        summary = ImportSummary()
        grouper = RowGrouper()
        batch: list[Document] = []

        def to_document(group) -> Document:
            summary.groups += 1
            record = self.extractor.extract(group)
            return formatter.format(record, self.index_template, extra_meta)

        for group in grouper.group(rows):
            batch.append(to_document(group))
            if len(batch) >= self.bulk_size:
                summary.add(self.writer.write(batch))
                batch = []

        # The grouper never emits its last group on its own
        rest = grouper.flush()
        if rest:
            batch.append(to_document(rest))

        summary.add(self.writer.write(batch))

        logger.info(
            "Imported %d audits as %d documents in %d batches",
            summary.groups, summary.documents, summary.batches,
        )
        return summary
