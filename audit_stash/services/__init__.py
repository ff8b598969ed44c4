"""Business logic services."""

from audit_stash.services.audit_log_service import AuditLogService
from audit_stash.services.bulk_writer import BulkWriter
from audit_stash.services.change_set_extractor import ChangeSetExtractor
from audit_stash.services.document_formatter import DocumentFormatter
from audit_stash.services.elastic_import_service import ElasticImportService
from audit_stash.services.elasticsearch_store import ElasticsearchStore
from audit_stash.services.row_grouper import RowGrouper

__all__ = [
    "AuditLogService",
    "BulkWriter",
    "ChangeSetExtractor",
    "DocumentFormatter",
    "ElasticImportService",
    "ElasticsearchStore",
    "RowGrouper",
]
