"""
Tests for the AuditLogService.

Tests cover:
- Entries are written as one audit plus one delta per property
- Listeners run before anything is written
- Logged audits read back as logical records
- Logged audits are picked up by the Elasticsearch import
"""


import pytest

from audit_stash.models.audit import Audit
from audit_stash.models.enums import AuditEventType
from audit_stash.schemas.audit import AuditLogEntry
from audit_stash.schemas.import_options import parse_import_options
from audit_stash.services.audit_log_service import AuditLogService, encode_value
from audit_stash.services.bulk_writer import BulkWriter
from audit_stash.services.elastic_import_service import ElasticImportService


class StaticMetadata:
    """Listener that adds fixed metadata."""

    def __init__(self, meta):
        self.meta = meta
        self.calls = 0

    def implemented_events(self):
        return {"audit.before_log": "before_log"}

    def before_log(self, logs):
        self.calls += 1
        for log in logs:
            log.meta = {**self.meta, **log.meta}


def make_entry(**overrides):
    fields = dict(
        event=AuditEventType.EDIT,
        model="Article",
        entity_id="7",
        original={"title": "Old", "Tag": [1, 2]},
        changed={"title": "New", "Tag": [1, 2, 3]},
    )
    fields.update(overrides)
    return AuditLogEntry(**fields)


class TestLog:

    def test_writes_audit_and_deltas(self, db_session):
        service = AuditLogService(db_session)

        [audit] = service.log([make_entry()])
        db_session.commit()

        stored = db_session.get(Audit, audit.id)
        assert stored.event == "EDIT"
        assert stored.model == "Article"
        assert stored.delta_count == 2
        assert [
            (d.property_name, d.old_value, d.new_value) for d in stored.deltas
        ] == [
            ("title", "Old", "New"),
            ("Tag", "1,2", "1,2,3"),
        ]

    def test_property_only_in_original_gets_a_delta(self, db_session):
        service = AuditLogService(db_session)

        [audit] = service.log([make_entry(
            event=AuditEventType.DELETE,
            original={"title": "Gone"},
            changed={},
        )])

        assert [(d.property_name, d.new_value) for d in audit.deltas] == [
            ("title", None),
        ]

    def test_listener_metadata_is_stored(self, db_session):
        listener = StaticMetadata({"ip": "10.0.0.1", "url": "/articles", "user": 42})
        service = AuditLogService(db_session, listeners=[listener])

        [audit] = service.log([make_entry()])

        assert listener.calls == 1
        assert audit.source_ip == "10.0.0.1"
        assert audit.source_url == "/articles"
        assert audit.source_id == "42"

    def test_existing_meta_wins_over_listener(self, db_session):
        listener = StaticMetadata({"ip": "10.0.0.1", "user": 42})
        service = AuditLogService(db_session)
        service.add_listener(listener)
        entry = make_entry(meta={"user": "system"})

        service.log([entry])

        assert entry.meta == {"ip": "10.0.0.1", "user": "system"}

    def test_listeners_without_hook_are_skipped(self, db_session):
        class Silent:
            def implemented_events(self):
                return {}

        [audit] = AuditLogService(db_session, listeners=[Silent()]).log([make_entry()])

        assert audit.source_ip is None


class TestGetLogicalRecord:

    def test_reads_back_original_and_changed(self, db_session):
        service = AuditLogService(db_session)
        [audit] = service.log([make_entry()])
        db_session.commit()

        record = service.get_logical_record(audit.id)

        assert record.audit.id == audit.id
        assert record.original == {"title": "Old", "Tag": [1, 2]}
        assert record.changed == {"title": "New", "Tag": [1, 2, 3]}

    def test_audit_without_deltas(self, db_session):
        service = AuditLogService(db_session)
        [audit] = service.log([make_entry(original={}, changed={})])

        record = service.get_logical_record(audit.id)

        assert record.original == {}
        assert record.changed == {}

    def test_unknown_audit_raises(self, db_session):
        with pytest.raises(ValueError, match="not found"):
            AuditLogService(db_session).get_logical_record("missing")


class TestLoggedAuditsAreImportable:

    def test_logged_audit_becomes_document(self, db_session, store):
        listener = StaticMetadata({"ip": "10.0.0.1", "url": "/articles", "user": 42})
        [audit] = AuditLogService(db_session, listeners=[listener]).log([make_entry()])
        db_session.commit()

        service = ElasticImportService(
            db_session, BulkWriter(store), index_template="audits%s"
        )
        service.run(parse_import_options(today=audit.created.date()))

        [document] = store.documents
        assert document.id == audit.id
        assert document.body["changed"] == {"title": "New", "Tag": [1, 2, 3]}
        assert document.body["meta"] == {
            "ip": "10.0.0.1",
            "url": "/articles",
            "user": "42",
        }


@pytest.mark.parametrize("value, expected", [
    (None, None),
    ("text", "text"),
    ([1, 2, 3], "1,2,3"),
    (12, "12"),
    (True, "true"),
    ({"a": 1}, '{"a": 1}'),
])
def test_encode_value(value, expected):
    assert encode_value(value) == expected
