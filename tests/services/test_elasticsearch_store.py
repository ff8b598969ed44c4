"""
Tests for the ElasticsearchStore.

Requests are captured with httpx.MockTransport, so no cluster
is needed.
"""

import json

import httpx
import pytest

from audit_stash.schemas.records import Document
from audit_stash.services.elasticsearch_store import (
    BulkIndexError,
    ElasticsearchStore,
)


DOCUMENTS = [
    Document(
        id="a1",
        index="audits-2016.01.31",
        type="articles",
        body={"type": "update", "changed": {"title": "New"}},
    ),
    Document(
        id="a2",
        index="audits-2016.02.01",
        type="tags",
        body={"type": "create", "changed": {"Tag": [1, 2]}},
    ),
]


def make_store(handler, **kwargs):
    return ElasticsearchStore(
        "http://elastic:9200/",
        transport=httpx.MockTransport(handler),
        **kwargs,
    )


class TestAddDocuments:

    def test_posts_single_bulk_request(self):
        requests = []

        def handler(request):
            requests.append(request)
            return httpx.Response(200, json={"took": 3, "errors": False, "items": []})

        make_store(handler).add_documents(DOCUMENTS)

        assert len(requests) == 1
        assert requests[0].method == "POST"
        assert str(requests[0].url) == "http://elastic:9200/_bulk"
        assert requests[0].headers["content-type"] == "application/x-ndjson"

    def test_bulk_body_pairs_action_and_source(self):
        bodies = []

        def handler(request):
            bodies.append(request.content.decode())
            return httpx.Response(200, json={"errors": False, "items": []})

        make_store(handler).add_documents(DOCUMENTS)

        body = bodies[0]
        assert body.endswith("\n")
        lines = [json.loads(line) for line in body.splitlines()]
        assert lines == [
            {"index": {"_index": "audits-2016.01.31", "_id": "a1"}},
            {"type": "update", "changed": {"title": "New"}},
            {"index": {"_index": "audits-2016.02.01", "_id": "a2"}},
            {"type": "create", "changed": {"Tag": [1, 2]}},
        ]

    def test_mapping_types_adds_type_to_action(self):
        store = ElasticsearchStore("http://elastic:9200", mapping_types=True)

        first_action = json.loads(store.bulk_body(DOCUMENTS).splitlines()[0])

        assert first_action["index"]["_type"] == "articles"

    def test_http_error_raises(self):
        def handler(request):
            return httpx.Response(503, json={"error": "unavailable"})

        with pytest.raises(httpx.HTTPStatusError):
            make_store(handler).add_documents(DOCUMENTS)

    def test_item_errors_raise(self):
        def handler(request):
            return httpx.Response(200, json={
                "errors": True,
                "items": [
                    {"index": {"_id": "a1", "status": 201}},
                    {"index": {
                        "_id": "a2",
                        "status": 400,
                        "error": {"type": "mapper_parsing_exception"},
                    }},
                ],
            })

        with pytest.raises(BulkIndexError, match="1 documents failed") as excinfo:
            make_store(handler).add_documents(DOCUMENTS)

        assert excinfo.value.failures[0]["_id"] == "a2"
