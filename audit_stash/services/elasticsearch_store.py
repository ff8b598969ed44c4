"""
Elasticsearch destination for audit documents.

Batches are sent to the _bulk endpoint as newline delimited
JSON: an action line naming index and id, followed by the
document source. A document that already exists under the
same id is overwritten.
"""

import json
import logging
from typing import Sequence

import httpx

from audit_stash.config import Settings
from audit_stash.schemas.records import Document

logger = logging.getLogger(__name__)


class BulkIndexError(Exception):
    """Elasticsearch accepted the request but failed some items."""

    def __init__(self, failures: list[dict]):
        self.failures = failures
        first = failures[0] if failures else {}
        super().__init__(
            f"{len(failures)} documents failed to index "
            f"(first error: {first.get('error')})"
        )


class ElasticsearchStore:
    """
    Writes documents through the Elasticsearch bulk API.

    mapping_types controls whether the document type is sent
    as _type. Clusters from 7.x on reject it, so it is off
    unless configured.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 30,
        mapping_types: bool = False,
        transport: httpx.BaseTransport | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.mapping_types = mapping_types
        self.transport = transport

    @classmethod
    def from_settings(cls, settings: Settings) -> "ElasticsearchStore":
        return cls(
            base_url=settings.ELASTIC_URL,
            timeout=settings.ELASTIC_TIMEOUT,
            mapping_types=settings.ELASTIC_MAPPING_TYPES,
        )

    def bulk_body(self, documents: Sequence[Document]) -> str:
        """Render documents as a _bulk NDJSON payload."""
        lines = []
        for document in documents:
            action = {"_index": document.index, "_id": document.id}
            if self.mapping_types:
                action["_type"] = document.type
            lines.append(json.dumps({"index": action}))
            lines.append(json.dumps(document.body, default=str))
        # The bulk API requires a trailing newline
        return "\n".join(lines) + "\n"

    def add_documents(self, documents: Sequence[Document]) -> None:
        """
        Index a batch of documents in a single request.

        Raises httpx.HTTPError on transport or HTTP errors and
        BulkIndexError when any item in the batch failed.
        """
        with httpx.Client(
            timeout=self.timeout, transport=self.transport
        ) as client:
            response = client.post(
                f"{self.base_url}/_bulk",
                content=self.bulk_body(documents),
                headers={"Content-Type": "application/x-ndjson"},
            )
            response.raise_for_status()
            result = response.json()

        if result.get("errors"):
            failures = [
                item["index"]
                for item in result.get("items", [])
                if "error" in item.get("index", {})
            ]
            raise BulkIndexError(failures)

        logger.debug(
            "Bulk request indexed %d documents in %sms",
            len(documents), result.get("took"),
        )
