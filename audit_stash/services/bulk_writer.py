"""
Bulk writer: hands batches of documents to the destination store.

The writer does not decide batch sizes. The import service
fills a batch up to its bulk size and calls write() once per
batch, plus once more for whatever is left at the end.
"""

import logging
from typing import Protocol, Sequence

from audit_stash.exceptions import WriteError
from audit_stash.schemas.records import Document, WriteResult

logger = logging.getLogger(__name__)


class DocumentStore(Protocol):
    """Anything that can persist a batch of documents in one call."""

    def add_documents(self, documents: Sequence[Document]) -> None:
        ...


class BulkWriter:

    def __init__(self, store: DocumentStore):
        self.store = store

    def write(self, documents: Sequence[Document]) -> WriteResult:
        """
        Persist one batch.

        An empty batch is a no-op. Otherwise the whole batch goes
        to the store in a single call; if the store fails, the
        batch as a whole is reported as failed.
        """
        if not documents:
            logger.info("No more documents to index")
            return WriteResult(0)

        batch = list(documents)
        logger.info("Indexing %d documents", len(batch))
        try:
            self.store.add_documents(batch)
        except WriteError:
            raise
        except Exception as e:
            raise WriteError(len(batch), str(e)) from e

        return WriteResult(len(batch))
