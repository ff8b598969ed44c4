"""
Row grouper: turns a stream of delta rows into per-audit groups.

The import query returns one row per changed property, with
all rows of one audit next to each other. The grouper can only
tell a group is finished when the first row of the next one
arrives, so the last group is never emitted by group(). The
caller takes it with flush() once the stream is exhausted.
"""

from typing import Iterable, Iterator

from audit_stash.schemas.records import DetailRow


class RowGrouper:
    """
    Streaming grouper holding at most one open group.

    Rows must be ordered so that rows sharing an audit id are
    contiguous. Interleaved ids produce split groups.
    """

    def __init__(self):
        self._buffer: list[DetailRow] = []
        self._current_id = None

    @property
    def pending(self) -> list[DetailRow]:
        """Rows of the group that is still open."""
        return list(self._buffer)

    def push(self, row: DetailRow) -> list[DetailRow] | None:
        """
        Add a row. Returns the previous group if this row
        starts a new one, otherwise None.
        """
        completed = None
        if self._current_id is not None and self._current_id != row.audit_event_id:
            completed = self._buffer
            self._buffer = []

        self._current_id = row.audit_event_id
        self._buffer.append(row)
        return completed

    def flush(self) -> list[DetailRow]:
        """Return the open group (possibly empty) and reset."""
        rest = self._buffer
        self._buffer = []
        self._current_id = None
        return rest

    def group(self, rows: Iterable[DetailRow]) -> Iterator[list[DetailRow]]:
        """Lazily yield every completed group in input order."""
        for row in rows:
            completed = self.push(row)
            if completed is not None:
                yield completed
