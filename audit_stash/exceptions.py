"""
Errors raised by the import pipeline.

Nothing in the pipeline recovers from these locally. They
propagate to whoever drives the import (the CLI, a test, a
caller embedding the service), which decides whether to
abort or carry on.
"""


class AuditStashError(Exception):
    """Base class for all audit stash errors."""


class ConfigError(AuditStashError):
    """Invalid import option: a bad date or a malformed key:value list."""


class FormatError(AuditStashError):
    """An audit row could not be turned into a document."""


class WriteError(AuditStashError):
    """The destination store rejected or failed a batch."""

    def __init__(self, batch_size: int, reason: str = ""):
        self.batch_size = batch_size
        message = f"Failed to write batch of {batch_size} documents"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)
