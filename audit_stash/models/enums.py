"""
Shared enumerations for audit models.
"""

import enum


class AuditEventType(str, enum.Enum):
    """Kind of change an audit records."""
    CREATE = "CREATE"
    EDIT = "EDIT"
    DELETE = "DELETE"
