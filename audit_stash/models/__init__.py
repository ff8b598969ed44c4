"""
Database models package.

All models must be imported here so that they register
on Base.metadata before tables are created.
"""

from audit_stash.models.base import Base
from audit_stash.models.enums import AuditEventType
from audit_stash.models.audit import Audit, AuditDelta

__all__ = [
    "Base",
    "AuditEventType",
    "Audit",
    "AuditDelta",
]
