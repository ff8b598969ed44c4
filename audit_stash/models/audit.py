"""
Legacy audit log models.

An audit is one change to one entity. The individual field
changes live in audit_deltas, one row per property, so a
single EDIT touching three columns is one Audit and three
AuditDelta rows. Both tables are append-only.
"""

import uuid
from datetime import datetime

from sqlalchemy import String, DateTime, Text, Integer, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship

from audit_stash.models.base import Base


def _new_id() -> str:
    return str(uuid.uuid4())


class Audit(Base):
    """
    Parent audit event.

    source_ip, source_url and source_id capture who made the
    change and from where. They are filled from the request
    metadata at the time the audit was logged.
    """

    __tablename__ = "audits"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=_new_id
    )
    event: Mapped[str] = mapped_column(String(255), nullable=False)
    model: Mapped[str] = mapped_column(
        String(255), nullable=False, index=True
    )
    entity_id: Mapped[str] = mapped_column(String(36), nullable=False)
    json_object: Mapped[str | None] = mapped_column(Text, nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    source_id: Mapped[str | None] = mapped_column(
        String(255), nullable=True
    )
    source_ip: Mapped[str | None] = mapped_column(
        String(255), nullable=True
    )
    source_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    delta_count: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0
    )
    created: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow, index=True
    )

    deltas: Mapped[list["AuditDelta"]] = relationship(
        back_populates="audit",
        order_by="AuditDelta.id",
    )

    def __repr__(self) -> str:
        return f"<Audit {self.event} {self.model}:{self.entity_id}>"


class AuditDelta(Base):
    """A single changed property within an audit."""

    __tablename__ = "audit_deltas"

    # Insertion order doubles as the delta sequence within an audit
    id: Mapped[int] = mapped_column(primary_key=True)
    audit_id: Mapped[str] = mapped_column(
        ForeignKey("audits.id"), nullable=False, index=True
    )
    property_name: Mapped[str] = mapped_column(
        String(255), nullable=False
    )
    old_value: Mapped[str | None] = mapped_column(Text, nullable=True)
    new_value: Mapped[str | None] = mapped_column(Text, nullable=True)

    audit: Mapped["Audit"] = relationship(back_populates="deltas")

    def __repr__(self) -> str:
        return f"<AuditDelta {self.property_name}>"
