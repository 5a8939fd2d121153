# Overview: Service-layer operations for the POS audit trail.

from __future__ import annotations

from typing import Any, Optional

from ..extensions import db
from ..models import PosAuditEvent

"""
POS Audit Trail Invariants

- Append-only; no updates or deletes of existing events.
- No domain/business logic here.
- Events are written inside the same DB transaction as the change they record.
"""


def append_audit_event(
    *,
    action: str,
    entity_type: str,
    entity_id: int | str,
    terminal_id: str | None = None,
    note: Optional[str] = None,
    payload: Optional[dict[str, Any]] = None,
) -> PosAuditEvent:
    """Append an audit event without committing."""
    ev = PosAuditEvent(
        action=action,
        entity_type=entity_type,
        entity_id=str(entity_id),
        terminal_id=terminal_id,
        note=note,
        payload=payload,
    )
    db.session.add(ev)
    db.session.flush()  # ensures ev.id is assigned without committing
    return ev


def list_audit_events(entity_type: str | None = None, entity_id: int | str | None = None) -> list[PosAuditEvent]:
    query = db.session.query(PosAuditEvent)
    if entity_type:
        query = query.filter_by(entity_type=entity_type)
    if entity_id is not None:
        query = query.filter_by(entity_id=str(entity_id))
    return query.order_by(PosAuditEvent.id.asc()).all()
