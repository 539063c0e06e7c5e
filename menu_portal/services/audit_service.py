"""Audit log helpers."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from sqlalchemy import select
from sqlalchemy.orm import Session

from menu_portal.models import AuditLog
from menu_portal.models.audit_log import AUDIT_ACTIONS

if TYPE_CHECKING:
    from menu_portal.core.access import Principal


def log_action(
    db: Session,
    *,
    actor: Principal | None,
    action_type: str,
    entity_type: str,
    entity_id: str | None = None,
    entity_name: str | None = None,
    details: dict[str, Any] | None = None,
) -> None:
    """Stage an audit row; the caller's commit persists it with the change."""
    if action_type not in AUDIT_ACTIONS:
        raise ValueError(f"Unknown audit action: {action_type}")
    user_id = None
    user_name = "anonymous"
    if actor is not None:
        user_id = actor.subject_id
        user_name = actor.name

    db.add(
        AuditLog(
            user_id=user_id,
            user_name=user_name,
            action_type=action_type,
            entity_type=entity_type,
            entity_id=entity_id,
            entity_name=entity_name,
            details=details,
        )
    )


def list_audit_logs(
    db: Session,
    *,
    entity_type: str | None = None,
    action_type: str | None = None,
    limit: int = 200,
) -> list[AuditLog]:
    stmt = select(AuditLog)
    if entity_type:
        stmt = stmt.where(AuditLog.entity_type == entity_type)
    if action_type:
        stmt = stmt.where(AuditLog.action_type == action_type)
    stmt = stmt.order_by(AuditLog.timestamp.desc()).limit(limit)
    return list(db.scalars(stmt).all())
