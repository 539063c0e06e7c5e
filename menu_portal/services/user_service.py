"""User profile management."""

from __future__ import annotations

from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import Session

from menu_portal.core.errors import ValidationError
from menu_portal.models import Property, User
from menu_portal.models.user import normalize_user_role
from menu_portal.services.crud import apply_changes, get_or_404


def list_users(db: Session, *, property_id: str | None = None) -> list[User]:
    stmt = select(User)
    if property_id is not None:
        stmt = stmt.where(User.property_id == property_id)
    return list(db.scalars(stmt.order_by(User.created_at)).all())


def get_user(db: Session, user_id: str) -> User:
    return get_or_404(db, User, user_id, "User")


def update_user(db: Session, user_id: str, changes: dict[str, Any]) -> tuple[User, dict[str, Any]]:
    user = get_user(db, user_id)
    changes = dict(changes)
    if "role" in changes:
        role = normalize_user_role(changes["role"])
        if role is None:
            raise ValidationError(f"Unknown role: {changes['role']}")
        changes["role"] = role
    if changes.get("property_id"):
        get_or_404(db, Property, changes["property_id"], "Property")
    applied = apply_changes(user, changes)
    db.flush()
    return user, applied
