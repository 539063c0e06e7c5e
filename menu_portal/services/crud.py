"""Small helpers shared by the catalog services."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any, TypeVar

from sqlalchemy.orm import Session

from menu_portal.core.errors import NotFoundError

ModelT = TypeVar("ModelT")


def get_or_404(db: Session, model: type[ModelT], entity_id: str, label: str) -> ModelT:
    instance = db.get(model, entity_id)
    if instance is None:
        raise NotFoundError(label, entity_id)
    return instance


def apply_changes(instance: Any, changes: dict[str, Any]) -> dict[str, Any]:
    """Set changed attributes on ``instance`` and return ``{field: new_value}`` for auditing."""
    applied: dict[str, Any] = {}
    for key, value in changes.items():
        if getattr(instance, key) != value:
            setattr(instance, key, value)
            applied[key] = value
    return applied


def name_key(value: str | None) -> str:
    """Case-insensitive match key; folds non-ASCII letters that SQL ``lower()`` leaves alone on SQLite."""
    return (value or "").strip().casefold()


def first_named(candidates: Iterable[ModelT], name: str) -> ModelT | None:
    """First candidate whose ``name`` matches ``name`` case-insensitively, in the given order."""
    key = name_key(name)
    return next((candidate for candidate in candidates if name_key(candidate.name) == key), None)
