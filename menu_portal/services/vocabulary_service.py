"""Allergen and attribute vocabularies."""

from __future__ import annotations

from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import Session

from menu_portal.core.errors import ValidationError
from menu_portal.models import Allergen, Attribute
from menu_portal.services.crud import apply_changes, get_or_404


def list_allergens(db: Session) -> list[Allergen]:
    return list(db.scalars(select(Allergen).order_by(Allergen.name)).all())


def create_allergen(db: Session, values: dict[str, Any]) -> Allergen:
    allergen = Allergen(**values)
    db.add(allergen)
    db.flush()
    return allergen


def update_allergen(db: Session, allergen_id: str, changes: dict[str, Any]) -> tuple[Allergen, dict[str, Any]]:
    allergen = get_or_404(db, Allergen, allergen_id, "Allergen")
    applied = apply_changes(allergen, changes)
    db.flush()
    return allergen, applied


def _check_options(attribute_type: str, options: list[str] | None) -> None:
    if attribute_type == "Dropdown" and not options:
        raise ValidationError("Dropdown attributes need at least one option")


def list_attributes(db: Session) -> list[Attribute]:
    return list(db.scalars(select(Attribute).order_by(Attribute.name)).all())


def create_attribute(db: Session, values: dict[str, Any]) -> Attribute:
    _check_options(values.get("type", "Text"), values.get("options"))
    attribute = Attribute(**values)
    db.add(attribute)
    db.flush()
    return attribute


def update_attribute(db: Session, attribute_id: str, changes: dict[str, Any]) -> tuple[Attribute, dict[str, Any]]:
    attribute = get_or_404(db, Attribute, attribute_id, "Attribute")
    _check_options(changes.get("type", attribute.type), changes.get("options", attribute.options))
    applied = apply_changes(attribute, changes)
    db.flush()
    return attribute, applied
