"""Modifier group and modifier item services."""

from __future__ import annotations

from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from menu_portal.core.errors import ValidationError
from menu_portal.models import ModifierGroup, ModifierItem, Restaurant
from menu_portal.services.crud import apply_changes, first_named, get_or_404


def _check_selection_bounds(min_selection: int, max_selection: int) -> None:
    if min_selection > max_selection:
        raise ValidationError("minSelection cannot exceed maxSelection")


def list_modifier_groups(db: Session, *, restaurant_ids: list[str] | None = None) -> list[ModifierGroup]:
    stmt = select(ModifierGroup).options(selectinload(ModifierGroup.items))
    if restaurant_ids is not None:
        stmt = stmt.where(ModifierGroup.restaurant_id.in_(restaurant_ids))
    return list(db.scalars(stmt.order_by(ModifierGroup.name)).all())


def get_modifier_group(db: Session, group_id: str) -> ModifierGroup:
    return get_or_404(db, ModifierGroup, group_id, "Modifier group")


def create_modifier_group(db: Session, values: dict[str, Any]) -> ModifierGroup:
    get_or_404(db, Restaurant, values["restaurant_id"], "Restaurant")
    _check_selection_bounds(values.get("min_selection", 0), values.get("max_selection", 1))
    group = ModifierGroup(**values)
    db.add(group)
    db.flush()
    return group


def update_modifier_group(db: Session, group_id: str, changes: dict[str, Any]) -> tuple[ModifierGroup, dict[str, Any]]:
    group = get_modifier_group(db, group_id)
    _check_selection_bounds(
        changes.get("min_selection", group.min_selection),
        changes.get("max_selection", group.max_selection),
    )
    applied = apply_changes(group, changes)
    db.flush()
    return group, applied


def find_modifier_group_by_name(db: Session, restaurant_id: str, name: str) -> ModifierGroup | None:
    candidates = db.scalars(
        select(ModifierGroup).where(ModifierGroup.restaurant_id == restaurant_id).order_by(ModifierGroup.created_at)
    )
    return first_named(candidates, name)


def list_modifier_items(db: Session, *, group_id: str | None = None) -> list[ModifierItem]:
    stmt = select(ModifierItem)
    if group_id is not None:
        stmt = stmt.where(ModifierItem.modifier_group_id == group_id)
    return list(db.scalars(stmt.order_by(ModifierItem.created_at)).all())


def get_modifier_item(db: Session, item_id: str) -> ModifierItem:
    return get_or_404(db, ModifierItem, item_id, "Modifier item")


def create_modifier_item(db: Session, values: dict[str, Any]) -> ModifierItem:
    get_modifier_group(db, values["modifier_group_id"])
    item = ModifierItem(**values)
    db.add(item)
    db.flush()
    return item


def update_modifier_item(db: Session, item_id: str, changes: dict[str, Any]) -> tuple[ModifierItem, dict[str, Any]]:
    item = get_modifier_item(db, item_id)
    applied = apply_changes(item, changes)
    db.flush()
    return item, applied
