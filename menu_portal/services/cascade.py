"""Cascade delete policy.

Every deletable entity kind maps to a ``CascadeRule``: the model, its label
for error messages, and the ordered child steps that run before the rows of
that kind are removed. Child steps either recurse into another kind or
detach references. ``delete_entity`` runs the whole tree in one
transaction, so a failure leaves nothing half-deleted.

Usage:
    name = delete_entity(db, "category", category_id)
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from sqlalchemy import delete, select, update
from sqlalchemy.orm import Session

from menu_portal.core.errors import NotFoundError
from menu_portal.models import (
    Allergen,
    ApiToken,
    Attribute,
    LiveOrder,
    LiveOrderItem,
    MenuCategory,
    MenuItem,
    MenuItemModifierGroup,
    ModifierGroup,
    ModifierItem,
    Property,
    Restaurant,
    Sale,
    ServiceRequest,
    SubCategory,
    User,
    menu_item_allergens,
)

logger = logging.getLogger(__name__)

CascadeStep = Callable[[Session, list[str]], int]


@dataclass(frozen=True)
class CascadeRule:
    model: Any
    label: str
    steps: tuple[CascadeStep, ...] = field(default_factory=tuple)


def _ids(db: Session, stmt: Any) -> list[str]:
    return list(db.scalars(stmt).all())


def _cascade_to(kind: str, column: Any, model: Any) -> CascadeStep:
    """Step that deletes every ``kind`` row whose ``column`` points at a parent being removed."""

    def step(db: Session, parent_ids: list[str]) -> int:
        child_ids = _ids(db, select(model.id).where(column.in_(parent_ids)))
        return _delete_rows(db, kind, child_ids)

    return step


def _unlink_item_allergens(db: Session, item_ids: list[str]) -> int:
    result = db.execute(delete(menu_item_allergens).where(menu_item_allergens.c.menu_item_id.in_(item_ids)))
    return result.rowcount or 0


def _unlink_item_modifier_groups(db: Session, item_ids: list[str]) -> int:
    result = db.execute(delete(MenuItemModifierGroup).where(MenuItemModifierGroup.menu_item_id.in_(item_ids)))
    return result.rowcount or 0


def _detach_subcategory_items(db: Session, subcategory_ids: list[str]) -> int:
    result = db.execute(
        update(MenuItem).where(MenuItem.subcategory_id.in_(subcategory_ids)).values(subcategory_id=None)
    )
    return result.rowcount or 0


def _unlink_group_from_items(db: Session, group_ids: list[str]) -> int:
    result = db.execute(delete(MenuItemModifierGroup).where(MenuItemModifierGroup.modifier_group_id.in_(group_ids)))
    return result.rowcount or 0


def _unlink_allergen_from_items(db: Session, allergen_ids: list[str]) -> int:
    result = db.execute(delete(menu_item_allergens).where(menu_item_allergens.c.allergen_id.in_(allergen_ids)))
    return result.rowcount or 0


def _strip_attribute_values(db: Session, attribute_ids: list[str]) -> int:
    removed = set(attribute_ids)
    touched = 0
    for item in db.scalars(select(MenuItem)).all():
        attributes = item.attributes or {}
        if removed.intersection(attributes):
            item.attributes = {key: value for key, value in attributes.items() if key not in removed}
            touched += 1
    db.flush()
    return touched


def _delete_order_lines(db: Session, order_ids: list[str]) -> int:
    result = db.execute(delete(LiveOrderItem).where(LiveOrderItem.order_id.in_(order_ids)))
    return result.rowcount or 0


def _delete_restaurant_sales(db: Session, restaurant_ids: list[str]) -> int:
    result = db.execute(delete(Sale).where(Sale.restaurant_id.in_(restaurant_ids)))
    return result.rowcount or 0


def _delete_restaurant_service_requests(db: Session, restaurant_ids: list[str]) -> int:
    result = db.execute(delete(ServiceRequest).where(ServiceRequest.restaurant_id.in_(restaurant_ids)))
    return result.rowcount or 0


def _delete_restaurant_tokens(db: Session, restaurant_ids: list[str]) -> int:
    result = db.execute(delete(ApiToken).where(ApiToken.restaurant_id.in_(restaurant_ids)))
    return result.rowcount or 0


def _delete_property_tokens(db: Session, property_ids: list[str]) -> int:
    result = db.execute(delete(ApiToken).where(ApiToken.property_id.in_(property_ids)))
    return result.rowcount or 0


def _detach_property_users(db: Session, property_ids: list[str]) -> int:
    result = db.execute(update(User).where(User.property_id.in_(property_ids)).values(property_id=None))
    return result.rowcount or 0


CASCADE_POLICY: dict[str, CascadeRule] = {
    "property": CascadeRule(
        Property,
        "Property",
        (
            _cascade_to("restaurant", Restaurant.property_id, Restaurant),
            _delete_property_tokens,
            _detach_property_users,
        ),
    ),
    "restaurant": CascadeRule(
        Restaurant,
        "Restaurant",
        (
            _cascade_to("category", MenuCategory.restaurant_id, MenuCategory),
            _cascade_to("modifier_group", ModifierGroup.restaurant_id, ModifierGroup),
            _cascade_to("order", LiveOrder.restaurant_id, LiveOrder),
            _delete_restaurant_sales,
            _delete_restaurant_service_requests,
            _delete_restaurant_tokens,
        ),
    ),
    "category": CascadeRule(
        MenuCategory,
        "Category",
        (
            _cascade_to("menu_item", MenuItem.category_id, MenuItem),
            _cascade_to("subcategory", SubCategory.category_id, SubCategory),
        ),
    ),
    "subcategory": CascadeRule(SubCategory, "Subcategory", (_detach_subcategory_items,)),
    "menu_item": CascadeRule(MenuItem, "Menu item", (_unlink_item_allergens, _unlink_item_modifier_groups)),
    "modifier_group": CascadeRule(
        ModifierGroup,
        "Modifier group",
        (
            _unlink_group_from_items,
            _cascade_to("modifier_item", ModifierItem.modifier_group_id, ModifierItem),
        ),
    ),
    "modifier_item": CascadeRule(ModifierItem, "Modifier item"),
    "allergen": CascadeRule(Allergen, "Allergen", (_unlink_allergen_from_items,)),
    "attribute": CascadeRule(Attribute, "Attribute", (_strip_attribute_values,)),
    "order": CascadeRule(LiveOrder, "Order", (_delete_order_lines,)),
}


def _delete_rows(db: Session, kind: str, ids: list[str]) -> int:
    if not ids:
        return 0
    rule = CASCADE_POLICY[kind]
    affected = 0
    for step in rule.steps:
        affected += step(db, ids)
    result = db.execute(delete(rule.model).where(rule.model.id.in_(ids)))
    return affected + (result.rowcount or 0)


def delete_entity(db: Session, kind: str, entity_id: str, *, commit: bool = True) -> str:
    """Delete one entity and its dependents; returns the entity's display name."""
    rule = CASCADE_POLICY[kind]
    instance = db.get(rule.model, entity_id)
    if instance is None:
        raise NotFoundError(rule.label, entity_id)
    name = getattr(instance, "name", entity_id)
    try:
        affected = _delete_rows(db, kind, [entity_id])
        if commit:
            db.commit()
    except Exception:
        db.rollback()
        raise
    logger.info("[CASCADE] Deleted %s %s (%s rows affected)", kind, entity_id, affected)
    return name
