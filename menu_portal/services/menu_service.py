"""Menu tree services: categories, subcategories, items, bulk actions and the public menu."""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from menu_portal.core.errors import ValidationError
from menu_portal.models import Allergen, MenuCategory, MenuItem, ModifierGroup, Restaurant, SubCategory
from menu_portal.services.crud import apply_changes, first_named, get_or_404

logger = logging.getLogger(__name__)

BULK_ACTIONS: dict[str, dict[str, Any]] = {
    "enable": {"availability_flag": True},
    "disable": {"availability_flag": False},
    "sold_out": {"sold_out": True},
    "enable_bogo": {"bogo": True},
    "disable_bogo": {"bogo": False},
}


def list_categories(db: Session, *, restaurant_ids: list[str] | None = None) -> list[MenuCategory]:
    stmt = select(MenuCategory)
    if restaurant_ids is not None:
        stmt = stmt.where(MenuCategory.restaurant_id.in_(restaurant_ids))
    return list(db.scalars(stmt.order_by(MenuCategory.sort_order, MenuCategory.created_at)).all())


def get_category(db: Session, category_id: str) -> MenuCategory:
    return get_or_404(db, MenuCategory, category_id, "Category")


def create_category(db: Session, values: dict[str, Any]) -> MenuCategory:
    get_or_404(db, Restaurant, values["restaurant_id"], "Restaurant")
    category = MenuCategory(**values)
    db.add(category)
    db.flush()
    return category


def update_category(db: Session, category_id: str, changes: dict[str, Any]) -> tuple[MenuCategory, dict[str, Any]]:
    category = get_category(db, category_id)
    applied = apply_changes(category, changes)
    db.flush()
    return category, applied


def find_category_by_name(db: Session, restaurant_id: str, name: str) -> MenuCategory | None:
    candidates = db.scalars(
        select(MenuCategory).where(MenuCategory.restaurant_id == restaurant_id).order_by(MenuCategory.created_at)
    )
    return first_named(candidates, name)


def list_subcategories(db: Session, *, category_ids: list[str] | None = None) -> list[SubCategory]:
    stmt = select(SubCategory)
    if category_ids is not None:
        stmt = stmt.where(SubCategory.category_id.in_(category_ids))
    return list(db.scalars(stmt.order_by(SubCategory.sort_order, SubCategory.created_at)).all())


def get_subcategory(db: Session, subcategory_id: str) -> SubCategory:
    return get_or_404(db, SubCategory, subcategory_id, "Subcategory")


def create_subcategory(db: Session, values: dict[str, Any]) -> SubCategory:
    get_category(db, values["category_id"])
    subcategory = SubCategory(**values)
    db.add(subcategory)
    db.flush()
    return subcategory


def update_subcategory(
    db: Session, subcategory_id: str, changes: dict[str, Any]
) -> tuple[SubCategory, dict[str, Any]]:
    subcategory = get_subcategory(db, subcategory_id)
    applied = apply_changes(subcategory, changes)
    db.flush()
    return subcategory, applied


def find_subcategory_by_name(db: Session, category_id: str, name: str) -> SubCategory | None:
    candidates = db.scalars(
        select(SubCategory).where(SubCategory.category_id == category_id).order_by(SubCategory.created_at)
    )
    return first_named(candidates, name)


def list_menu_items(
    db: Session,
    *,
    category_id: str | None = None,
    subcategory_id: str | None = None,
    restaurant_ids: list[str] | None = None,
) -> list[MenuItem]:
    stmt = select(MenuItem).options(selectinload(MenuItem.allergens), selectinload(MenuItem.modifier_links))
    if category_id is not None:
        stmt = stmt.where(MenuItem.category_id == category_id)
    if subcategory_id is not None:
        stmt = stmt.where(MenuItem.subcategory_id == subcategory_id)
    if restaurant_ids is not None:
        stmt = stmt.join(MenuCategory, MenuCategory.id == MenuItem.category_id).where(
            MenuCategory.restaurant_id.in_(restaurant_ids)
        )
    return list(db.scalars(stmt.order_by(MenuItem.sort_order, MenuItem.created_at)).all())


def get_menu_item(db: Session, item_id: str) -> MenuItem:
    return get_or_404(db, MenuItem, item_id, "Menu item")


def _check_subcategory(db: Session, category_id: str, subcategory_id: str | None) -> None:
    if subcategory_id is None:
        return
    subcategory = get_subcategory(db, subcategory_id)
    if subcategory.category_id != category_id:
        raise ValidationError("Subcategory does not belong to the item's category")


def _load_allergens(db: Session, allergen_ids: list[str]) -> list[Allergen]:
    allergens = list(db.scalars(select(Allergen).where(Allergen.id.in_(allergen_ids))).all())
    missing = set(allergen_ids) - {allergen.id for allergen in allergens}
    if missing:
        raise ValidationError(f"Unknown allergens: {', '.join(sorted(missing))}")
    return allergens


def _check_modifier_groups(db: Session, restaurant_id: str, group_ids: list[str]) -> None:
    if not group_ids:
        return
    found = set(
        db.scalars(
            select(ModifierGroup.id).where(ModifierGroup.id.in_(group_ids), ModifierGroup.restaurant_id == restaurant_id)
        ).all()
    )
    missing = set(group_ids) - found
    if missing:
        raise ValidationError(f"Unknown modifier groups for this restaurant: {', '.join(sorted(missing))}")


def create_menu_item(db: Session, values: dict[str, Any]) -> MenuItem:
    values = dict(values)
    allergen_ids: list[str] = values.pop("allergen_ids", None) or []
    group_ids: list[str] = values.pop("modifier_group_ids", None) or []
    category = get_category(db, values["category_id"])
    _check_subcategory(db, category.id, values.get("subcategory_id"))
    _check_modifier_groups(db, category.restaurant_id, group_ids)

    item = MenuItem(**values)
    item.allergens = _load_allergens(db, allergen_ids) if allergen_ids else []
    item.set_modifier_group_ids(group_ids)
    db.add(item)
    db.flush()
    return item


def update_menu_item(db: Session, item_id: str, changes: dict[str, Any]) -> tuple[MenuItem, dict[str, Any]]:
    item = get_menu_item(db, item_id)
    changes = dict(changes)
    allergen_ids: list[str] | None = changes.pop("allergen_ids", None)
    group_ids: list[str] | None = changes.pop("modifier_group_ids", None)

    category_id = changes.get("category_id") or item.category_id
    category = get_category(db, category_id)
    subcategory_id = changes["subcategory_id"] if "subcategory_id" in changes else item.subcategory_id
    if category_id != item.category_id and "subcategory_id" not in changes:
        subcategory_id = None
        changes["subcategory_id"] = None
    _check_subcategory(db, category.id, subcategory_id)

    applied = apply_changes(item, changes)
    if allergen_ids is not None:
        item.allergens = _load_allergens(db, allergen_ids) if allergen_ids else []
        applied["allergen_ids"] = allergen_ids
    if group_ids is not None:
        _check_modifier_groups(db, category.restaurant_id, group_ids)
        item.set_modifier_group_ids(group_ids)
        applied["modifier_group_ids"] = group_ids
    db.flush()
    return item, applied


def apply_bulk_action(db: Session, action: str, item_ids: list[str], currency: str | None = None) -> int:
    """Apply one bulk action to every listed item that exists; returns the number touched."""
    if action == "change_currency":
        if not currency:
            raise ValidationError("Currency is required for change_currency")
        changes: dict[str, Any] = {"currency": currency}
    else:
        changes = BULK_ACTIONS[action]

    items = list(db.scalars(select(MenuItem).where(MenuItem.id.in_(item_ids))).all())
    for item in items:
        for key, value in changes.items():
            setattr(item, key, value)
    db.flush()
    logger.info("[MENU] Bulk action %s applied to %s items", action, len(items))
    return len(items)


def _public_item(item: MenuItem) -> dict[str, Any]:
    return {
        "id": item.id,
        "name": item.name,
        "display_name": item.display_name,
        "description": item.description,
        "price": item.price,
        "currency": item.currency,
        "image_url": item.image_url,
        "image_orientation": item.image_orientation,
        "video_url": item.video_url,
        "sold_out": item.sold_out,
        "bogo": item.bogo,
        "special_type": item.special_type,
        "calories": item.calories,
        "prep_time": item.prep_time,
        "portion": item.portion,
        "max_order_qty": item.max_order_qty,
        "sort_order": item.sort_order,
        "allergens": sorted(allergen.name for allergen in item.allergens),
        "modifier_group_ids": item.modifier_group_ids,
    }


def build_public_menu(db: Session, restaurant_id: str) -> dict[str, Any]:
    """Active categories in sort order with their subcategories and available items."""
    restaurant = get_or_404(db, Restaurant, restaurant_id, "Restaurant")
    categories = list(
        db.scalars(
            select(MenuCategory)
            .where(MenuCategory.restaurant_id == restaurant.id, MenuCategory.active_flag.is_(True))
            .order_by(MenuCategory.sort_order, MenuCategory.created_at)
        ).all()
    )
    category_ids = [category.id for category in categories]
    subcategories = list_subcategories(db, category_ids=category_ids) if category_ids else []
    items = (
        list(
            db.scalars(
                select(MenuItem)
                .options(selectinload(MenuItem.allergens), selectinload(MenuItem.modifier_links))
                .where(MenuItem.category_id.in_(category_ids), MenuItem.availability_flag.is_(True))
                .order_by(MenuItem.sort_order, MenuItem.created_at)
            ).all()
        )
        if category_ids
        else []
    )
    modifier_groups = list(
        db.scalars(
            select(ModifierGroup)
            .options(selectinload(ModifierGroup.items))
            .where(ModifierGroup.restaurant_id == restaurant.id)
            .order_by(ModifierGroup.name)
        ).all()
    )

    tree: list[dict[str, Any]] = []
    for category in categories:
        subcategory_nodes = [
            {
                "id": subcategory.id,
                "name": subcategory.name,
                "sort_order": subcategory.sort_order,
                "items": [_public_item(item) for item in items if item.subcategory_id == subcategory.id],
            }
            for subcategory in subcategories
            if subcategory.category_id == category.id
        ]
        tree.append(
            {
                "id": category.id,
                "name": category.name,
                "description": category.description,
                "sort_order": category.sort_order,
                "subcategories": subcategory_nodes,
                "items": [
                    _public_item(item)
                    for item in items
                    if item.category_id == category.id and item.subcategory_id is None
                ],
            }
        )
    return {"restaurant": restaurant, "categories": tree, "modifier_groups": modifier_groups}
