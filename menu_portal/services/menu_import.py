"""Menu import reconciler.

Two entry points merge external menu documents into the catalog:

* ``import_system_menu`` takes the upstream point-of-sale export
  (restaurant category trees, flat items, condiment definitions) for any
  number of restaurants.
* ``import_menu_from_json`` takes a hand-authored category/subcategory/item
  document for one restaurant.

Both are idempotent: categories and subcategories are matched by
case-insensitive name, items by ``(item_code, category_id)``, so running the
same payload twice creates nothing the second time. Entities the payload
cannot place (unknown restaurant or category) are counted, never raised.
"""

from __future__ import annotations

import logging
import re
from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import Session

from menu_portal.core.config import settings
from menu_portal.models import MenuCategory, MenuItem, ModifierGroup, ModifierItem, Restaurant, SubCategory
from menu_portal.schemas.menu_import import (
    JsonMenuItem,
    JsonMenuPayload,
    MenuImportStats,
    SkippedRestaurant,
    SystemCategoryNode,
    SystemCondiment,
    SystemImportPayload,
    SystemImportStats,
    SystemMenuItem,
)
from menu_portal.services.crud import first_named, get_or_404
from menu_portal.services.menu_service import find_category_by_name, find_subcategory_by_name
from menu_portal.services.modifier_service import find_modifier_group_by_name
from menu_portal.services.property_service import find_restaurant

logger = logging.getLogger(__name__)

IMPORTED_CURRENCY = "INR"
_NUMBER_PATTERN = re.compile(r"\d+(?:\.\d+)?")


def parse_whole_number(value: Any) -> int | None:
    """Best-effort integer from values like ``250``, ``"12.5"`` or ``"250 kcal"``."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return int(round(value))
    match = _NUMBER_PATTERN.search(str(value))
    if match is None:
        return None
    return int(round(float(match.group())))


def split_condiment_codes(raw: str | None) -> list[str]:
    if not raw:
        return []
    return [code.strip() for code in raw.split(",") if code.strip()]


class SystemMenuImporter:
    """Runs one system-menu import against a session.

    With ``atomic=False`` every entity step is committed as soon as it is
    done, so an interrupted run keeps its partial progress and a rerun
    finishes the job. With ``atomic=True`` the run is one transaction.
    """

    def __init__(self, db: Session, *, atomic: bool = False) -> None:
        self.db = db
        self.atomic = atomic
        self.stats = SystemImportStats()
        self._group_cache: dict[tuple[str, str], str] = {}

    def _step_done(self) -> None:
        self.db.flush()
        if not self.atomic:
            self.db.commit()

    def run(self, payload: SystemImportPayload) -> SystemImportStats:
        try:
            for info in payload.restaurant_category:
                restaurant = find_restaurant(self.db, info.restaurant_id, info.restaurant_name)
                if restaurant is None:
                    self.stats.restaurants_skipped.append(
                        SkippedRestaurant(id=info.restaurant_id, name=info.restaurant_name)
                    )
                    logger.info("[IMPORT] Skipping unknown restaurant %s (%s)", info.restaurant_name, info.restaurant_id)
                    continue
                self.stats.restaurants_processed += 1
                self._materialize_categories(restaurant.id, info.categories)

            condiments: dict[str, SystemCondiment] = {c.condiment_code: c for c in payload.condiments}
            for item in payload.items:
                self._import_item(item, condiments)

            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        return self.stats

    def _materialize_categories(self, restaurant_id: str, nodes: list[SystemCategoryNode]) -> None:
        for node in nodes:
            category = find_category_by_name(self.db, restaurant_id, node.name)
            if category is None:
                category = MenuCategory(
                    restaurant_id=restaurant_id,
                    name=node.name.strip(),
                    description="",
                    sort_order=node.sort_order or 0,
                    active_flag=True,
                )
                self.db.add(category)
                self.stats.categories_created += 1
                self._step_done()
            for child in node.categories or []:
                self._materialize_subcategory(category.id, child, depth=1)

    def _materialize_subcategory(self, category_id: str, node: SystemCategoryNode, depth: int) -> None:
        # The catalog holds two levels; deeper nodes are attached to the top-level category.
        if depth >= 2:
            self.stats.nodes_flattened += 1
        subcategory = find_subcategory_by_name(self.db, category_id, node.name)
        if subcategory is None:
            subcategory = SubCategory(category_id=category_id, name=node.name.strip(), sort_order=node.sort_order or 0)
            self.db.add(subcategory)
            self.stats.subcategories_created += 1
            self._step_done()
        for child in node.categories or []:
            self._materialize_subcategory(category_id, child, depth=depth + 1)

    def _import_item(self, item: SystemMenuItem, condiments: dict[str, SystemCondiment]) -> None:
        restaurant = find_restaurant(self.db, item.restaurant_id, item.restaurant_name)
        if restaurant is None:
            self.stats.items_skipped += 1
            return
        category = find_category_by_name(self.db, restaurant.id, item.category) if item.category else None
        if category is None:
            self.stats.items_skipped += 1
            logger.debug("[IMPORT] No category %r in restaurant %s for item %s", item.category, restaurant.id, item.item_code)
            return

        group_ids = self._resolve_modifier_groups(restaurant.id, item.condiment_codes, condiments)
        self._upsert_item(category, item, group_ids)

    def _resolve_modifier_groups(
        self, restaurant_id: str, raw_codes: str | None, condiments: dict[str, SystemCondiment]
    ) -> list[str]:
        group_ids: list[str] = []
        for code in split_condiment_codes(raw_codes):
            cache_key = (restaurant_id, code)
            if cache_key in self._group_cache:
                group_ids.append(self._group_cache[cache_key])
                continue
            condiment = condiments.get(code)
            if condiment is None:
                continue
            group = find_modifier_group_by_name(self.db, restaurant_id, condiment.condiment_name)
            if group is None:
                group = self._create_modifier_group(restaurant_id, condiment)
            self._group_cache[cache_key] = group.id
            group_ids.append(group.id)
        return list(dict.fromkeys(group_ids))

    def _create_modifier_group(self, restaurant_id: str, condiment: SystemCondiment) -> ModifierGroup:
        group = ModifierGroup(
            restaurant_id=restaurant_id,
            name=condiment.condiment_name.strip(),
            code=condiment.condiment_code,
            min_selection=0,
            max_selection=1,
        )
        for entry in condiment.condiment_items:
            group.items.append(
                ModifierItem(
                    name=entry.condiment_item_name,
                    code=entry.condiment_item_code,
                    price=0,
                    calories=parse_whole_number(entry.calorific_value),
                )
            )
        self.db.add(group)
        self.stats.modifier_groups_created += 1
        self.stats.modifier_items_created += len(condiment.condiment_items)
        self._step_done()
        return group

    def _find_item(self, category: MenuCategory, item: SystemMenuItem) -> MenuItem | None:
        stmt = select(MenuItem).where(MenuItem.category_id == category.id).order_by(MenuItem.created_at)
        if item.item_code:
            return self.db.scalar(stmt.where(MenuItem.item_code == item.item_code).limit(1))
        return first_named(self.db.scalars(stmt.where(MenuItem.item_code.is_(None))), item.item_name)

    def _upsert_item(self, category: MenuCategory, item: SystemMenuItem, group_ids: list[str]) -> None:
        values: dict[str, Any] = {
            "name": item.item_name.strip(),
            "item_code": item.item_code,
            "image_url": item.item_image,
            "price": item.item_price,
            "category_id": category.id,
            "description": item.item_description,
            "sort_order": item.sort_order or 0,
            "availability_flag": True,
            "bogo": False,
            "sold_out": False,
            "currency": IMPORTED_CURRENCY,
            "calories": parse_whole_number(item.calorific_value),
            "prep_time": parse_whole_number(item.preparation_time),
            "portion": item.per_serve,
        }
        existing = self._find_item(category, item)
        if existing is not None:
            for key, value in values.items():
                setattr(existing, key, value)
            existing.set_modifier_group_ids(group_ids)
            self.stats.items_updated += 1
        else:
            created = MenuItem(**values)
            created.set_modifier_group_ids(group_ids)
            self.db.add(created)
            self.stats.items_created += 1
        self._step_done()


def import_system_menu(db: Session, payload: SystemImportPayload, *, atomic: bool | None = None) -> SystemImportStats:
    """Reconcile a point-of-sale export into the catalog and report what changed."""
    importer = SystemMenuImporter(db, atomic=settings.import_atomic if atomic is None else atomic)
    stats = importer.run(payload)
    logger.info(
        "[IMPORT] System menu: %s restaurants, %s skipped, %s items created, %s updated, %s skipped",
        stats.restaurants_processed,
        len(stats.restaurants_skipped),
        stats.items_created,
        stats.items_updated,
        stats.items_skipped,
    )
    return stats


def _upsert_json_item(
    db: Session,
    stats: MenuImportStats,
    category: MenuCategory,
    subcategory: SubCategory | None,
    entry: JsonMenuItem,
) -> None:
    subcategory_id = subcategory.id if subcategory is not None else None
    stmt = select(MenuItem).where(MenuItem.category_id == category.id).order_by(MenuItem.created_at)
    if entry.item_code:
        existing = db.scalar(stmt.where(MenuItem.item_code == entry.item_code).limit(1))
    else:
        stmt = stmt.where(MenuItem.subcategory_id.is_(None) if subcategory_id is None else MenuItem.subcategory_id == subcategory_id)
        existing = first_named(db.scalars(stmt), entry.name)

    values: dict[str, Any] = {
        "name": entry.name.strip(),
        "description": entry.description,
        "price": entry.price,
        "image_url": entry.image_url,
        "sort_order": entry.sort_order,
        "availability_flag": entry.availability_flag,
        "sold_out": entry.sold_out,
        "subcategory_id": subcategory_id,
    }
    if entry.currency:
        values["currency"] = entry.currency
    if existing is not None:
        for key, value in values.items():
            setattr(existing, key, value)
        stats.items_updated += 1
    else:
        db.add(MenuItem(category_id=category.id, item_code=entry.item_code, **values))
        stats.items_created += 1
    db.flush()


def import_menu_from_json(db: Session, restaurant_id: str, payload: JsonMenuPayload) -> MenuImportStats:
    """Merge a category/subcategory/item document into one restaurant's menu in a single transaction."""
    restaurant = get_or_404(db, Restaurant, restaurant_id, "Restaurant")
    stats = MenuImportStats()
    try:
        for entry in payload.categories:
            category = find_category_by_name(db, restaurant.id, entry.name)
            if category is None:
                category = MenuCategory(
                    restaurant_id=restaurant.id,
                    name=entry.name.strip(),
                    description=entry.description,
                    sort_order=entry.sort_order,
                    active_flag=True,
                )
                db.add(category)
                db.flush()
                stats.categories_created += 1
            for item in entry.items:
                _upsert_json_item(db, stats, category, None, item)
            for sub_entry in entry.subcategories:
                subcategory = find_subcategory_by_name(db, category.id, sub_entry.name)
                if subcategory is None:
                    subcategory = SubCategory(
                        category_id=category.id, name=sub_entry.name.strip(), sort_order=sub_entry.sort_order
                    )
                    db.add(subcategory)
                    db.flush()
                    stats.subcategories_created += 1
                for item in sub_entry.items:
                    _upsert_json_item(db, stats, category, subcategory, item)
        db.commit()
    except Exception:
        db.rollback()
        raise
    logger.info(
        "[IMPORT] JSON menu for %s: %s categories, %s items created, %s updated",
        restaurant.id,
        stats.categories_created,
        stats.items_created,
        stats.items_updated,
    )
    return stats
