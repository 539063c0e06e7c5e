"""Property and restaurant services."""

from __future__ import annotations

from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import Session

from menu_portal.models import Property, Restaurant
from menu_portal.services.crud import apply_changes, first_named, get_or_404


def list_properties(db: Session, property_ids: list[str] | None = None) -> list[Property]:
    stmt = select(Property).order_by(Property.name)
    if property_ids is not None:
        stmt = stmt.where(Property.id.in_(property_ids))
    return list(db.scalars(stmt).all())


def get_property(db: Session, property_id: str) -> Property:
    return get_or_404(db, Property, property_id, "Property")


def create_property(db: Session, values: dict[str, Any]) -> Property:
    prop = Property(**values)
    db.add(prop)
    db.flush()
    return prop


def update_property(db: Session, property_id: str, changes: dict[str, Any]) -> tuple[Property, dict[str, Any]]:
    prop = get_property(db, property_id)
    applied = apply_changes(prop, changes)
    db.flush()
    return prop, applied


def list_restaurants(
    db: Session,
    *,
    property_id: str | None = None,
    property_ids: list[str] | None = None,
    restaurant_ids: list[str] | None = None,
) -> list[Restaurant]:
    stmt = select(Restaurant)
    if property_id is not None:
        stmt = stmt.where(Restaurant.property_id == property_id)
    if property_ids is not None:
        stmt = stmt.where(Restaurant.property_id.in_(property_ids))
    if restaurant_ids is not None:
        stmt = stmt.where(Restaurant.id.in_(restaurant_ids))
    return list(db.scalars(stmt.order_by(Restaurant.name, Restaurant.created_at)).all())


def get_restaurant(db: Session, restaurant_id: str) -> Restaurant:
    return get_or_404(db, Restaurant, restaurant_id, "Restaurant")


def create_restaurant(db: Session, values: dict[str, Any]) -> Restaurant:
    get_property(db, values["property_id"])
    restaurant = Restaurant(**values)
    db.add(restaurant)
    db.flush()
    return restaurant


def update_restaurant(db: Session, restaurant_id: str, changes: dict[str, Any]) -> tuple[Restaurant, dict[str, Any]]:
    restaurant = get_restaurant(db, restaurant_id)
    if changes.get("property_id"):
        get_property(db, changes["property_id"])
    applied = apply_changes(restaurant, changes)
    db.flush()
    return restaurant, applied


def find_restaurant(db: Session, restaurant_id: str | None, restaurant_name: str | None) -> Restaurant | None:
    """Resolve by exact id first, then by case-insensitive name."""
    if restaurant_id:
        restaurant = db.get(Restaurant, restaurant_id)
        if restaurant is not None:
            return restaurant
    if restaurant_name:
        return first_named(db.scalars(select(Restaurant).order_by(Restaurant.created_at)), restaurant_name)
    return None
