"""Shared endpoint dependencies and tenant-scope helpers."""

from __future__ import annotations

from fastapi import Request
from sqlalchemy import select
from sqlalchemy.orm import Session

from menu_portal.core.access import Principal, ensure_restaurant_access
from menu_portal.models import MenuCategory, Restaurant
from menu_portal.services.events import OrderEventBroadcaster
from menu_portal.services.crud import get_or_404


def get_broadcaster(request: Request) -> OrderEventBroadcaster:
    return request.app.state.broadcaster


def scoped_restaurant_ids(db: Session, principal: Principal) -> list[str] | None:
    """Restaurant ids visible to ``principal``; ``None`` means unrestricted."""
    if principal.is_superadmin:
        return None
    if principal.is_api_token:
        if principal.restaurant_id is not None:
            return [principal.restaurant_id]
        if principal.property_id is None:
            return None
    if principal.property_id is None:
        return []
    return list(db.scalars(select(Restaurant.id).where(Restaurant.property_id == principal.property_id)).all())


def narrow_restaurant_ids(db: Session, principal: Principal, restaurant_id: str | None) -> list[str] | None:
    """Apply an optional ``restaurantId`` filter on top of the principal's scope."""
    if restaurant_id is None:
        return scoped_restaurant_ids(db, principal)
    load_restaurant(db, principal, restaurant_id)
    return [restaurant_id]


def load_restaurant(db: Session, principal: Principal, restaurant_id: str) -> Restaurant:
    restaurant = get_or_404(db, Restaurant, restaurant_id, "Restaurant")
    ensure_restaurant_access(principal, restaurant)
    return restaurant


def load_category_restaurant(db: Session, principal: Principal, category_id: str) -> MenuCategory:
    category = get_or_404(db, MenuCategory, category_id, "Category")
    load_restaurant(db, principal, category.restaurant_id)
    return category
