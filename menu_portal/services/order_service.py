"""Live order business logic: placement, board queries, status changes and sales."""

from __future__ import annotations

import logging
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from menu_portal.core.errors import NotFoundError, ValidationError
from menu_portal.models import LiveOrder, LiveOrderItem, MenuCategory, MenuItem, ModifierGroup, ModifierItem, Restaurant, Sale
from menu_portal.schemas.order import OrderCreate
from menu_portal.services.order_status import TERMINAL_STATUS, normalize_status, set_status
from menu_portal.utils.time import utcnow

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")


def quantize_money(value: Decimal | int | float | str) -> Decimal:
    return Decimal(str(value)).quantize(CENT, rounding=ROUND_HALF_UP)


def _load_catalog_item(db: Session, restaurant_id: str, menu_item_id: str) -> MenuItem:
    item = db.scalar(
        select(MenuItem)
        .join(MenuCategory, MenuCategory.id == MenuItem.category_id)
        .where(MenuItem.id == menu_item_id, MenuCategory.restaurant_id == restaurant_id)
    )
    if item is None:
        raise ValidationError(f"Menu item {menu_item_id} is not on this restaurant's menu")
    if not item.availability_flag or item.sold_out:
        raise ValidationError(f"Menu item {item.name} is not available")
    return item


def _resolve_modifiers(db: Session, restaurant_id: str, modifiers: list[Any]) -> list[dict[str, Any]]:
    resolved: list[dict[str, Any]] = []
    for modifier in modifiers:
        if modifier.modifier_item_id:
            modifier_item = db.scalar(
                select(ModifierItem)
                .join(ModifierGroup, ModifierGroup.id == ModifierItem.modifier_group_id)
                .where(ModifierItem.id == modifier.modifier_item_id, ModifierGroup.restaurant_id == restaurant_id)
            )
            if modifier_item is None:
                raise ValidationError(f"Modifier {modifier.modifier_item_id} is not available")
            resolved.append(
                {
                    "modifierItemId": modifier_item.id,
                    "name": modifier_item.name,
                    "price": float(quantize_money(modifier_item.price)),
                }
            )
        else:
            if not modifier.name:
                raise ValidationError("Modifier name is required")
            resolved.append({"modifierItemId": None, "name": modifier.name, "price": float(quantize_money(modifier.price))})
    return resolved


def create_order(db: Session, payload: OrderCreate) -> LiveOrder:
    """Persist a guest order in status New with catalog prices snapshotted onto its lines."""
    restaurant = db.get(Restaurant, payload.restaurant_id)
    if restaurant is None:
        raise NotFoundError("Restaurant", payload.restaurant_id)
    if not payload.items:
        raise ValidationError("Order must contain at least one item")

    order = LiveOrder(
        restaurant_id=restaurant.id,
        table_number=payload.table_number,
        customer_name=payload.customer_name,
        notes=payload.notes,
        status="New",
        placed_at=utcnow(),
    )
    total = Decimal("0")
    for position, line in enumerate(payload.items):
        catalog_item = _load_catalog_item(db, restaurant.id, line.menu_item_id)
        if line.quantity > catalog_item.max_order_qty:
            raise ValidationError(f"At most {catalog_item.max_order_qty} of {catalog_item.name} per order")
        modifiers = _resolve_modifiers(db, restaurant.id, line.modifiers)
        unit_price = quantize_money(catalog_item.price)
        line_total = unit_price * line.quantity + sum(
            (Decimal(str(modifier["price"])) for modifier in modifiers), Decimal("0")
        )
        line_total = quantize_money(line_total)
        total += line_total
        order.items.append(
            LiveOrderItem(
                menu_item_id=catalog_item.id,
                name=catalog_item.display_name or catalog_item.name,
                quantity=line.quantity,
                unit_price=unit_price,
                modifiers=modifiers,
                line_total=line_total,
                notes=line.notes,
                position=position,
            )
        )
    order.total_amount = quantize_money(total)
    db.add(order)
    db.commit()
    db.refresh(order)
    logger.info("[ORDERS] Order %s placed for restaurant %s total=%s", order.id, order.restaurant_id, order.total_amount)
    return order


def get_order(db: Session, order_id: str) -> LiveOrder:
    order = db.get(LiveOrder, order_id)
    if order is None:
        raise NotFoundError("Order", order_id)
    return order


def get_live_orders(
    db: Session,
    *,
    restaurant_ids: list[str] | None = None,
    status: str | None = None,
    include_completed: bool = False,
) -> list[LiveOrder]:
    """Return board orders newest first; Completed orders are hidden unless asked for."""
    stmt = select(LiveOrder).options(selectinload(LiveOrder.items))
    if restaurant_ids is not None:
        stmt = stmt.where(LiveOrder.restaurant_id.in_(restaurant_ids))
    if status:
        stmt = stmt.where(LiveOrder.status == normalize_status(status))
    elif not include_completed:
        stmt = stmt.where(LiveOrder.status != TERMINAL_STATUS)
    stmt = stmt.order_by(LiveOrder.placed_at.desc())
    return list(db.scalars(stmt).all())


def update_order_status(
    db: Session, order_id: str, target: str, *, now: datetime | None = None, commit: bool = True
) -> LiveOrder:
    """Advance an order by one step; completing it also records the sale.

    With ``commit=False`` the change is only flushed so the caller can stage
    related rows (the audit entry) and commit them together.
    """
    new_status = normalize_status(target)
    order = db.scalar(select(LiveOrder).where(LiveOrder.id == order_id).with_for_update())
    if order is None:
        raise NotFoundError("Order", order_id)

    previous = order.status
    moment = now or utcnow()
    set_status(order, new_status, moment)
    if new_status == TERMINAL_STATUS:
        db.add(
            Sale(
                restaurant_id=order.restaurant_id,
                order_id=order.id,
                table_number=order.table_number,
                total_amount=order.total_amount,
                sale_date=moment,
                items=[
                    {
                        "menuItemId": line.menu_item_id,
                        "name": line.name,
                        "quantity": line.quantity,
                        "price": float(line.unit_price),
                        "lineTotal": float(line.line_total),
                    }
                    for line in order.items
                ],
            )
        )
    if commit:
        db.commit()
        db.refresh(order)
    else:
        db.flush()
    logger.info("[ORDERS] Order %s moved %s -> %s", order.id, previous, new_status)
    return order


def list_sales(
    db: Session,
    *,
    restaurant_ids: list[str] | None = None,
    start: datetime | None = None,
    end: datetime | None = None,
) -> list[Sale]:
    stmt = select(Sale)
    if restaurant_ids is not None:
        stmt = stmt.where(Sale.restaurant_id.in_(restaurant_ids))
    if start is not None:
        stmt = stmt.where(Sale.sale_date >= start)
    if end is not None:
        stmt = stmt.where(Sale.sale_date <= end)
    return list(db.scalars(stmt.order_by(Sale.sale_date.desc())).all())


def summarize_sales(sales: list[Sale], *, top: int = 10) -> dict[str, Any]:
    """Revenue, order count, average value and best sellers by revenue for a set of sales."""
    total_revenue = sum((Decimal(sale.total_amount) for sale in sales), Decimal("0"))
    total_orders = len(sales)
    average = total_revenue / total_orders if total_orders else Decimal("0")

    per_item: dict[str | None, dict[str, Any]] = {}
    for sale in sales:
        for line in sale.items or []:
            quantity = int(line.get("quantity") or 0)
            entry = per_item.setdefault(
                line.get("menuItemId"),
                {"item_id": line.get("menuItemId"), "name": "Unknown", "quantity": 0, "revenue": Decimal("0")},
            )
            entry["quantity"] += quantity
            entry["revenue"] += Decimal(str(line.get("price") or 0)) * quantity
            entry["name"] = line.get("name") or entry["name"]

    top_items = sorted(per_item.values(), key=lambda entry: entry["revenue"], reverse=True)[:top]
    return {
        "total_revenue": float(quantize_money(total_revenue)),
        "total_orders": total_orders,
        "average_order_value": float(quantize_money(average)),
        "top_items": [{**entry, "revenue": float(quantize_money(entry["revenue"]))} for entry in top_items],
    }
