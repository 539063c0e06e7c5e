"""Client-side kanban state for the live order board."""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Any

from menu_portal.utils.time import parse_timestamp, utcnow

BOARD_COLUMNS = ("New", "Preparing", "Ready")
NEW_ORDER_WINDOW = timedelta(seconds=60)


class OrderBoard:
    """Holds the latest order snapshot and reports orders that just arrived.

    The first merge only primes the board; later merges report orders in
    status New whose ids were not on the board before.
    """

    def __init__(self, new_window: timedelta = NEW_ORDER_WINDOW) -> None:
        self.new_window = new_window
        self._orders: dict[str, dict[str, Any]] = {}
        self._primed = False

    @property
    def orders(self) -> list[dict[str, Any]]:
        return sorted(self._orders.values(), key=_placed_at)

    def merge(self, orders: list[dict[str, Any]]) -> list[dict[str, Any]]:
        previous_ids = set(self._orders)
        self._orders = {order["id"]: order for order in orders}
        if not self._primed:
            self._primed = True
            return []
        arrived = [order for order in orders if order["id"] not in previous_ids and order.get("status") == "New"]
        return sorted(arrived, key=_placed_at)

    def replace(self, order: dict[str, Any]) -> None:
        """Apply a single updated order, e.g. after a status change."""
        if order.get("status") in BOARD_COLUMNS:
            self._orders[order["id"]] = order
        else:
            self._orders.pop(order["id"], None)

    def apply_event(self, event: dict[str, Any]) -> bool:
        """Apply an ``order_updated`` push; returns True when the board changed.

        New orders pushed as ``order_created`` carry no line items, so they
        are picked up on the next poll.
        """
        if event.get("type") != "order_updated":
            return False
        data = event.get("data") or {}
        order = self._orders.get(data.get("orderId"))
        if order is None:
            return False
        self.replace({**order, "status": data.get("status")})
        return True

    def columns(self) -> dict[str, list[dict[str, Any]]]:
        grouped: dict[str, list[dict[str, Any]]] = {status: [] for status in BOARD_COLUMNS}
        for order in self.orders:
            if order.get("status") in grouped:
                grouped[order["status"]].append(order)
        return grouped

    def is_new(self, order: dict[str, Any], now: datetime | None = None) -> bool:
        if order.get("status") != "New":
            return False
        return (now or utcnow()) - _placed_at(order) < self.new_window


def _placed_at(order: dict[str, Any]) -> datetime:
    return parse_timestamp(order["placedAt"])
