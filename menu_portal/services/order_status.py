"""Order status transition helpers."""

from __future__ import annotations

from datetime import datetime

from menu_portal.core.errors import InvalidTransitionError, ValidationError
from menu_portal.models.order import LiveOrder

ORDER_STATUSES: list[str] = ["New", "Preparing", "Ready", "Completed"]
TERMINAL_STATUS: str = "Completed"

ALLOWED_TRANSITIONS: dict[str, set[str]] = {
    "New": {"Preparing"},
    "Preparing": {"Ready"},
    "Ready": {"Completed"},
    "Completed": set(),
}


def normalize_status(value: str | None) -> str:
    """Map a status name case-insensitively onto ``ORDER_STATUSES``."""
    lookup = {status.lower(): status for status in ORDER_STATUSES}
    normalized = lookup.get(str(value or "").strip().lower())
    if normalized is None:
        raise ValidationError(f"Unknown order status: {value}")
    return normalized


def can_transition(current: str, new: str) -> bool:
    """Return whether order can move from current to new status."""
    return new in ALLOWED_TRANSITIONS.get(current, set())


def next_status(current: str) -> str | None:
    successors = ALLOWED_TRANSITIONS.get(current, set())
    return next(iter(successors), None)


def set_status(order: LiveOrder, new_status: str, now: datetime) -> None:
    """Move ``order`` to ``new_status`` or raise when the step is not the single legal successor."""
    if not can_transition(order.status, new_status):
        raise InvalidTransitionError(order.status, new_status)
    order.status = new_status
    order.status_updated_at = now
