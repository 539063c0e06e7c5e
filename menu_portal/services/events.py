"""In-process fan-out of order and service request events to WebSocket subscribers.

Publishing happens from sync endpoints running in the threadpool, so each
subscriber remembers the event loop it was registered on and events are
handed over with ``call_soon_threadsafe``. Delivery is best-effort: a
subscriber whose queue is full misses events and catches up by polling.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any

from menu_portal.utils.time import utcnow

logger = logging.getLogger(__name__)

ORDER_CREATED = "order_created"
ORDER_UPDATED = "order_updated"
SERVICE_REQUEST_CREATED = "service_request_created"
SERVICE_REQUEST_ACKNOWLEDGED = "service_request_acknowledged"
SERVICE_REQUEST_COMPLETED = "service_request_completed"

DEFAULT_QUEUE_SIZE = 100


@dataclass(eq=False)
class Subscription:
    loop: asyncio.AbstractEventLoop
    queue: asyncio.Queue
    restaurant_ids: set[str] | None = None
    dropped: int = field(default=0)

    def wants(self, event: dict[str, Any]) -> bool:
        if self.restaurant_ids is None:
            return True
        return event.get("data", {}).get("restaurantId") in self.restaurant_ids


class OrderEventBroadcaster:
    """Tracks subscribers and pushes ``{type, data, timestamp}`` events to them."""

    def __init__(self, queue_size: int = DEFAULT_QUEUE_SIZE) -> None:
        self.queue_size = queue_size
        self._subscriptions: set[Subscription] = set()

    @property
    def subscriber_count(self) -> int:
        return len(self._subscriptions)

    def subscribe(self, restaurant_ids: set[str] | None = None) -> Subscription:
        """Register a subscriber on the running loop; call from async code."""
        subscription = Subscription(
            loop=asyncio.get_running_loop(),
            queue=asyncio.Queue(maxsize=self.queue_size),
            restaurant_ids=restaurant_ids,
        )
        self._subscriptions.add(subscription)
        logger.info("[EVENTS] Subscriber added (%s active)", len(self._subscriptions))
        return subscription

    def unsubscribe(self, subscription: Subscription) -> None:
        self._subscriptions.discard(subscription)
        logger.info("[EVENTS] Subscriber removed (%s active)", len(self._subscriptions))

    def publish(self, event_type: str, data: dict[str, Any]) -> dict[str, Any]:
        event = {"type": event_type, "data": data, "timestamp": utcnow().isoformat()}
        for subscription in list(self._subscriptions):
            if not subscription.wants(event):
                continue
            try:
                subscription.loop.call_soon_threadsafe(self._deliver, subscription, event)
            except RuntimeError:
                # Loop already closed; the socket handler will unsubscribe.
                self._subscriptions.discard(subscription)
        return event

    @staticmethod
    def _deliver(subscription: Subscription, event: dict[str, Any]) -> None:
        try:
            subscription.queue.put_nowait(event)
        except asyncio.QueueFull:
            subscription.dropped += 1
            logger.warning("[EVENTS] Subscriber queue full; dropped %s event", event["type"])


def order_event_payload(order: Any) -> dict[str, Any]:
    return {
        "orderId": order.id,
        "restaurantId": order.restaurant_id,
        "status": order.status,
        "totalAmount": float(order.total_amount),
        "tableNumber": order.table_number,
    }


def service_request_event_payload(request: Any) -> dict[str, Any]:
    moments = {
        "pending": request.created_at,
        "acknowledged": request.acknowledged_at,
        "completed": request.completed_at,
    }
    moment = moments.get(request.status)
    return {
        "requestId": request.id,
        "restaurantId": request.restaurant_id,
        "tableNumber": request.table_number,
        "requestType": request.request_type,
        "status": request.status,
        "timestamp": moment.isoformat() if moment is not None else None,
    }
