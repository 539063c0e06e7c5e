"""WebSocket push channel for order events.

Clients connect to ``/api/ws/orders?token=...`` with a session token or an
API token, receive a ``connected`` frame, then every order and service request event
in their restaurant scope. A text ``ping`` is answered with ``pong``.
"""

from __future__ import annotations

import asyncio
import logging

from fastapi import APIRouter, Query, WebSocket, WebSocketDisconnect, status
from starlette.concurrency import run_in_threadpool

from menu_portal.api.deps import scoped_restaurant_ids
from menu_portal.core.access import Principal, build_access_gate
from menu_portal.core.errors import PortalError
from menu_portal.core.identity import DatabaseIdentityProvider
from menu_portal.db import session as db_session
from menu_portal.services.events import OrderEventBroadcaster, Subscription
from menu_portal.utils.time import utcnow

logger = logging.getLogger(__name__)

router: APIRouter = APIRouter()


def _authenticate(token: str | None) -> tuple[Principal, set[str] | None]:
    db = db_session.SessionLocal()
    try:
        gate = build_access_gate(db, DatabaseIdentityProvider(db))
        principal = gate.authenticate(token)
        restaurant_ids = scoped_restaurant_ids(db, principal)
    finally:
        db.close()
    return principal, None if restaurant_ids is None else set(restaurant_ids)


async def _pump(websocket: WebSocket, subscription: Subscription) -> None:
    while True:
        event = await subscription.queue.get()
        await websocket.send_json(event)


@router.websocket("/orders")
async def order_events(websocket: WebSocket, token: str | None = Query(default=None)) -> None:
    try:
        principal, restaurant_ids = await run_in_threadpool(_authenticate, token)
    except PortalError as exc:
        logger.info("[EVENTS] WebSocket rejected: %s", exc.message)
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION, reason=exc.message)
        return

    await websocket.accept()
    broadcaster: OrderEventBroadcaster = websocket.app.state.broadcaster
    subscription = broadcaster.subscribe(restaurant_ids)
    pump = asyncio.create_task(_pump(websocket, subscription))
    logger.info("[EVENTS] %s %s connected", principal.kind, principal.subject_id)
    try:
        await websocket.send_json(
            {
                "type": "connected",
                "data": {"kind": principal.kind, "restaurantIds": sorted(restaurant_ids) if restaurant_ids else None},
                "timestamp": utcnow().isoformat(),
            }
        )
        while True:
            message = await websocket.receive_text()
            if message.strip().lower() == "ping":
                await websocket.send_text("pong")
    except WebSocketDisconnect:
        logger.info("[EVENTS] %s %s disconnected", principal.kind, principal.subject_id)
    finally:
        pump.cancel()
        await asyncio.gather(pump, return_exceptions=True)
        broadcaster.unsubscribe(subscription)
