"""Live order board endpoints for staff sessions and integration tokens."""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from menu_portal.api.deps import get_broadcaster, load_restaurant, narrow_restaurant_ids
from menu_portal.core.access import Principal, get_principal
from menu_portal.db.session import get_db
from menu_portal.schemas.common import ApiResponse
from menu_portal.schemas.order import LiveOrderResponse, OrderStatusUpdate
from menu_portal.services import order_service
from menu_portal.services.audit_service import log_action
from menu_portal.services.events import ORDER_UPDATED, OrderEventBroadcaster, order_event_payload

router: APIRouter = APIRouter()


@router.get("", response_model=ApiResponse[list[LiveOrderResponse]])
def list_orders(
    restaurant_id: str | None = Query(default=None, alias="restaurantId"),
    status: str | None = Query(default=None),
    include_completed: bool = Query(default=False, alias="includeCompleted"),
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_principal),
) -> ApiResponse[list[LiveOrderResponse]]:
    orders = order_service.get_live_orders(
        db,
        restaurant_ids=narrow_restaurant_ids(db, principal, restaurant_id),
        status=status,
        include_completed=include_completed,
    )
    return ApiResponse(data=[LiveOrderResponse.model_validate(order) for order in orders])


@router.get("/{order_id}", response_model=ApiResponse[LiveOrderResponse])
def get_order(
    order_id: str,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_principal),
) -> ApiResponse[LiveOrderResponse]:
    order = order_service.get_order(db, order_id)
    load_restaurant(db, principal, order.restaurant_id)
    return ApiResponse(data=LiveOrderResponse.model_validate(order))


@router.patch("/{order_id}/status", response_model=ApiResponse[LiveOrderResponse])
def update_order_status(
    order_id: str,
    payload: OrderStatusUpdate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_principal),
    broadcaster: OrderEventBroadcaster = Depends(get_broadcaster),
) -> ApiResponse[LiveOrderResponse]:
    current = order_service.get_order(db, order_id)
    load_restaurant(db, principal, current.restaurant_id)
    previous = current.status

    order = order_service.update_order_status(db, order_id, payload.status, commit=False)
    log_action(
        db, actor=principal, action_type="StatusChange", entity_type="Order", entity_id=order.id,
        entity_name=order.table_number, details={"from": previous, "to": order.status},
    )
    db.commit()
    db.refresh(order)
    broadcaster.publish(ORDER_UPDATED, order_event_payload(order))
    return ApiResponse(data=LiveOrderResponse.model_validate(order), message=f"Order marked {order.status}")
