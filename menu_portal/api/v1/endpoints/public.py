"""Unauthenticated guest endpoints: the digital menu, order placement and service calls."""

import logging

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from menu_portal.api.deps import get_broadcaster
from menu_portal.api.v1.endpoints.service_requests import raise_service_request
from menu_portal.db.session import get_db
from menu_portal.schemas.catalog import PublicMenu
from menu_portal.schemas.common import ApiResponse
from menu_portal.schemas.order import LiveOrderResponse, OrderCreate
from menu_portal.schemas.service_request import ServiceRequestCreate, ServiceRequestResponse
from menu_portal.services import order_service
from menu_portal.services.events import ORDER_CREATED, OrderEventBroadcaster, order_event_payload
from menu_portal.services.menu_service import build_public_menu

logger = logging.getLogger(__name__)

router: APIRouter = APIRouter()


def _menu_response(db: Session, restaurant_id: str) -> ApiResponse[PublicMenu]:
    menu = PublicMenu.model_validate(build_public_menu(db, restaurant_id))
    return ApiResponse(data=menu)


@router.get("/menu/{restaurant_id}", response_model=ApiResponse[PublicMenu])
def public_menu(restaurant_id: str, db: Session = Depends(get_db)) -> ApiResponse[PublicMenu]:
    return _menu_response(db, restaurant_id)


@router.get("/menu", response_model=ApiResponse[PublicMenu])
def public_menu_by_query(
    restaurant_id: str = Query(alias="restaurantId"),
    db: Session = Depends(get_db),
) -> ApiResponse[PublicMenu]:
    return _menu_response(db, restaurant_id)


@router.post("/orders", response_model=ApiResponse[LiveOrderResponse], status_code=status.HTTP_201_CREATED)
def place_order(
    payload: OrderCreate,
    db: Session = Depends(get_db),
    broadcaster: OrderEventBroadcaster = Depends(get_broadcaster),
) -> ApiResponse[LiveOrderResponse]:
    order = order_service.create_order(db, payload)
    broadcaster.publish(ORDER_CREATED, order_event_payload(order))
    return ApiResponse(data=LiveOrderResponse.model_validate(order), message="Order placed")


@router.post(
    "/service-requests",
    response_model=ApiResponse[ServiceRequestResponse],
    status_code=status.HTTP_201_CREATED,
)
def place_service_request(
    payload: ServiceRequestCreate,
    db: Session = Depends(get_db),
    broadcaster: OrderEventBroadcaster = Depends(get_broadcaster),
) -> ApiResponse[ServiceRequestResponse]:
    return raise_service_request(db, broadcaster, payload)
