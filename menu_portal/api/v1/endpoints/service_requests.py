"""Service request endpoints: guests raise calls, staff acknowledge and complete them."""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from menu_portal.api.deps import get_broadcaster, narrow_restaurant_ids, scoped_restaurant_ids
from menu_portal.core.access import Principal, get_principal
from menu_portal.core.errors import PermissionDeniedError
from menu_portal.db.session import get_db
from menu_portal.models import ServiceRequest
from menu_portal.schemas.common import ApiResponse
from menu_portal.schemas.service_request import ServiceRequestCreate, ServiceRequestResponse
from menu_portal.services import service_request_service
from menu_portal.services.audit_service import log_action
from menu_portal.services.events import (
    SERVICE_REQUEST_ACKNOWLEDGED,
    SERVICE_REQUEST_COMPLETED,
    SERVICE_REQUEST_CREATED,
    OrderEventBroadcaster,
    service_request_event_payload,
)

router: APIRouter = APIRouter()


def raise_service_request(
    db: Session, broadcaster: OrderEventBroadcaster, payload: ServiceRequestCreate
) -> ApiResponse[ServiceRequestResponse]:
    request = service_request_service.create_service_request(db, payload)
    broadcaster.publish(SERVICE_REQUEST_CREATED, service_request_event_payload(request))
    return ApiResponse(data=ServiceRequestResponse.model_validate(request), message="Service request created successfully")


def _ensure_visible(db: Session, principal: Principal, request: ServiceRequest) -> None:
    scope = scoped_restaurant_ids(db, principal)
    if scope is not None and request.restaurant_id not in scope:
        raise PermissionDeniedError("You do not have access to this service request")


@router.post("", response_model=ApiResponse[ServiceRequestResponse], status_code=status.HTTP_201_CREATED)
def create_service_request(
    payload: ServiceRequestCreate,
    db: Session = Depends(get_db),
    broadcaster: OrderEventBroadcaster = Depends(get_broadcaster),
) -> ApiResponse[ServiceRequestResponse]:
    return raise_service_request(db, broadcaster, payload)


@router.get("", response_model=ApiResponse[list[ServiceRequestResponse]])
def list_service_requests(
    restaurant_id: str | None = Query(default=None, alias="restaurantId"),
    request_status: str | None = Query(default=None, alias="status"),
    table_number: int | None = Query(default=None, alias="tableNumber"),
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_principal),
) -> ApiResponse[list[ServiceRequestResponse]]:
    requests = service_request_service.list_service_requests(
        db,
        restaurant_ids=narrow_restaurant_ids(db, principal, restaurant_id),
        status=request_status,
        table_number=table_number,
    )
    return ApiResponse(data=[ServiceRequestResponse.model_validate(request) for request in requests])


@router.patch("/{request_id}/acknowledge", response_model=ApiResponse[ServiceRequestResponse])
def acknowledge_service_request(
    request_id: str,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_principal),
    broadcaster: OrderEventBroadcaster = Depends(get_broadcaster),
) -> ApiResponse[ServiceRequestResponse]:
    _ensure_visible(db, principal, service_request_service.get_service_request(db, request_id))
    request = service_request_service.acknowledge_service_request(
        db, request_id, staff_member_id=principal.subject_id if principal.is_user else None, commit=False
    )
    log_action(
        db, actor=principal, action_type="StatusChange", entity_type="ServiceRequest", entity_id=request.id,
        entity_name=f"Table {request.table_number}", details={"to": request.status},
    )
    db.commit()
    db.refresh(request)
    broadcaster.publish(SERVICE_REQUEST_ACKNOWLEDGED, service_request_event_payload(request))
    return ApiResponse(data=ServiceRequestResponse.model_validate(request), message="Service request acknowledged")


@router.patch("/{request_id}/complete", response_model=ApiResponse[ServiceRequestResponse])
def complete_service_request(
    request_id: str,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_principal),
    broadcaster: OrderEventBroadcaster = Depends(get_broadcaster),
) -> ApiResponse[ServiceRequestResponse]:
    _ensure_visible(db, principal, service_request_service.get_service_request(db, request_id))
    request = service_request_service.complete_service_request(db, request_id, commit=False)
    log_action(
        db, actor=principal, action_type="StatusChange", entity_type="ServiceRequest", entity_id=request.id,
        entity_name=f"Table {request.table_number}", details={"to": request.status},
    )
    db.commit()
    db.refresh(request)
    broadcaster.publish(SERVICE_REQUEST_COMPLETED, service_request_event_payload(request))
    return ApiResponse(data=ServiceRequestResponse.model_validate(request), message="Service request completed")
