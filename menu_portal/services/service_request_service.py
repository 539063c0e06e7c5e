"""Service request lifecycle: pending -> acknowledged -> completed."""

from __future__ import annotations

import logging
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.orm import Session

from menu_portal.core.errors import InvalidTransitionError, NotFoundError, ValidationError
from menu_portal.models import Property, Restaurant, ServiceRequest
from menu_portal.schemas.service_request import ServiceRequestCreate
from menu_portal.utils.time import utcnow

logger = logging.getLogger(__name__)

REQUEST_STATUSES: tuple[str, ...] = ("pending", "acknowledged", "completed")

ALLOWED_TRANSITIONS: dict[str, set[str]] = {
    "pending": {"acknowledged", "completed"},
    "acknowledged": {"completed"},
    "completed": set(),
}


def resolve_request_restaurant(db: Session, restaurant_ref: str | None) -> str | None:
    """Accept a restaurant id or a property tenant id; the latter maps to the property's first restaurant."""
    if not restaurant_ref:
        return None
    restaurant = db.get(Restaurant, restaurant_ref)
    if restaurant is not None:
        return restaurant.id
    prop = db.scalar(select(Property).where(Property.tenant_id == restaurant_ref).limit(1))
    if prop is not None:
        restaurant_id = db.scalar(
            select(Restaurant.id).where(Restaurant.property_id == prop.id).order_by(Restaurant.created_at).limit(1)
        )
        if restaurant_id is not None:
            return restaurant_id
    raise ValidationError("Invalid restaurantId")


def create_service_request(db: Session, payload: ServiceRequestCreate) -> ServiceRequest:
    request = ServiceRequest(
        restaurant_id=resolve_request_restaurant(db, payload.restaurant_id),
        table_number=payload.table_number,
        request_type=payload.request_type,
        message=payload.message.strip() if payload.message else None,
        status="pending",
        created_at=utcnow(),
    )
    db.add(request)
    db.commit()
    db.refresh(request)
    logger.info("[SERVICE] Table %s asked for %s (%s)", request.table_number, request.request_type, request.id)
    return request


def list_service_requests(
    db: Session,
    *,
    restaurant_ids: list[str] | None = None,
    status: str | None = None,
    table_number: int | None = None,
) -> list[ServiceRequest]:
    """Newest first. Unknown status values are ignored rather than rejected."""
    stmt = select(ServiceRequest)
    if restaurant_ids is not None:
        stmt = stmt.where(ServiceRequest.restaurant_id.in_(restaurant_ids))
    if status and status.lower() in REQUEST_STATUSES:
        stmt = stmt.where(ServiceRequest.status == status.lower())
    if table_number is not None:
        stmt = stmt.where(ServiceRequest.table_number == table_number)
    return list(db.scalars(stmt.order_by(ServiceRequest.created_at.desc())).all())


def get_service_request(db: Session, request_id: str) -> ServiceRequest:
    request = db.get(ServiceRequest, request_id)
    if request is None:
        raise NotFoundError("Service request", request_id)
    return request


def _move(request: ServiceRequest, target: str) -> None:
    if target not in ALLOWED_TRANSITIONS.get(request.status, set()):
        raise InvalidTransitionError(request.status, target, entity="service request")
    request.status = target


def acknowledge_service_request(
    db: Session,
    request_id: str,
    *,
    staff_member_id: str | None = None,
    now: datetime | None = None,
    commit: bool = True,
) -> ServiceRequest:
    request = get_service_request(db, request_id)
    _move(request, "acknowledged")
    request.acknowledged_at = now or utcnow()
    request.staff_member_id = staff_member_id
    _finish(db, request, commit)
    return request


def complete_service_request(
    db: Session, request_id: str, *, now: datetime | None = None, commit: bool = True
) -> ServiceRequest:
    request = get_service_request(db, request_id)
    _move(request, "completed")
    request.completed_at = now or utcnow()
    _finish(db, request, commit)
    return request


def _finish(db: Session, request: ServiceRequest, commit: bool) -> None:
    if commit:
        db.commit()
        db.refresh(request)
    else:
        db.flush()
    logger.info("[SERVICE] Request %s is now %s", request.id, request.status)
