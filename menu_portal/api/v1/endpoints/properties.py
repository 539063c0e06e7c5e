"""Property endpoints."""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from menu_portal.core.access import Principal, ensure_property_access, require_role, require_user
from menu_portal.db.session import get_db
from menu_portal.schemas.catalog import PropertyCreate, PropertyResponse, PropertyUpdate
from menu_portal.schemas.common import ApiResponse
from menu_portal.services import property_service
from menu_portal.services.audit_service import log_action
from menu_portal.services.cascade import delete_entity

router: APIRouter = APIRouter()


@router.get("", response_model=ApiResponse[list[PropertyResponse]])
def list_properties(db: Session = Depends(get_db)) -> ApiResponse[list[PropertyResponse]]:
    """Public so the sign-up form can offer a property picker."""
    properties = property_service.list_properties(db)
    return ApiResponse(data=[PropertyResponse.model_validate(prop) for prop in properties])


@router.get("/{property_id}", response_model=ApiResponse[PropertyResponse])
def get_property(
    property_id: str,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_user),
) -> ApiResponse[PropertyResponse]:
    ensure_property_access(principal, property_id)
    return ApiResponse(data=PropertyResponse.model_validate(property_service.get_property(db, property_id)))


@router.post("", response_model=ApiResponse[PropertyResponse], status_code=status.HTTP_201_CREATED)
def create_property(
    payload: PropertyCreate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_role("SuperAdmin")),
) -> ApiResponse[PropertyResponse]:
    prop = property_service.create_property(db, payload.model_dump())
    log_action(db, actor=principal, action_type="Create", entity_type="Property", entity_id=prop.id, entity_name=prop.name)
    db.commit()
    db.refresh(prop)
    return ApiResponse(data=PropertyResponse.model_validate(prop), message="Property created")


@router.put("/{property_id}", response_model=ApiResponse[PropertyResponse])
def update_property(
    property_id: str,
    payload: PropertyUpdate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_role("Admin")),
) -> ApiResponse[PropertyResponse]:
    ensure_property_access(principal, property_id)
    prop, applied = property_service.update_property(db, property_id, payload.model_dump(exclude_unset=True))
    log_action(
        db, actor=principal, action_type="Update", entity_type="Property", entity_id=prop.id, entity_name=prop.name,
        details={"changed": sorted(applied)},
    )
    db.commit()
    db.refresh(prop)
    return ApiResponse(data=PropertyResponse.model_validate(prop), message="Property updated")


@router.delete("/{property_id}", response_model=ApiResponse[None])
def delete_property(
    property_id: str,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_role("SuperAdmin")),
) -> ApiResponse[None]:
    name = delete_entity(db, "property", property_id, commit=False)
    log_action(db, actor=principal, action_type="Delete", entity_type="Property", entity_id=property_id, entity_name=name)
    db.commit()
    return ApiResponse(message="Property deleted")
