"""User administration endpoints."""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from menu_portal.core.access import ROLE_RANK, Principal, ensure_property_access, require_role
from menu_portal.core.errors import PermissionDeniedError
from menu_portal.db.session import get_db
from menu_portal.models.user import normalize_user_role
from menu_portal.schemas.auth import UserResponse, UserUpdate
from menu_portal.schemas.common import ApiResponse
from menu_portal.services import user_service
from menu_portal.services.audit_service import log_action

router: APIRouter = APIRouter()


@router.get("", response_model=ApiResponse[list[UserResponse]])
def list_users(
    property_id: str | None = Query(default=None, alias="propertyId"),
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_role("Admin")),
) -> ApiResponse[list[UserResponse]]:
    if not principal.is_superadmin:
        property_id = principal.property_id
        if property_id is None:
            return ApiResponse(data=[])
    users = user_service.list_users(db, property_id=property_id)
    return ApiResponse(data=[UserResponse.model_validate(user) for user in users])


@router.put("/{user_id}", response_model=ApiResponse[UserResponse])
def update_user(
    user_id: str,
    payload: UserUpdate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_role("Admin")),
) -> ApiResponse[UserResponse]:
    target = user_service.get_user(db, user_id)
    changes = payload.model_dump(exclude_unset=True)
    if not principal.is_superadmin:
        ensure_property_access(principal, target.property_id)
        if "property_id" in changes:
            ensure_property_access(principal, changes["property_id"])
        requested = normalize_user_role(changes.get("role")) if changes.get("role") else None
        if requested is not None and ROLE_RANK[requested] > ROLE_RANK.get(principal.role or "", 0):
            raise PermissionDeniedError("Cannot grant a role above your own")
    user, applied = user_service.update_user(db, user_id, changes)
    log_action(
        db, actor=principal, action_type="Update", entity_type="User", entity_id=user.id,
        entity_name=user.name, details={"changed": sorted(applied)},
    )
    db.commit()
    db.refresh(user)
    return ApiResponse(data=UserResponse.model_validate(user), message="User updated")
