"""Modifier group and modifier item endpoints."""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from menu_portal.api.deps import load_restaurant, narrow_restaurant_ids
from menu_portal.core.access import Principal, require_role, require_user
from menu_portal.db.session import get_db
from menu_portal.schemas.catalog import (
    ModifierGroupCreate,
    ModifierGroupResponse,
    ModifierGroupUpdate,
    ModifierItemCreate,
    ModifierItemResponse,
    ModifierItemUpdate,
)
from menu_portal.schemas.common import ApiResponse
from menu_portal.services import modifier_service
from menu_portal.services.audit_service import log_action
from menu_portal.services.cascade import delete_entity

group_router: APIRouter = APIRouter()
item_router: APIRouter = APIRouter()


def _require_group_access(db: Session, principal: Principal, group_id: str) -> None:
    group = modifier_service.get_modifier_group(db, group_id)
    load_restaurant(db, principal, group.restaurant_id)


@group_router.get("", response_model=ApiResponse[list[ModifierGroupResponse]])
def list_modifier_groups(
    restaurant_id: str | None = Query(default=None, alias="restaurantId"),
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_user),
) -> ApiResponse[list[ModifierGroupResponse]]:
    groups = modifier_service.list_modifier_groups(db, restaurant_ids=narrow_restaurant_ids(db, principal, restaurant_id))
    return ApiResponse(data=[ModifierGroupResponse.model_validate(group) for group in groups])


@group_router.post("", response_model=ApiResponse[ModifierGroupResponse], status_code=status.HTTP_201_CREATED)
def create_modifier_group(
    payload: ModifierGroupCreate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_role("Manager")),
) -> ApiResponse[ModifierGroupResponse]:
    load_restaurant(db, principal, payload.restaurant_id)
    group = modifier_service.create_modifier_group(db, payload.model_dump())
    log_action(db, actor=principal, action_type="Create", entity_type="ModifierGroup", entity_id=group.id, entity_name=group.name)
    db.commit()
    db.refresh(group)
    return ApiResponse(data=ModifierGroupResponse.model_validate(group), message="Modifier group created")


@group_router.put("/{group_id}", response_model=ApiResponse[ModifierGroupResponse])
def update_modifier_group(
    group_id: str,
    payload: ModifierGroupUpdate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_role("Manager")),
) -> ApiResponse[ModifierGroupResponse]:
    _require_group_access(db, principal, group_id)
    group, applied = modifier_service.update_modifier_group(db, group_id, payload.model_dump(exclude_unset=True))
    log_action(
        db, actor=principal, action_type="Update", entity_type="ModifierGroup", entity_id=group.id,
        entity_name=group.name, details={"changed": sorted(applied)},
    )
    db.commit()
    db.refresh(group)
    return ApiResponse(data=ModifierGroupResponse.model_validate(group), message="Modifier group updated")


@group_router.delete("/{group_id}", response_model=ApiResponse[None])
def delete_modifier_group(
    group_id: str,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_role("Manager")),
) -> ApiResponse[None]:
    _require_group_access(db, principal, group_id)
    name = delete_entity(db, "modifier_group", group_id, commit=False)
    log_action(db, actor=principal, action_type="Delete", entity_type="ModifierGroup", entity_id=group_id, entity_name=name)
    db.commit()
    return ApiResponse(message="Modifier group deleted")


@item_router.get("", response_model=ApiResponse[list[ModifierItemResponse]])
def list_modifier_items(
    group_id: str = Query(alias="modifierGroupId"),
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_user),
) -> ApiResponse[list[ModifierItemResponse]]:
    _require_group_access(db, principal, group_id)
    items = modifier_service.list_modifier_items(db, group_id=group_id)
    return ApiResponse(data=[ModifierItemResponse.model_validate(item) for item in items])


@item_router.post("", response_model=ApiResponse[ModifierItemResponse], status_code=status.HTTP_201_CREATED)
def create_modifier_item(
    payload: ModifierItemCreate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_role("Manager")),
) -> ApiResponse[ModifierItemResponse]:
    _require_group_access(db, principal, payload.modifier_group_id)
    item = modifier_service.create_modifier_item(db, payload.model_dump())
    log_action(db, actor=principal, action_type="Create", entity_type="ModifierItem", entity_id=item.id, entity_name=item.name)
    db.commit()
    db.refresh(item)
    return ApiResponse(data=ModifierItemResponse.model_validate(item), message="Modifier item created")


@item_router.put("/{item_id}", response_model=ApiResponse[ModifierItemResponse])
def update_modifier_item(
    item_id: str,
    payload: ModifierItemUpdate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_role("Manager")),
) -> ApiResponse[ModifierItemResponse]:
    _require_group_access(db, principal, modifier_service.get_modifier_item(db, item_id).modifier_group_id)
    item, applied = modifier_service.update_modifier_item(db, item_id, payload.model_dump(exclude_unset=True))
    log_action(
        db, actor=principal, action_type="Update", entity_type="ModifierItem", entity_id=item.id,
        entity_name=item.name, details={"changed": sorted(applied)},
    )
    db.commit()
    db.refresh(item)
    return ApiResponse(data=ModifierItemResponse.model_validate(item), message="Modifier item updated")


@item_router.delete("/{item_id}", response_model=ApiResponse[None])
def delete_modifier_item(
    item_id: str,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_role("Manager")),
) -> ApiResponse[None]:
    _require_group_access(db, principal, modifier_service.get_modifier_item(db, item_id).modifier_group_id)
    name = delete_entity(db, "modifier_item", item_id, commit=False)
    log_action(db, actor=principal, action_type="Delete", entity_type="ModifierItem", entity_id=item_id, entity_name=name)
    db.commit()
    return ApiResponse(message="Modifier item deleted")
