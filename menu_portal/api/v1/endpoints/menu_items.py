"""Menu item endpoints, including bulk actions."""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from menu_portal.api.deps import load_category_restaurant, narrow_restaurant_ids
from menu_portal.core.access import Principal, require_role, require_user
from menu_portal.core.errors import PermissionDeniedError
from menu_portal.db.session import get_db
from menu_portal.schemas.catalog import (
    BulkActionRequest,
    BulkActionResult,
    MenuItemCreate,
    MenuItemResponse,
    MenuItemUpdate,
)
from menu_portal.schemas.common import ApiResponse
from menu_portal.services import menu_service
from menu_portal.services.audit_service import log_action
from menu_portal.services.cascade import delete_entity

router: APIRouter = APIRouter()


@router.get("", response_model=ApiResponse[list[MenuItemResponse]])
def list_menu_items(
    category_id: str | None = Query(default=None, alias="categoryId"),
    subcategory_id: str | None = Query(default=None, alias="subCategoryId"),
    restaurant_id: str | None = Query(default=None, alias="restaurantId"),
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_user),
) -> ApiResponse[list[MenuItemResponse]]:
    if category_id is not None:
        load_category_restaurant(db, principal, category_id)
        restaurant_ids = None
    else:
        restaurant_ids = narrow_restaurant_ids(db, principal, restaurant_id)
    items = menu_service.list_menu_items(
        db, category_id=category_id, subcategory_id=subcategory_id, restaurant_ids=restaurant_ids
    )
    return ApiResponse(data=[MenuItemResponse.model_validate(item) for item in items])


@router.post("/bulk", response_model=ApiResponse[BulkActionResult])
def bulk_action(
    payload: BulkActionRequest,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_role("Manager")),
) -> ApiResponse[BulkActionResult]:
    allowed = narrow_restaurant_ids(db, principal, None)
    if allowed is not None:
        visible = {item.id for item in menu_service.list_menu_items(db, restaurant_ids=allowed)}
        if not set(payload.item_ids) <= visible:
            raise PermissionDeniedError("Some items belong to restaurants outside your scope")
    updated = menu_service.apply_bulk_action(db, payload.action, payload.item_ids, payload.currency)
    log_action(
        db, actor=principal, action_type="Update", entity_type="MenuItem", entity_name=f"Bulk {payload.action}",
        details={"itemIds": payload.item_ids, "currency": payload.currency},
    )
    db.commit()
    return ApiResponse(data=BulkActionResult(action=payload.action, updated=updated), message="Bulk action applied")


@router.get("/{item_id}", response_model=ApiResponse[MenuItemResponse])
def get_menu_item(
    item_id: str,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_user),
) -> ApiResponse[MenuItemResponse]:
    item = menu_service.get_menu_item(db, item_id)
    load_category_restaurant(db, principal, item.category_id)
    return ApiResponse(data=MenuItemResponse.model_validate(item))


@router.post("", response_model=ApiResponse[MenuItemResponse], status_code=status.HTTP_201_CREATED)
def create_menu_item(
    payload: MenuItemCreate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_role("Manager")),
) -> ApiResponse[MenuItemResponse]:
    load_category_restaurant(db, principal, payload.category_id)
    item = menu_service.create_menu_item(db, payload.model_dump())
    log_action(db, actor=principal, action_type="Create", entity_type="MenuItem", entity_id=item.id, entity_name=item.name)
    db.commit()
    db.refresh(item)
    return ApiResponse(data=MenuItemResponse.model_validate(item), message="Menu item created")


@router.put("/{item_id}", response_model=ApiResponse[MenuItemResponse])
def update_menu_item(
    item_id: str,
    payload: MenuItemUpdate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_role("Manager")),
) -> ApiResponse[MenuItemResponse]:
    current = menu_service.get_menu_item(db, item_id)
    load_category_restaurant(db, principal, current.category_id)
    changes = payload.model_dump(exclude_unset=True)
    if changes.get("category_id"):
        load_category_restaurant(db, principal, changes["category_id"])
    item, applied = menu_service.update_menu_item(db, item_id, changes)
    log_action(
        db, actor=principal, action_type="Update", entity_type="MenuItem", entity_id=item.id, entity_name=item.name,
        details={"changed": sorted(applied)},
    )
    db.commit()
    db.refresh(item)
    return ApiResponse(data=MenuItemResponse.model_validate(item), message="Menu item updated")


@router.delete("/{item_id}", response_model=ApiResponse[None])
def delete_menu_item(
    item_id: str,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_role("Manager")),
) -> ApiResponse[None]:
    load_category_restaurant(db, principal, menu_service.get_menu_item(db, item_id).category_id)
    name = delete_entity(db, "menu_item", item_id, commit=False)
    log_action(db, actor=principal, action_type="Delete", entity_type="MenuItem", entity_id=item_id, entity_name=name)
    db.commit()
    return ApiResponse(message="Menu item deleted")
