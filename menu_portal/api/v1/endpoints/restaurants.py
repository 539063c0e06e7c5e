"""Restaurant endpoints."""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from menu_portal.api.deps import load_restaurant, scoped_restaurant_ids
from menu_portal.core.access import Principal, ensure_property_access, require_role, require_user
from menu_portal.db.session import get_db
from menu_portal.schemas.catalog import RestaurantCreate, RestaurantResponse, RestaurantUpdate
from menu_portal.schemas.common import ApiResponse
from menu_portal.services import property_service
from menu_portal.services.audit_service import log_action
from menu_portal.services.cascade import delete_entity

router: APIRouter = APIRouter()


@router.get("", response_model=ApiResponse[list[RestaurantResponse]])
def list_restaurants(
    property_id: str | None = Query(default=None, alias="propertyId"),
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_user),
) -> ApiResponse[list[RestaurantResponse]]:
    restaurants = property_service.list_restaurants(
        db, property_id=property_id, restaurant_ids=scoped_restaurant_ids(db, principal)
    )
    return ApiResponse(data=[RestaurantResponse.model_validate(restaurant) for restaurant in restaurants])


@router.get("/{restaurant_id}", response_model=ApiResponse[RestaurantResponse])
def get_restaurant(
    restaurant_id: str,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_user),
) -> ApiResponse[RestaurantResponse]:
    return ApiResponse(data=RestaurantResponse.model_validate(load_restaurant(db, principal, restaurant_id)))


@router.post("", response_model=ApiResponse[RestaurantResponse], status_code=status.HTTP_201_CREATED)
def create_restaurant(
    payload: RestaurantCreate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_role("Admin")),
) -> ApiResponse[RestaurantResponse]:
    ensure_property_access(principal, payload.property_id)
    restaurant = property_service.create_restaurant(db, payload.model_dump())
    log_action(
        db, actor=principal, action_type="Create", entity_type="Restaurant", entity_id=restaurant.id,
        entity_name=restaurant.name,
    )
    db.commit()
    db.refresh(restaurant)
    return ApiResponse(data=RestaurantResponse.model_validate(restaurant), message="Restaurant created")


@router.put("/{restaurant_id}", response_model=ApiResponse[RestaurantResponse])
def update_restaurant(
    restaurant_id: str,
    payload: RestaurantUpdate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_role("Admin")),
) -> ApiResponse[RestaurantResponse]:
    load_restaurant(db, principal, restaurant_id)
    changes = payload.model_dump(exclude_unset=True)
    if changes.get("property_id"):
        ensure_property_access(principal, changes["property_id"])
    restaurant, applied = property_service.update_restaurant(db, restaurant_id, changes)
    log_action(
        db, actor=principal, action_type="Update", entity_type="Restaurant", entity_id=restaurant.id,
        entity_name=restaurant.name, details={"changed": sorted(applied)},
    )
    db.commit()
    db.refresh(restaurant)
    return ApiResponse(data=RestaurantResponse.model_validate(restaurant), message="Restaurant updated")


@router.delete("/{restaurant_id}", response_model=ApiResponse[None])
def delete_restaurant(
    restaurant_id: str,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_role("Admin")),
) -> ApiResponse[None]:
    load_restaurant(db, principal, restaurant_id)
    name = delete_entity(db, "restaurant", restaurant_id, commit=False)
    log_action(
        db, actor=principal, action_type="Delete", entity_type="Restaurant", entity_id=restaurant_id, entity_name=name
    )
    db.commit()
    return ApiResponse(message="Restaurant deleted")
