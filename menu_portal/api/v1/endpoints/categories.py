"""Menu category and subcategory endpoints."""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from menu_portal.api.deps import load_category_restaurant, load_restaurant, narrow_restaurant_ids
from menu_portal.core.access import Principal, require_role, require_user
from menu_portal.db.session import get_db
from menu_portal.schemas.catalog import (
    CategoryCreate,
    CategoryResponse,
    CategoryUpdate,
    SubCategoryCreate,
    SubCategoryResponse,
    SubCategoryUpdate,
)
from menu_portal.schemas.common import ApiResponse
from menu_portal.services import menu_service
from menu_portal.services.audit_service import log_action
from menu_portal.services.cascade import delete_entity

router: APIRouter = APIRouter()
subcategory_router: APIRouter = APIRouter()


@router.get("", response_model=ApiResponse[list[CategoryResponse]])
def list_categories(
    restaurant_id: str | None = Query(default=None, alias="restaurantId"),
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_user),
) -> ApiResponse[list[CategoryResponse]]:
    categories = menu_service.list_categories(db, restaurant_ids=narrow_restaurant_ids(db, principal, restaurant_id))
    return ApiResponse(data=[CategoryResponse.model_validate(category) for category in categories])


@router.get("/{category_id}", response_model=ApiResponse[CategoryResponse])
def get_category(
    category_id: str,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_user),
) -> ApiResponse[CategoryResponse]:
    return ApiResponse(data=CategoryResponse.model_validate(load_category_restaurant(db, principal, category_id)))


@router.post("", response_model=ApiResponse[CategoryResponse], status_code=status.HTTP_201_CREATED)
def create_category(
    payload: CategoryCreate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_role("Manager")),
) -> ApiResponse[CategoryResponse]:
    load_restaurant(db, principal, payload.restaurant_id)
    category = menu_service.create_category(db, payload.model_dump())
    log_action(db, actor=principal, action_type="Create", entity_type="Category", entity_id=category.id, entity_name=category.name)
    db.commit()
    db.refresh(category)
    return ApiResponse(data=CategoryResponse.model_validate(category), message="Category created")


@router.put("/{category_id}", response_model=ApiResponse[CategoryResponse])
def update_category(
    category_id: str,
    payload: CategoryUpdate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_role("Manager")),
) -> ApiResponse[CategoryResponse]:
    load_category_restaurant(db, principal, category_id)
    category, applied = menu_service.update_category(db, category_id, payload.model_dump(exclude_unset=True))
    log_action(
        db, actor=principal, action_type="Update", entity_type="Category", entity_id=category.id,
        entity_name=category.name, details={"changed": sorted(applied)},
    )
    db.commit()
    db.refresh(category)
    return ApiResponse(data=CategoryResponse.model_validate(category), message="Category updated")


@router.delete("/{category_id}", response_model=ApiResponse[None])
def delete_category(
    category_id: str,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_role("Manager")),
) -> ApiResponse[None]:
    load_category_restaurant(db, principal, category_id)
    name = delete_entity(db, "category", category_id, commit=False)
    log_action(db, actor=principal, action_type="Delete", entity_type="Category", entity_id=category_id, entity_name=name)
    db.commit()
    return ApiResponse(message="Category deleted")


@subcategory_router.get("", response_model=ApiResponse[list[SubCategoryResponse]])
def list_subcategories(
    category_id: str | None = Query(default=None, alias="categoryId"),
    restaurant_id: str | None = Query(default=None, alias="restaurantId"),
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_user),
) -> ApiResponse[list[SubCategoryResponse]]:
    if category_id is not None:
        load_category_restaurant(db, principal, category_id)
        category_ids = [category_id]
    else:
        restaurant_ids = narrow_restaurant_ids(db, principal, restaurant_id)
        category_ids = [category.id for category in menu_service.list_categories(db, restaurant_ids=restaurant_ids)]
    subcategories = menu_service.list_subcategories(db, category_ids=category_ids)
    return ApiResponse(data=[SubCategoryResponse.model_validate(subcategory) for subcategory in subcategories])


@subcategory_router.post("", response_model=ApiResponse[SubCategoryResponse], status_code=status.HTTP_201_CREATED)
def create_subcategory(
    payload: SubCategoryCreate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_role("Manager")),
) -> ApiResponse[SubCategoryResponse]:
    load_category_restaurant(db, principal, payload.category_id)
    subcategory = menu_service.create_subcategory(db, payload.model_dump())
    log_action(
        db, actor=principal, action_type="Create", entity_type="SubCategory", entity_id=subcategory.id,
        entity_name=subcategory.name,
    )
    db.commit()
    db.refresh(subcategory)
    return ApiResponse(data=SubCategoryResponse.model_validate(subcategory), message="Subcategory created")


@subcategory_router.put("/{subcategory_id}", response_model=ApiResponse[SubCategoryResponse])
def update_subcategory(
    subcategory_id: str,
    payload: SubCategoryUpdate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_role("Manager")),
) -> ApiResponse[SubCategoryResponse]:
    load_category_restaurant(db, principal, menu_service.get_subcategory(db, subcategory_id).category_id)
    subcategory, applied = menu_service.update_subcategory(db, subcategory_id, payload.model_dump(exclude_unset=True))
    log_action(
        db, actor=principal, action_type="Update", entity_type="SubCategory", entity_id=subcategory.id,
        entity_name=subcategory.name, details={"changed": sorted(applied)},
    )
    db.commit()
    db.refresh(subcategory)
    return ApiResponse(data=SubCategoryResponse.model_validate(subcategory), message="Subcategory updated")


@subcategory_router.delete("/{subcategory_id}", response_model=ApiResponse[None])
def delete_subcategory(
    subcategory_id: str,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_role("Manager")),
) -> ApiResponse[None]:
    load_category_restaurant(db, principal, menu_service.get_subcategory(db, subcategory_id).category_id)
    name = delete_entity(db, "subcategory", subcategory_id, commit=False)
    log_action(
        db, actor=principal, action_type="Delete", entity_type="SubCategory", entity_id=subcategory_id, entity_name=name
    )
    db.commit()
    return ApiResponse(message="Subcategory deleted")
