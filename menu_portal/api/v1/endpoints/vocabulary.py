"""Allergen and attribute vocabulary endpoints."""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from menu_portal.core.access import Principal, require_role, require_user
from menu_portal.db.session import get_db
from menu_portal.schemas.catalog import AllergenCreate, AllergenResponse, AttributeCreate, AttributeResponse
from menu_portal.schemas.common import ApiResponse
from menu_portal.services import vocabulary_service
from menu_portal.services.audit_service import log_action
from menu_portal.services.cascade import delete_entity

allergen_router: APIRouter = APIRouter()
attribute_router: APIRouter = APIRouter()


@allergen_router.get("", response_model=ApiResponse[list[AllergenResponse]])
def list_allergens(
    db: Session = Depends(get_db),
    _: Principal = Depends(require_user),
) -> ApiResponse[list[AllergenResponse]]:
    return ApiResponse(data=[AllergenResponse.model_validate(row) for row in vocabulary_service.list_allergens(db)])


@allergen_router.post("", response_model=ApiResponse[AllergenResponse], status_code=status.HTTP_201_CREATED)
def create_allergen(
    payload: AllergenCreate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_role("Admin")),
) -> ApiResponse[AllergenResponse]:
    allergen = vocabulary_service.create_allergen(db, payload.model_dump())
    log_action(db, actor=principal, action_type="Create", entity_type="Allergen", entity_id=allergen.id, entity_name=allergen.name)
    db.commit()
    db.refresh(allergen)
    return ApiResponse(data=AllergenResponse.model_validate(allergen), message="Allergen created")


@allergen_router.put("/{allergen_id}", response_model=ApiResponse[AllergenResponse])
def update_allergen(
    allergen_id: str,
    payload: AllergenCreate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_role("Admin")),
) -> ApiResponse[AllergenResponse]:
    allergen, applied = vocabulary_service.update_allergen(db, allergen_id, payload.model_dump(exclude_unset=True))
    log_action(
        db, actor=principal, action_type="Update", entity_type="Allergen", entity_id=allergen.id,
        entity_name=allergen.name, details={"changed": sorted(applied)},
    )
    db.commit()
    db.refresh(allergen)
    return ApiResponse(data=AllergenResponse.model_validate(allergen), message="Allergen updated")


@allergen_router.delete("/{allergen_id}", response_model=ApiResponse[None])
def delete_allergen(
    allergen_id: str,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_role("Admin")),
) -> ApiResponse[None]:
    name = delete_entity(db, "allergen", allergen_id, commit=False)
    log_action(db, actor=principal, action_type="Delete", entity_type="Allergen", entity_id=allergen_id, entity_name=name)
    db.commit()
    return ApiResponse(message="Allergen deleted")


@attribute_router.get("", response_model=ApiResponse[list[AttributeResponse]])
def list_attributes(
    db: Session = Depends(get_db),
    _: Principal = Depends(require_user),
) -> ApiResponse[list[AttributeResponse]]:
    return ApiResponse(data=[AttributeResponse.model_validate(row) for row in vocabulary_service.list_attributes(db)])


@attribute_router.post("", response_model=ApiResponse[AttributeResponse], status_code=status.HTTP_201_CREATED)
def create_attribute(
    payload: AttributeCreate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_role("Admin")),
) -> ApiResponse[AttributeResponse]:
    attribute = vocabulary_service.create_attribute(db, payload.model_dump())
    log_action(
        db, actor=principal, action_type="Create", entity_type="Attribute", entity_id=attribute.id,
        entity_name=attribute.name,
    )
    db.commit()
    db.refresh(attribute)
    return ApiResponse(data=AttributeResponse.model_validate(attribute), message="Attribute created")


@attribute_router.put("/{attribute_id}", response_model=ApiResponse[AttributeResponse])
def update_attribute(
    attribute_id: str,
    payload: AttributeCreate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_role("Admin")),
) -> ApiResponse[AttributeResponse]:
    attribute, applied = vocabulary_service.update_attribute(db, attribute_id, payload.model_dump(exclude_unset=True))
    log_action(
        db, actor=principal, action_type="Update", entity_type="Attribute", entity_id=attribute.id,
        entity_name=attribute.name, details={"changed": sorted(applied)},
    )
    db.commit()
    db.refresh(attribute)
    return ApiResponse(data=AttributeResponse.model_validate(attribute), message="Attribute updated")


@attribute_router.delete("/{attribute_id}", response_model=ApiResponse[None])
def delete_attribute(
    attribute_id: str,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_role("Admin")),
) -> ApiResponse[None]:
    name = delete_entity(db, "attribute", attribute_id, commit=False)
    log_action(db, actor=principal, action_type="Delete", entity_type="Attribute", entity_id=attribute_id, entity_name=name)
    db.commit()
    return ApiResponse(message="Attribute deleted")
