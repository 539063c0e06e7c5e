"""Menu import endpoints."""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from menu_portal.api.deps import load_restaurant
from menu_portal.core.access import Principal, require_role
from menu_portal.db.session import get_db
from menu_portal.schemas.common import ApiResponse
from menu_portal.schemas.menu_import import JsonMenuPayload, MenuImportStats, SystemImportPayload, SystemImportStats
from menu_portal.services.audit_service import log_action
from menu_portal.services.menu_import import import_menu_from_json, import_system_menu

router: APIRouter = APIRouter()


@router.post("/system-menu", response_model=ApiResponse[SystemImportStats])
def import_system(
    payload: SystemImportPayload,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_role("Admin")),
) -> ApiResponse[SystemImportStats]:
    stats = import_system_menu(db, payload)
    log_action(
        db, actor=principal, action_type="Import", entity_type="Menu", entity_name="system-menu",
        details=stats.model_dump(mode="json"),
    )
    db.commit()
    return ApiResponse(data=stats, message="System menu imported")


@router.post("/menu", response_model=ApiResponse[MenuImportStats])
def import_json_menu(
    payload: JsonMenuPayload,
    restaurant_id: str = Query(alias="restaurantId"),
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_role("Admin")),
) -> ApiResponse[MenuImportStats]:
    restaurant = load_restaurant(db, principal, restaurant_id)
    stats = import_menu_from_json(db, restaurant.id, payload)
    log_action(
        db, actor=principal, action_type="Import", entity_type="Menu", entity_id=restaurant_id,
        entity_name=restaurant.name, details=stats.model_dump(mode="json"),
    )
    db.commit()
    return ApiResponse(data=stats, message="Menu imported")
