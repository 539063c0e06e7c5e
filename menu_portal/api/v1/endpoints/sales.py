"""Sales history endpoint."""

from datetime import datetime

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from menu_portal.api.deps import narrow_restaurant_ids
from menu_portal.core.access import Principal, require_user
from menu_portal.db.session import get_db
from menu_portal.schemas.common import ApiResponse
from menu_portal.schemas.order import SaleResponse
from menu_portal.services import order_service

router: APIRouter = APIRouter()


@router.get("", response_model=ApiResponse[list[SaleResponse]])
def list_sales(
    start_date: datetime | None = Query(default=None, alias="startDate"),
    end_date: datetime | None = Query(default=None, alias="endDate"),
    restaurant_id: str | None = Query(default=None, alias="restaurantId"),
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_user),
) -> ApiResponse[list[SaleResponse]]:
    sales = order_service.list_sales(
        db,
        restaurant_ids=narrow_restaurant_ids(db, principal, restaurant_id),
        start=start_date,
        end=end_date,
    )
    return ApiResponse(data=[SaleResponse.model_validate(sale) for sale in sales])
