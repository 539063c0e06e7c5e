"""Sales analytics over a trailing window."""

from datetime import datetime, timedelta

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from menu_portal.api.deps import narrow_restaurant_ids
from menu_portal.core.access import Principal, require_user
from menu_portal.db.session import get_db
from menu_portal.schemas.common import ApiResponse
from menu_portal.schemas.order import SalesAnalytics
from menu_portal.services import order_service
from menu_portal.utils.time import utcnow

router: APIRouter = APIRouter()

DEFAULT_WINDOW_DAYS = 30


@router.get("", response_model=ApiResponse[SalesAnalytics])
def sales_analytics(
    restaurant_id: str | None = Query(default=None, alias="restaurantId"),
    start_date: datetime | None = Query(default=None, alias="startDate"),
    end_date: datetime | None = Query(default=None, alias="endDate"),
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_user),
) -> ApiResponse[SalesAnalytics]:
    sales = order_service.list_sales(
        db,
        restaurant_ids=narrow_restaurant_ids(db, principal, restaurant_id),
        start=start_date or utcnow() - timedelta(days=DEFAULT_WINDOW_DAYS),
        end=end_date,
    )
    return ApiResponse(data=SalesAnalytics.model_validate(order_service.summarize_sales(sales)))
