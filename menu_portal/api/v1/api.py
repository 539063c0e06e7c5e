"""API router composition."""

from fastapi import APIRouter

from menu_portal.api.v1.endpoints import (
    analytics,
    api_tokens,
    audit_logs,
    auth,
    categories,
    imports,
    menu_items,
    modifiers,
    orders,
    properties,
    public,
    realtime,
    restaurants,
    sales,
    service_requests,
    users,
    vocabulary,
)

api_router: APIRouter = APIRouter()
api_router.include_router(auth.router, prefix="/auth", tags=["auth"])
api_router.include_router(properties.router, prefix="/properties", tags=["properties"])
api_router.include_router(restaurants.router, prefix="/restaurants", tags=["restaurants"])
api_router.include_router(categories.router, prefix="/categories", tags=["menu"])
api_router.include_router(categories.subcategory_router, prefix="/subcategories", tags=["menu"])
api_router.include_router(menu_items.router, prefix="/menu-items", tags=["menu"])
api_router.include_router(modifiers.group_router, prefix="/modifier-groups", tags=["modifiers"])
api_router.include_router(modifiers.item_router, prefix="/modifier-items", tags=["modifiers"])
api_router.include_router(vocabulary.allergen_router, prefix="/allergens", tags=["vocabulary"])
api_router.include_router(vocabulary.attribute_router, prefix="/attributes", tags=["vocabulary"])
api_router.include_router(users.router, prefix="/users", tags=["users"])
api_router.include_router(public.router, prefix="/public", tags=["public"])
api_router.include_router(orders.router, prefix="/orders", tags=["orders"])
api_router.include_router(sales.router, prefix="/sales", tags=["sales"])
api_router.include_router(analytics.router, prefix="/analytics", tags=["sales"])
api_router.include_router(service_requests.router, prefix="/service-requests", tags=["service-requests"])
api_router.include_router(api_tokens.router, prefix="/api-tokens", tags=["api-tokens"])
api_router.include_router(imports.router, prefix="/import", tags=["import"])
api_router.include_router(audit_logs.router, prefix="/audit-logs", tags=["audit"])
api_router.include_router(realtime.router, prefix="/ws", tags=["realtime"])
