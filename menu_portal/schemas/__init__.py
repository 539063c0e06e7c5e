"""Schema exports."""

from menu_portal.schemas.auth import AuthPayload, LoginRequest, RegisterRequest, UserResponse, UserUpdate
from menu_portal.schemas.common import ApiResponse, CamelModel
from menu_portal.schemas.menu_import import SystemImportPayload, SystemImportStats
from menu_portal.schemas.order import LiveOrderResponse, OrderCreate, OrderStatusUpdate
from menu_portal.schemas.token import ApiTokenCreate, ApiTokenCreated, ApiTokenResponse
