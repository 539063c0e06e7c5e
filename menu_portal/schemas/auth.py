"""Authentication and user schemas."""

from datetime import datetime

from menu_portal.schemas.common import CamelModel


class LoginRequest(CamelModel):
    email: str | None = None
    password: str | None = None


class RegisterRequest(CamelModel):
    """Payload for self registration; validated by the account service."""

    name: str | None = None
    email: str | None = None
    password: str | None = None
    role: str | None = None
    property_id: str | None = None


class UserResponse(CamelModel):
    id: str
    name: str
    email: str
    role: str
    property_id: str | None = None
    is_active: bool = True
    created_at: datetime | None = None
    last_login_at: datetime | None = None


class AuthPayload(CamelModel):
    """Login/registration result: the profile plus a session token."""

    user: UserResponse
    token: str | None = None


class CurrentPrincipalResponse(CamelModel):
    id: str
    name: str
    email: str | None = None
    role: str | None = None
    property_id: str | None = None
    restaurant_id: str | None = None
    kind: str


class UserUpdate(CamelModel):
    name: str | None = None
    role: str | None = None
    property_id: str | None = None
    is_active: bool | None = None
