"""API token schemas."""

from datetime import datetime

from pydantic import Field

from menu_portal.schemas.common import CamelModel


class ApiTokenCreate(CamelModel):
    name: str | None = None
    restaurant_id: str | None = None
    property_id: str | None = None
    expires_in_days: int | None = Field(default=None, ge=1)


class ApiTokenResponse(CamelModel):
    """Token metadata; never carries the raw token value."""

    id: str
    name: str
    token_preview: str
    restaurant_id: str | None = None
    property_id: str | None = None
    is_active: bool
    expires_at: datetime | None = None
    created_at: datetime
    last_used_at: datetime | None = None
    created_by: str | None = None


class ApiTokenCreated(ApiTokenResponse):
    """Returned once at generation time, including the raw token."""

    token: str


class TokenVerification(CamelModel):
    valid: bool
    token_id: str
    name: str
    restaurant_id: str | None = None
    property_id: str | None = None
    expires_at: datetime | None = None
