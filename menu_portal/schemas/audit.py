"""Audit log schemas."""

from datetime import datetime
from typing import Any

from menu_portal.schemas.common import CamelModel


class AuditLogResponse(CamelModel):
    id: str
    timestamp: datetime
    user_id: str | None = None
    user_name: str
    action_type: str
    entity_type: str
    entity_id: str | None = None
    entity_name: str | None = None
    details: dict[str, Any] | None = None
