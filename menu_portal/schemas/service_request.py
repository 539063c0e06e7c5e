"""Service request schemas."""

from datetime import datetime
from typing import Literal

from pydantic import Field, model_validator

from menu_portal.schemas.common import CamelModel, LooseStr

RequestType = Literal["waiter", "water", "bill", "assistance", "other"]


class ServiceRequestCreate(CamelModel):
    """Call raised from a table; ``message`` is mandatory for ``other``."""

    table_number: int = Field(gt=0)
    request_type: RequestType
    message: str | None = None
    restaurant_id: LooseStr | None = None

    @model_validator(mode="after")
    def _require_message_for_other(self) -> "ServiceRequestCreate":
        if self.request_type == "other" and not (self.message or "").strip():
            raise ValueError('message is required when requestType is "other"')
        return self


class ServiceRequestResponse(CamelModel):
    id: str
    restaurant_id: str | None = None
    table_number: int
    request_type: str
    message: str | None = None
    status: str
    staff_member_id: str | None = None
    created_at: datetime
    acknowledged_at: datetime | None = None
    completed_at: datetime | None = None
