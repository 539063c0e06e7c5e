"""Audit trail endpoint."""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from menu_portal.core.access import Principal, require_role
from menu_portal.db.session import get_db
from menu_portal.schemas.audit import AuditLogResponse
from menu_portal.schemas.common import ApiResponse
from menu_portal.services.audit_service import list_audit_logs

router: APIRouter = APIRouter()


@router.get("", response_model=ApiResponse[list[AuditLogResponse]])
def list_logs(
    entity_type: str | None = Query(default=None, alias="entityType"),
    action_type: str | None = Query(default=None, alias="actionType"),
    limit: int = Query(default=200, ge=1, le=1000),
    db: Session = Depends(get_db),
    _: Principal = Depends(require_role("Admin")),
) -> ApiResponse[list[AuditLogResponse]]:
    logs = list_audit_logs(db, entity_type=entity_type, action_type=action_type, limit=limit)
    return ApiResponse(data=[AuditLogResponse.model_validate(entry) for entry in logs])
