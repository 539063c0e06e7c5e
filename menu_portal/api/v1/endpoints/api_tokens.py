"""API token management for integrations and display clients."""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from menu_portal.core.access import Principal, require_api_token, require_role
from menu_portal.db.session import get_db
from menu_portal.schemas.common import ApiResponse
from menu_portal.schemas.token import ApiTokenCreate, ApiTokenCreated, ApiTokenResponse, TokenVerification
from menu_portal.services import token_service
from menu_portal.services.audit_service import log_action

router: APIRouter = APIRouter()


@router.get("", response_model=ApiResponse[list[ApiTokenResponse]])
def list_tokens(
    db: Session = Depends(get_db),
    _: Principal = Depends(require_role("SuperAdmin")),
) -> ApiResponse[list[ApiTokenResponse]]:
    return ApiResponse(data=[ApiTokenResponse.model_validate(token) for token in token_service.list_api_tokens(db)])


@router.post("", response_model=ApiResponse[ApiTokenCreated], status_code=status.HTTP_201_CREATED)
def generate_token(
    payload: ApiTokenCreate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_role("SuperAdmin")),
) -> ApiResponse[ApiTokenCreated]:
    """Generate a token; the raw value appears in this response only."""
    token, raw_token = token_service.generate_api_token(
        db,
        name=payload.name,
        restaurant_id=payload.restaurant_id,
        property_id=payload.property_id,
        expires_in_days=payload.expires_in_days,
        created_by=principal.subject_id,
    )
    log_action(db, actor=principal, action_type="Create", entity_type="ApiToken", entity_id=token.id, entity_name=token.name)
    db.commit()
    db.refresh(token)
    created = ApiTokenCreated(**ApiTokenResponse.model_validate(token).model_dump(), token=raw_token)
    return ApiResponse(data=created, message="Token generated. Store it now; it will not be shown again.")


@router.get("/verify", response_model=ApiResponse[TokenVerification])
def verify_token(
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_api_token),
) -> ApiResponse[TokenVerification]:
    token = token_service.get_api_token(db, principal.subject_id)
    return ApiResponse(
        data=TokenVerification(
            valid=True,
            token_id=token.id,
            name=token.name,
            restaurant_id=token.restaurant_id,
            property_id=token.property_id,
            expires_at=token.expires_at,
        )
    )


def _toggle(db: Session, principal: Principal, token_id: str, is_active: bool) -> ApiTokenResponse:
    token = token_service.set_token_active(db, token_id, is_active)
    log_action(
        db, actor=principal, action_type="Activate" if is_active else "Revoke", entity_type="ApiToken",
        entity_id=token.id, entity_name=token.name,
    )
    db.commit()
    db.refresh(token)
    return ApiTokenResponse.model_validate(token)


@router.patch("/{token_id}/revoke", response_model=ApiResponse[ApiTokenResponse])
def revoke_token(
    token_id: str,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_role("SuperAdmin")),
) -> ApiResponse[ApiTokenResponse]:
    return ApiResponse(data=_toggle(db, principal, token_id, False), message="Token revoked")


@router.patch("/{token_id}/activate", response_model=ApiResponse[ApiTokenResponse])
def activate_token(
    token_id: str,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_role("SuperAdmin")),
) -> ApiResponse[ApiTokenResponse]:
    return ApiResponse(data=_toggle(db, principal, token_id, True), message="Token activated")


@router.delete("/{token_id}", response_model=ApiResponse[None])
def delete_token(
    token_id: str,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_role("SuperAdmin")),
) -> ApiResponse[None]:
    token = token_service.delete_api_token(db, token_id)
    log_action(db, actor=principal, action_type="Delete", entity_type="ApiToken", entity_id=token_id, entity_name=token.name)
    db.commit()
    return ApiResponse(message="Token deleted")
