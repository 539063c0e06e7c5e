"""Authentication endpoints."""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from menu_portal.core.access import Principal, get_principal
from menu_portal.core.identity import IdentityProvider, get_identity_provider
from menu_portal.db.session import get_db
from menu_portal.schemas.auth import AuthPayload, CurrentPrincipalResponse, LoginRequest, RegisterRequest, UserResponse
from menu_portal.schemas.common import ApiResponse
from menu_portal.services import account_service
from menu_portal.services.audit_service import log_action

router: APIRouter = APIRouter()


@router.post("/login", response_model=ApiResponse[AuthPayload])
def login(
    payload: LoginRequest,
    db: Session = Depends(get_db),
    provider: IdentityProvider = Depends(get_identity_provider),
) -> ApiResponse[AuthPayload]:
    """Exchange email and password for a session token."""
    user, token = account_service.login(db, provider, payload.email, payload.password)
    return ApiResponse(data=AuthPayload(user=UserResponse.model_validate(user), token=token), message="Login successful")


@router.post("/register", response_model=ApiResponse[AuthPayload], status_code=status.HTTP_201_CREATED)
def register(
    payload: RegisterRequest,
    db: Session = Depends(get_db),
    provider: IdentityProvider = Depends(get_identity_provider),
) -> ApiResponse[AuthPayload]:
    user, token = account_service.register(db, provider, payload)
    principal = Principal(kind="user", subject_id=user.id, name=user.name, email=user.email, role=user.role)
    log_action(db, actor=principal, action_type="Create", entity_type="User", entity_id=user.id, entity_name=user.name)
    db.commit()
    return ApiResponse(
        data=AuthPayload(user=UserResponse.model_validate(user), token=token),
        message="Registration successful",
    )


@router.get("/me", response_model=ApiResponse[CurrentPrincipalResponse])
def me(principal: Principal = Depends(get_principal)) -> ApiResponse[CurrentPrincipalResponse]:
    return ApiResponse(
        data=CurrentPrincipalResponse(
            id=principal.subject_id,
            name=principal.name,
            email=principal.email,
            role=principal.role,
            property_id=principal.property_id,
            restaurant_id=principal.restaurant_id,
            kind=principal.kind,
        )
    )


@router.post("/logout", response_model=ApiResponse[None])
def logout() -> ApiResponse[None]:
    """Session tokens are stateless; clients discard theirs."""
    return ApiResponse(message="Logged out successfully")
