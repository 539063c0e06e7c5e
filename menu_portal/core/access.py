"""Access gate: resolves a bearer token to a ``Principal``.

Credentials are tried against an ordered chain of authenticators. The first
one that recognises the token wins; an authenticator that does not
recognise it returns ``None`` so the next one gets a chance. Authenticators
raise only when they recognise a credential that must be refused outright,
such as an expired API token.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Protocol

from fastapi import BackgroundTasks, Depends
from fastapi.security import HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from menu_portal.core.config import settings
from menu_portal.core.errors import AuthenticationError, PermissionDeniedError
from menu_portal.core.identity import IdentityProvider, get_identity_provider
from menu_portal.core.security import bearer_scheme, decode_signed_token
from menu_portal.db.session import get_db
from menu_portal.models import Restaurant, User
from menu_portal.models.user import DEFAULT_ROLE, normalize_user_role
from menu_portal.services.account_service import ensure_profile
from menu_portal.services.token_service import resolve_api_token, stamp_token_usage

logger = logging.getLogger(__name__)

ROLE_RANK: dict[str, int] = {"Staff": 1, "Manager": 2, "Admin": 3, "SuperAdmin": 4}


@dataclass
class Principal:
    """Authenticated caller: a user session or an API token."""

    kind: str
    subject_id: str
    name: str
    email: str | None = None
    role: str | None = None
    property_id: str | None = None
    restaurant_id: str | None = None

    @property
    def is_user(self) -> bool:
        return self.kind == "user"

    @property
    def is_api_token(self) -> bool:
        return self.kind == "api_token"

    @property
    def is_superadmin(self) -> bool:
        return self.is_user and self.role == "SuperAdmin"

    def has_role(self, minimum: str) -> bool:
        if not self.is_user or self.role is None:
            return False
        return ROLE_RANK.get(self.role, 0) >= ROLE_RANK[minimum]

    def can_access_property(self, property_id: str | None) -> bool:
        if self.is_superadmin:
            return True
        if self.is_api_token:
            if self.restaurant_id is not None:
                return False
            return self.property_id is None or self.property_id == property_id
        return self.property_id is not None and self.property_id == property_id

    def can_access_restaurant(self, restaurant: Restaurant) -> bool:
        if self.is_api_token and self.restaurant_id is not None:
            return restaurant.id == self.restaurant_id
        return self.can_access_property(restaurant.property_id)


class Authenticator(Protocol):
    name: str

    def try_authenticate(self, token: str) -> Principal | None: ...


def _user_principal(user: User) -> Principal:
    return Principal(
        kind="user",
        subject_id=user.id,
        name=user.name,
        email=user.email,
        role=user.role,
        property_id=user.property_id,
    )


class SessionAuthenticator:
    """Session tokens issued by the identity provider."""

    name = "session"

    def __init__(self, db: Session, provider: IdentityProvider) -> None:
        self.db = db
        self.provider = provider

    def try_authenticate(self, token: str) -> Principal | None:
        identity = self.provider.get_user(token)
        if identity is None:
            return None
        user = ensure_profile(self.db, identity)
        if not user.is_active:
            raise PermissionDeniedError("User account is disabled")
        return _user_principal(user)


class LegacyJwtAuthenticator:
    """Application-signed JWTs from before the identity provider existed."""

    name = "legacy_jwt"

    def __init__(self, db: Session, secret: str) -> None:
        self.db = db
        self.secret = secret

    def try_authenticate(self, token: str) -> Principal | None:
        payload: dict[str, Any] | None = decode_signed_token(
            token, secret=self.secret, algorithm=settings.jwt_algorithm
        )
        if payload is None:
            return None
        subject = payload.get("sub") or payload.get("id")
        if not subject:
            return None
        user = self.db.get(User, str(subject))
        if user is not None:
            if not user.is_active:
                raise PermissionDeniedError("User account is disabled")
            return _user_principal(user)
        return Principal(
            kind="user",
            subject_id=str(subject),
            name=payload.get("name") or payload.get("email") or str(subject),
            email=payload.get("email"),
            role=normalize_user_role(payload.get("role")) or DEFAULT_ROLE,
            property_id=payload.get("propertyId") or payload.get("property_id"),
        )


class ApiTokenAuthenticator:
    """Long-lived ``tb_`` tokens held by display clients."""

    name = "api_token"

    def __init__(self, db: Session) -> None:
        self.db = db

    def try_authenticate(self, token: str) -> Principal | None:
        api_token = resolve_api_token(self.db, token)
        if api_token is None:
            return None
        return Principal(
            kind="api_token",
            subject_id=api_token.id,
            name=api_token.name,
            property_id=api_token.property_id,
            restaurant_id=api_token.restaurant_id,
        )


class AccessGate:
    def __init__(self, authenticators: list[Authenticator]) -> None:
        self.authenticators = authenticators

    def authenticate(self, token: str | None) -> Principal:
        if not token:
            raise AuthenticationError("No token provided")
        for authenticator in self.authenticators:
            principal = authenticator.try_authenticate(token)
            if principal is not None:
                return principal
        raise AuthenticationError("Invalid or expired token")


def build_access_gate(db: Session, provider: IdentityProvider) -> AccessGate:
    authenticators: list[Authenticator] = [SessionAuthenticator(db, provider)]
    if settings.jwt_secret:
        authenticators.append(LegacyJwtAuthenticator(db, settings.jwt_secret))
    authenticators.append(ApiTokenAuthenticator(db))
    return AccessGate(authenticators)


def get_access_gate(
    db: Session = Depends(get_db),
    provider: IdentityProvider = Depends(get_identity_provider),
) -> AccessGate:
    return build_access_gate(db, provider)


def get_principal(
    background_tasks: BackgroundTasks,
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    gate: AccessGate = Depends(get_access_gate),
) -> Principal:
    """Resolve the caller from the ``Authorization: Bearer`` header."""
    token = credentials.credentials if credentials is not None else None
    principal = gate.authenticate(token)
    if principal.is_api_token:
        background_tasks.add_task(stamp_token_usage, principal.subject_id)
    return principal


def require_user(principal: Principal = Depends(get_principal)) -> Principal:
    if not principal.is_user:
        raise PermissionDeniedError("A user session is required")
    return principal


def require_role(minimum: str) -> Callable[..., Principal]:
    """Dependency factory admitting users at or above ``minimum`` in the role hierarchy."""

    def dependency(principal: Principal = Depends(require_user)) -> Principal:
        if not principal.has_role(minimum):
            raise PermissionDeniedError(f"{minimum} role required")
        return principal

    return dependency


def require_api_token(principal: Principal = Depends(get_principal)) -> Principal:
    if not principal.is_api_token:
        raise PermissionDeniedError("This endpoint requires an API token")
    return principal


def ensure_restaurant_access(principal: Principal, restaurant: Restaurant) -> None:
    if not principal.can_access_restaurant(restaurant):
        raise PermissionDeniedError("Access to this restaurant is not allowed")


def ensure_property_access(principal: Principal, property_id: str | None) -> None:
    if not principal.can_access_property(property_id):
        raise PermissionDeniedError("Access to this property is not allowed")
