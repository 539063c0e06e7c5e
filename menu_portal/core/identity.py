"""Identity provider: credential storage and session-token issuance.

The rest of the application talks to the provider only through the
``IdentityProvider`` protocol, so a hosted provider can replace the
database-backed one without touching the access gate.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Protocol

from fastapi import Depends
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from menu_portal.core.config import settings
from menu_portal.core.errors import AuthenticationError, ConflictError
from menu_portal.core.security import (
    create_signed_token,
    decode_signed_token,
    get_password_hash,
    verify_password,
)
from menu_portal.db.session import get_db
from menu_portal.models import IdentityAccount
from menu_portal.utils.time import utcnow

logger = logging.getLogger(__name__)

SESSION_AUDIENCE = "authenticated"


@dataclass
class IdentityUser:
    id: str
    email: str
    user_metadata: dict[str, Any] = field(default_factory=dict)


@dataclass
class IdentitySession:
    user: IdentityUser
    access_token: str


class IdentityProvider(Protocol):
    def sign_in_with_password(self, email: str, password: str) -> IdentitySession: ...

    def sign_up(self, email: str, password: str, user_metadata: dict[str, Any]) -> IdentitySession: ...

    def get_user(self, access_token: str) -> IdentityUser | None: ...

    def sign_out(self, access_token: str) -> None: ...


class DatabaseIdentityProvider:
    """Identity provider backed by the ``identity_accounts`` table."""

    def __init__(self, db: Session, *, secret: str | None = None, expire_minutes: int | None = None) -> None:
        self.db = db
        self.secret = secret or settings.identity_jwt_secret
        self.expire_minutes = expire_minutes or settings.session_expire_minutes

    def _issue(self, account: IdentityAccount) -> IdentitySession:
        token = create_signed_token(
            {"sub": account.id, "email": account.email, "user_metadata": account.user_metadata or {}},
            secret=self.secret,
            algorithm=settings.jwt_algorithm,
            expires_minutes=self.expire_minutes,
            audience=SESSION_AUDIENCE,
        )
        user = IdentityUser(id=account.id, email=account.email, user_metadata=dict(account.user_metadata or {}))
        return IdentitySession(user=user, access_token=token)

    def _find_account(self, email: str) -> IdentityAccount | None:
        normalized = email.strip().lower()
        return self.db.scalar(
            select(IdentityAccount).where(func.lower(IdentityAccount.email) == normalized).limit(1)
        )

    def sign_in_with_password(self, email: str, password: str) -> IdentitySession:
        account = self._find_account(email)
        if account is None or not verify_password(password, account.password_hash):
            raise AuthenticationError("Invalid login credentials")
        account.last_sign_in_at = utcnow()
        self.db.flush()
        return self._issue(account)

    def sign_up(self, email: str, password: str, user_metadata: dict[str, Any]) -> IdentitySession:
        if self._find_account(email) is not None:
            raise ConflictError("Email already registered")
        account = IdentityAccount(
            email=email.strip().lower(),
            password_hash=get_password_hash(password),
            user_metadata=dict(user_metadata),
        )
        self.db.add(account)
        self.db.flush()
        logger.info("[AUTH] Identity account created for %s", account.email)
        return self._issue(account)

    def get_user(self, access_token: str) -> IdentityUser | None:
        payload = decode_signed_token(
            access_token,
            secret=self.secret,
            algorithm=settings.jwt_algorithm,
            audience=SESSION_AUDIENCE,
        )
        if payload is None or not payload.get("sub"):
            return None
        account = self.db.get(IdentityAccount, payload["sub"])
        if account is None:
            return None
        return IdentityUser(id=account.id, email=account.email, user_metadata=dict(account.user_metadata or {}))

    def sign_out(self, access_token: str) -> None:
        # Session tokens are stateless; the client drops its copy.
        return None


def get_identity_provider(db: Session = Depends(get_db)) -> IdentityProvider:
    """Request-scoped identity provider dependency."""
    return DatabaseIdentityProvider(db)
