"""Account provisioning: login, registration and bootstrap admin."""

from __future__ import annotations

import logging
import re

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from menu_portal.core.config import settings
from menu_portal.core.errors import ConflictError, NotFoundError, PermissionDeniedError, ValidationError
from menu_portal.core.identity import IdentityProvider, IdentityUser
from menu_portal.core.security import get_password_hash
from menu_portal.models import IdentityAccount, Property, User
from menu_portal.models.user import DEFAULT_ROLE, normalize_user_role
from menu_portal.schemas.auth import RegisterRequest
from menu_portal.utils.time import utcnow

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
MIN_PASSWORD_LENGTH = 6


def ensure_profile(db: Session, identity: IdentityUser) -> User:
    """Return the profile for ``identity``, creating it from account metadata on first sight."""
    user = db.get(User, identity.id)
    if user is not None:
        return user

    metadata = identity.user_metadata or {}
    role = normalize_user_role(metadata.get("role")) or DEFAULT_ROLE
    user = User(
        id=identity.id,
        name=metadata.get("name") or identity.email,
        email=identity.email,
        role=role,
        property_id=metadata.get("property_id") or metadata.get("propertyId"),
        is_active=True,
    )
    db.add(user)
    db.flush()
    logger.info("[AUTH] Provisioned profile for %s with role %s", identity.email, role)
    return user


def login(db: Session, provider: IdentityProvider, email: str | None, password: str | None) -> tuple[User, str]:
    if not email or not password:
        raise ValidationError("Email and password are required")
    session = provider.sign_in_with_password(email, password)
    user = ensure_profile(db, session.user)
    if not user.is_active:
        raise PermissionDeniedError("User account is disabled")
    user.last_login_at = utcnow()
    db.commit()
    db.refresh(user)
    logger.info("[AUTH] Login for %s", user.email)
    return user, session.access_token


def register(db: Session, provider: IdentityProvider, payload: RegisterRequest) -> tuple[User, str]:
    if not payload.name or not payload.email or not payload.password:
        raise ValidationError("Name, email, and password are required")
    if not EMAIL_PATTERN.match(payload.email.strip()):
        raise ValidationError("Invalid email format")
    if len(payload.password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters long")

    role = DEFAULT_ROLE
    if payload.role:
        role = normalize_user_role(payload.role)
        if role is None:
            raise ValidationError(f"Unknown role: {payload.role}")
    if payload.property_id is not None and db.get(Property, payload.property_id) is None:
        raise NotFoundError("Property", payload.property_id)

    email = payload.email.strip().lower()
    if db.scalar(select(User.id).where(func.lower(User.email) == email).limit(1)) is not None:
        raise ConflictError("Email already registered")

    session = provider.sign_up(
        email,
        payload.password,
        {"name": payload.name.strip(), "role": role, "property_id": payload.property_id},
    )
    user = ensure_profile(db, session.user)
    db.commit()
    db.refresh(user)
    return user, session.access_token


def ensure_default_superadmin(db: Session) -> bool:
    """Ensure a SuperAdmin exists for ``ADMIN_EMAIL`` when bootstrap credentials are configured.

    Returns:
        bool: True when an account for the email existed before this call.
    """
    if not settings.admin_email or not settings.admin_password:
        logger.info("[BOOTSTRAP] ADMIN_EMAIL/ADMIN_PASSWORD not set; skipping admin bootstrap.")
        return False

    email = settings.admin_email.strip().lower()
    account = db.scalar(select(IdentityAccount).where(IdentityAccount.email == email).limit(1))
    existed = account is not None
    if account is None:
        account = IdentityAccount(
            email=email,
            password_hash=get_password_hash(settings.admin_password),
            user_metadata={"name": "Administrator", "role": "SuperAdmin"},
        )
        db.add(account)
        db.flush()
        logger.warning("[SECURITY] Bootstrap SuperAdmin account created for %s.", email)

    user = db.get(User, account.id)
    if user is None:
        db.add(User(id=account.id, name="Administrator", email=email, role="SuperAdmin", is_active=True))
    elif user.role != "SuperAdmin" or not user.is_active:
        user.role = "SuperAdmin"
        user.is_active = True
        logger.info("[BOOTSTRAP] Admin profile restored to active SuperAdmin.")
    db.commit()
    return existed
