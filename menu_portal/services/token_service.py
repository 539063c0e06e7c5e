"""API token lifecycle: generation, lookup, revocation and usage stamping."""

from __future__ import annotations

import hashlib
import logging
import secrets
from datetime import timedelta

from sqlalchemy import select
from sqlalchemy.orm import Session

from menu_portal.core.errors import NotFoundError, PermissionDeniedError, ValidationError
from menu_portal.db import session as db_session
from menu_portal.models import ApiToken, Property, Restaurant
from menu_portal.utils.time import ensure_aware, utcnow

logger = logging.getLogger(__name__)

TOKEN_PREFIX = "tb_"


def generate_token_value() -> str:
    """Return ``tb_`` followed by 64 hex characters of CSPRNG output."""
    return TOKEN_PREFIX + secrets.token_hex(32)


def hash_token(raw_token: str) -> str:
    return hashlib.sha256(raw_token.encode("utf-8")).hexdigest()


def token_preview(raw_token: str) -> str:
    return f"{raw_token[:12]}...{raw_token[-4:]}"


def generate_api_token(
    db: Session,
    *,
    name: str | None,
    restaurant_id: str | None = None,
    property_id: str | None = None,
    expires_in_days: int | None = None,
    created_by: str | None = None,
) -> tuple[ApiToken, str]:
    """Create a token row and return it with the raw value, which is not stored."""
    if not name or not name.strip():
        raise ValidationError("Token name is required")
    if restaurant_id is not None and db.get(Restaurant, restaurant_id) is None:
        raise NotFoundError("Restaurant", restaurant_id)
    if property_id is not None and db.get(Property, property_id) is None:
        raise NotFoundError("Property", property_id)

    raw_token = generate_token_value()
    expires_at = utcnow() + timedelta(days=expires_in_days) if expires_in_days else None
    token = ApiToken(
        name=name.strip(),
        token_hash=hash_token(raw_token),
        token_preview=token_preview(raw_token),
        restaurant_id=restaurant_id,
        property_id=property_id,
        is_active=True,
        expires_at=expires_at,
        created_by=created_by,
    )
    db.add(token)
    db.flush()
    logger.info("[TOKENS] Generated API token %s (%s)", token.id, token.token_preview)
    return token, raw_token


def list_api_tokens(db: Session) -> list[ApiToken]:
    return list(db.scalars(select(ApiToken).order_by(ApiToken.created_at.desc())).all())


def get_api_token(db: Session, token_id: str) -> ApiToken:
    token = db.get(ApiToken, token_id)
    if token is None:
        raise NotFoundError("API token", token_id)
    return token


def set_token_active(db: Session, token_id: str, is_active: bool) -> ApiToken:
    token = get_api_token(db, token_id)
    token.is_active = is_active
    db.flush()
    return token


def delete_api_token(db: Session, token_id: str) -> ApiToken:
    token = get_api_token(db, token_id)
    db.delete(token)
    db.flush()
    return token


def is_expired(token: ApiToken) -> bool:
    return token.expires_at is not None and ensure_aware(token.expires_at) <= utcnow()


def resolve_api_token(db: Session, raw_token: str) -> ApiToken | None:
    """Return the active token matching ``raw_token``.

    Unknown or revoked tokens give ``None``; an expired token is a hard
    rejection rather than a fall-through.
    """
    token = db.scalar(
        select(ApiToken).where(ApiToken.token_hash == hash_token(raw_token), ApiToken.is_active.is_(True)).limit(1)
    )
    if token is None:
        return None
    if is_expired(token):
        logger.info("[TOKENS] Rejected expired API token %s", token.token_preview)
        raise PermissionDeniedError("API token has expired")
    return token


def stamp_token_usage(token_id: str) -> None:
    """Record ``last_used_at`` outside the request transaction."""
    db: Session = db_session.SessionLocal()
    try:
        token = db.get(ApiToken, token_id)
        if token is None:
            return
        token.last_used_at = utcnow()
        db.commit()
    finally:
        db.close()
