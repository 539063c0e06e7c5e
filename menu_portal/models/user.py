"""Identity accounts and application user profiles."""

from datetime import datetime

from sqlalchemy import JSON, Boolean, DateTime, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column

from menu_portal.db.base import Base
from menu_portal.utils.ids import new_id
from menu_portal.utils.time import utcnow

USER_ROLES = ("SuperAdmin", "Admin", "Manager", "Staff")
DEFAULT_ROLE = "Staff"


def normalize_user_role(role: str | None) -> str | None:
    """Map a role name case-insensitively onto ``USER_ROLES``; unknown values give ``None``."""
    if role is None:
        return None
    lookup = {known.lower(): known for known in USER_ROLES}
    return lookup.get(str(role).strip().lower())


class IdentityAccount(Base):
    """Credential record owned by the identity provider."""

    __tablename__ = "identity_accounts"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True, index=True)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    user_metadata: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
    last_sign_in_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)


class User(Base):
    """Application profile; ``id`` equals the identity account id."""

    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True, index=True)
    role: Mapped[str] = mapped_column(String(16), nullable=False, default=DEFAULT_ROLE)
    property_id: Mapped[str | None] = mapped_column(ForeignKey("properties.id"), nullable=True, index=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
    last_login_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
