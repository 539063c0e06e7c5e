"""Role normalization tests for profile provisioning and user updates."""

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session

from menu_portal.core.errors import ValidationError
from menu_portal.core.identity import IdentityUser
from menu_portal.db.base import Base
from menu_portal.models import User
from menu_portal.models.user import normalize_user_role
from menu_portal.services.account_service import ensure_profile
from menu_portal.services.user_service import update_user


def test_normalize_user_role() -> None:
    assert normalize_user_role("superadmin") == "SuperAdmin"
    assert normalize_user_role(" MANAGER ") == "Manager"
    assert normalize_user_role("chef") is None
    assert normalize_user_role(None) is None


def test_profile_provisioning_normalizes_metadata_role() -> None:
    engine = create_engine("sqlite+pysqlite:///:memory:", future=True)
    Base.metadata.create_all(bind=engine)

    with Session(engine) as session:
        user = ensure_profile(
            session,
            IdentityUser(id="u-1", email="ops@example.com", user_metadata={"name": "Ops", "role": "admin"}),
        )
        unknown = ensure_profile(
            session,
            IdentityUser(id="u-2", email="guest@example.com", user_metadata={"role": "owner"}),
        )

    assert user.role == "Admin"
    assert user.name == "Ops"
    assert unknown.role == "Staff"
    assert unknown.name == "guest@example.com"


def test_update_user_rejects_unknown_role() -> None:
    engine = create_engine("sqlite+pysqlite:///:memory:", future=True)
    Base.metadata.create_all(bind=engine)

    with Session(engine) as session:
        session.add(User(id="u-1", name="Line cook", email="cook@example.com"))
        session.flush()
        updated, applied = update_user(session, "u-1", {"role": "manager"})
        assert updated.role == "Manager"
        assert applied == {"role": "Manager"}

        with pytest.raises(ValidationError) as exc_info:
            update_user(session, "u-1", {"role": "owner"})

    assert exc_info.value.message == "Unknown role: owner"
