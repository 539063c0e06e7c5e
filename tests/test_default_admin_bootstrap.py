from sqlalchemy import create_engine, select
from sqlalchemy.orm import sessionmaker

from menu_portal.core.config import settings
from menu_portal.core.security import verify_password
from menu_portal.db.base import Base
from menu_portal.models import IdentityAccount, User
from menu_portal.services.account_service import ensure_default_superadmin


def _build_session_local() -> sessionmaker:
    engine = create_engine("sqlite+pysqlite:///:memory:", future=True)
    Base.metadata.create_all(bind=engine)
    return sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)


def test_bootstrap_is_skipped_without_credentials(monkeypatch) -> None:
    monkeypatch.setattr(settings, "admin_email", "")
    monkeypatch.setattr(settings, "admin_password", "")
    session_local = _build_session_local()

    with session_local() as session:
        assert ensure_default_superadmin(session) is False
        assert session.scalars(select(User)).all() == []


def test_ensure_default_superadmin_is_idempotent(monkeypatch) -> None:
    monkeypatch.setattr(settings, "admin_email", "Boss@Example.com")
    monkeypatch.setattr(settings, "admin_password", "bootstrap-pass")
    session_local = _build_session_local()

    with session_local() as session:
        existed = ensure_default_superadmin(session)
        assert existed is False
        admins = session.scalars(select(User).where(User.email == "boss@example.com")).all()
        assert len(admins) == 1

    with session_local() as session:
        existed = ensure_default_superadmin(session)
        assert existed is True
        admins = session.scalars(select(User).where(User.email == "boss@example.com")).all()
        assert len(admins) == 1
        assert admins[0].is_active is True
        assert admins[0].role == "SuperAdmin"
        account = session.get(IdentityAccount, admins[0].id)
        assert verify_password("bootstrap-pass", account.password_hash)


def test_ensure_default_superadmin_restores_demoted_profile(monkeypatch) -> None:
    monkeypatch.setattr(settings, "admin_email", "boss@example.com")
    monkeypatch.setattr(settings, "admin_password", "bootstrap-pass")
    session_local = _build_session_local()

    with session_local() as session:
        ensure_default_superadmin(session)
        admin = session.scalar(select(User).where(User.email == "boss@example.com"))
        admin.role = "Staff"
        admin.is_active = False
        session.commit()

    with session_local() as session:
        existed = ensure_default_superadmin(session)
        assert existed is True
        admin = session.scalar(select(User).where(User.email == "boss@example.com").limit(1))
        assert admin is not None
        assert admin.is_active is True
        assert admin.role == "SuperAdmin"
