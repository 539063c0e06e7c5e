"""Shared SQLAlchemy base declarative class and model imports."""

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Base class for ORM models."""


# Import model modules so metadata is populated before create_all.
from menu_portal.models import api_token as _api_token  # noqa: E402,F401
from menu_portal.models import audit_log as _audit_log  # noqa: E402,F401
from menu_portal.models import menu as _menu  # noqa: E402,F401
from menu_portal.models import modifier as _modifier  # noqa: E402,F401
from menu_portal.models import order as _order  # noqa: E402,F401
from menu_portal.models import property as _property  # noqa: E402,F401
from menu_portal.models import restaurant as _restaurant  # noqa: E402,F401
from menu_portal.models import sale as _sale  # noqa: E402,F401
from menu_portal.models import user as _user  # noqa: E402,F401
from menu_portal.models import vocabulary as _vocabulary  # noqa: E402,F401
