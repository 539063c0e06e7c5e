"""Modifier groups and their selectable items."""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import DateTime, ForeignKey, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from menu_portal.db.base import Base
from menu_portal.utils.ids import new_id
from menu_portal.utils.time import utcnow


class ModifierGroup(Base):
    __tablename__ = "modifier_groups"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    restaurant_id: Mapped[str] = mapped_column(ForeignKey("restaurants.id"), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    code: Mapped[str | None] = mapped_column(String(64), nullable=True)
    min_selection: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    max_selection: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)

    items: Mapped[list["ModifierItem"]] = relationship(
        back_populates="group",
        order_by="ModifierItem.created_at",
        cascade="all, delete-orphan",
    )


class ModifierItem(Base):
    __tablename__ = "modifier_items"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    modifier_group_id: Mapped[str] = mapped_column(ForeignKey("modifier_groups.id"), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    code: Mapped[str | None] = mapped_column(String(64), nullable=True)
    price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False, default=Decimal("0.00"))
    calories: Mapped[int | None] = mapped_column(Integer, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)

    group: Mapped[ModifierGroup] = relationship(back_populates="items")
