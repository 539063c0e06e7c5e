"""Live order models for the kitchen board."""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import JSON, DateTime, ForeignKey, Index, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from menu_portal.db.base import Base
from menu_portal.utils.ids import new_id
from menu_portal.utils.time import utcnow


class LiveOrder(Base):
    """Order placed by a guest and tracked until completion."""

    __tablename__ = "live_orders"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    restaurant_id: Mapped[str] = mapped_column(ForeignKey("restaurants.id"), nullable=False)
    table_number: Mapped[str | None] = mapped_column(String(32), nullable=True)
    customer_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    total_amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False, default=Decimal("0.00"))
    status: Mapped[str] = mapped_column(String(16), nullable=False, default="New")
    placed_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
    status_updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    items: Mapped[list["LiveOrderItem"]] = relationship(
        back_populates="order",
        order_by="LiveOrderItem.position",
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        Index("ix_live_orders_restaurant_status", "restaurant_id", "status"),
    )


class LiveOrderItem(Base):
    """Snapshot of an order line; name and price are frozen at order time."""

    __tablename__ = "live_order_items"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    order_id: Mapped[str] = mapped_column(ForeignKey("live_orders.id"), nullable=False, index=True)
    # No FK: the line must survive deletion of the catalog item.
    menu_item_id: Mapped[str | None] = mapped_column(String(36), nullable=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    unit_price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    modifiers: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    line_total: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    order: Mapped[LiveOrder] = relationship(back_populates="items")
