"""Menu tree models: categories, subcategories and items."""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import JSON, Boolean, Column, DateTime, ForeignKey, Integer, Numeric, String, Table, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from menu_portal.db.base import Base
from menu_portal.utils.ids import new_id
from menu_portal.utils.time import utcnow

menu_item_allergens = Table(
    "menu_item_allergens",
    Base.metadata,
    Column("menu_item_id", ForeignKey("menu_items.id"), primary_key=True),
    Column("allergen_id", ForeignKey("allergens.id"), primary_key=True),
)


class MenuCategory(Base):
    """Top-level menu section of a restaurant."""

    __tablename__ = "menu_categories"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    restaurant_id: Mapped[str] = mapped_column(ForeignKey("restaurants.id"), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    sort_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    active_flag: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)


class SubCategory(Base):
    """Second level of the menu tree; always belongs to one category."""

    __tablename__ = "menu_subcategories"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    category_id: Mapped[str] = mapped_column(ForeignKey("menu_categories.id"), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    sort_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)


class MenuItemModifierGroup(Base):
    """Ordered link between a menu item and a modifier group."""

    __tablename__ = "menu_item_modifier_groups"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    menu_item_id: Mapped[str] = mapped_column(ForeignKey("menu_items.id"), nullable=False, index=True)
    modifier_group_id: Mapped[str] = mapped_column(ForeignKey("modifier_groups.id"), nullable=False, index=True)
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)


class MenuItem(Base):
    """Sellable menu entry. ``item_code`` is the natural key used by imports."""

    __tablename__ = "menu_items"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    category_id: Mapped[str] = mapped_column(ForeignKey("menu_categories.id"), nullable=False, index=True)
    subcategory_id: Mapped[str | None] = mapped_column(ForeignKey("menu_subcategories.id"), nullable=True, index=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    display_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    item_code: Mapped[str | None] = mapped_column(String(64), nullable=True, index=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False, default=Decimal("0.00"))
    currency: Mapped[str] = mapped_column(String(3), nullable=False, default="INR")
    image_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    image_orientation: Mapped[str] = mapped_column(String(8), nullable=False, default="1:1")
    video_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    availability_flag: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    sold_out: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    bogo: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    complimentary: Mapped[str | None] = mapped_column(String(255), nullable=True)
    sort_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    prep_time: Mapped[int | None] = mapped_column(Integer, nullable=True)
    portion: Mapped[str | None] = mapped_column(String(64), nullable=True)
    special_type: Mapped[str] = mapped_column(String(32), nullable=False, default="None")
    calories: Mapped[int | None] = mapped_column(Integer, nullable=True)
    max_order_qty: Mapped[int] = mapped_column(Integer, nullable=False, default=10)
    available_time: Mapped[str | None] = mapped_column(String(64), nullable=True)
    available_date: Mapped[str | None] = mapped_column(String(64), nullable=True)
    attributes: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    tenant_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    allergens: Mapped[list["Allergen"]] = relationship(secondary=menu_item_allergens)
    modifier_links: Mapped[list[MenuItemModifierGroup]] = relationship(
        order_by=MenuItemModifierGroup.position,
        cascade="all, delete-orphan",
    )

    @property
    def allergen_ids(self) -> list[str]:
        return sorted(allergen.id for allergen in self.allergens)

    @property
    def modifier_group_ids(self) -> list[str]:
        return [link.modifier_group_id for link in self.modifier_links]

    def set_modifier_group_ids(self, group_ids: list[str]) -> None:
        """Replace linked modifier groups, keeping first-seen order and dropping repeats."""
        unique_ids: list[str] = list(dict.fromkeys(group_ids))
        self.modifier_links = [
            MenuItemModifierGroup(modifier_group_id=group_id, position=position)
            for position, group_id in enumerate(unique_ids)
        ]
