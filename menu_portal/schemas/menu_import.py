"""Payload and result schemas for menu imports."""

from __future__ import annotations

from decimal import Decimal
from typing import Any

from pydantic import Field

from menu_portal.schemas.common import CamelModel, LooseStr


class SystemCategoryNode(CamelModel):
    """Category tree node; depth 0 is a category, depth 1 a subcategory."""

    id: LooseStr | None = None
    name: str
    sort_order: int | None = None
    categories: list[SystemCategoryNode] | None = None


class SystemRestaurantCategoryInfo(CamelModel):
    restaurant_id: LooseStr | None = None
    restaurant_name: str = ""
    categories: list[SystemCategoryNode] = Field(default_factory=list)


class SystemCondimentItem(CamelModel):
    condiment_item_name: str
    condiment_item_code: LooseStr | None = None
    calorific_value: int | float | str | None = None
    attribute_list: Any = None


class SystemCondiment(CamelModel):
    condiment_name: str
    condiment_code: LooseStr
    condiment_items: list[SystemCondimentItem] = Field(default_factory=list)


class SystemMenuItem(CamelModel):
    item_name: str
    item_code: LooseStr | None = None
    item_image: str | None = None
    item_price: Decimal = Decimal("0")
    restaurant_id: LooseStr | None = None
    restaurant_name: str = ""
    category: str = ""
    category_id: LooseStr | None = None
    attribute_list: Any = None
    item_description: str | None = None
    calorific_value: int | float | str | None = None
    preparation_time: int | float | str | None = None
    per_serve: LooseStr | None = None
    sort_order: int | None = None
    condiment_codes: str | None = None


class SystemImportPayload(CamelModel):
    """Export of the upstream point-of-sale menu system."""

    restaurant_category: list[SystemRestaurantCategoryInfo]
    items: list[SystemMenuItem] = Field(default_factory=list)
    condiments: list[SystemCondiment] = Field(default_factory=list)


class SkippedRestaurant(CamelModel):
    id: str | None = None
    name: str


class SystemImportStats(CamelModel):
    restaurants_processed: int = 0
    restaurants_skipped: list[SkippedRestaurant] = Field(default_factory=list)
    categories_created: int = 0
    subcategories_created: int = 0
    items_created: int = 0
    items_updated: int = 0
    items_skipped: int = 0
    modifier_groups_created: int = 0
    modifier_items_created: int = 0
    allergens_created: int = 0
    nodes_flattened: int = 0


class JsonMenuItem(CamelModel):
    name: str
    item_code: LooseStr | None = None
    description: str | None = None
    price: Decimal = Field(default=Decimal("0"), ge=0)
    currency: str | None = None
    image_url: str | None = None
    sort_order: int = 0
    availability_flag: bool = True
    sold_out: bool = False


class JsonSubCategory(CamelModel):
    name: str
    sort_order: int = 0
    items: list[JsonMenuItem] = Field(default_factory=list)


class JsonCategory(CamelModel):
    name: str
    description: str = ""
    sort_order: int = 0
    items: list[JsonMenuItem] = Field(default_factory=list)
    subcategories: list[JsonSubCategory] = Field(default_factory=list)


class JsonMenuPayload(CamelModel):
    """Hand-authored menu document for a single restaurant."""

    categories: list[JsonCategory]


class MenuImportStats(CamelModel):
    categories_created: int = 0
    subcategories_created: int = 0
    items_created: int = 0
    items_updated: int = 0
