"""Catalog schemas: properties, restaurants, menu tree, modifiers and vocabularies."""

from datetime import datetime
from decimal import Decimal
from typing import Any, Literal

from pydantic import AliasChoices, Field

from menu_portal.schemas.common import CamelModel

Currency = Literal["USD", "EUR", "GBP", "JPY", "INR"]
SpecialType = Literal["None", "Vegetarian", "Non-Vegetarian", "Vegan", "Chef's Special"]
ImageOrientation = Literal["16:9", "3:4", "1:1"]
AttributeType = Literal["Text", "Number", "Checkbox", "Dropdown"]
BulkActionName = Literal["enable", "disable", "sold_out", "enable_bogo", "disable_bogo", "change_currency"]


class PropertyCreate(CamelModel):
    name: str = Field(min_length=1)
    address: str | None = None
    phone: str | None = None
    email: str | None = None
    tenant_id: str | None = None


class PropertyUpdate(CamelModel):
    name: str | None = Field(default=None, min_length=1)
    address: str | None = None
    phone: str | None = None
    email: str | None = None
    tenant_id: str | None = None


class PropertyResponse(CamelModel):
    id: str
    name: str
    address: str | None = None
    phone: str | None = None
    email: str | None = None
    tenant_id: str | None = None
    created_at: datetime
    updated_at: datetime


class RestaurantCreate(CamelModel):
    property_id: str
    name: str = Field(min_length=1)
    cuisine: str | None = None
    description: str | None = None
    phone: str | None = None
    email: str | None = None
    address: str | None = None
    is_active: bool = True


class RestaurantUpdate(CamelModel):
    property_id: str | None = None
    name: str | None = Field(default=None, min_length=1)
    cuisine: str | None = None
    description: str | None = None
    phone: str | None = None
    email: str | None = None
    address: str | None = None
    is_active: bool | None = None


class RestaurantResponse(CamelModel):
    id: str
    property_id: str
    name: str
    cuisine: str | None = None
    description: str | None = None
    phone: str | None = None
    email: str | None = None
    address: str | None = None
    is_active: bool
    created_at: datetime


class CategoryCreate(CamelModel):
    restaurant_id: str
    name: str = Field(min_length=1)
    description: str = ""
    sort_order: int = 0
    active_flag: bool = True


class CategoryUpdate(CamelModel):
    name: str | None = Field(default=None, min_length=1)
    description: str | None = None
    sort_order: int | None = None
    active_flag: bool | None = None


class CategoryResponse(CamelModel):
    id: str
    restaurant_id: str
    name: str
    description: str
    sort_order: int
    active_flag: bool
    created_at: datetime


class SubCategoryCreate(CamelModel):
    category_id: str
    name: str = Field(min_length=1)
    sort_order: int = 0


class SubCategoryUpdate(CamelModel):
    name: str | None = Field(default=None, min_length=1)
    sort_order: int | None = None


class SubCategoryResponse(CamelModel):
    id: str
    category_id: str
    name: str
    sort_order: int
    created_at: datetime


class MenuItemCreate(CamelModel):
    category_id: str
    subcategory_id: str | None = Field(default=None, alias="subCategoryId")
    name: str = Field(min_length=1)
    display_name: str | None = None
    item_code: str | None = None
    description: str | None = None
    price: Decimal = Field(default=Decimal("0"), ge=0)
    currency: Currency = "INR"
    image_url: str | None = None
    image_orientation: ImageOrientation = "1:1"
    video_url: str | None = None
    availability_flag: bool = True
    sold_out: bool = False
    bogo: bool = False
    complimentary: str | None = None
    sort_order: int = 0
    prep_time: int | None = Field(default=None, ge=0)
    portion: str | None = None
    special_type: SpecialType = "None"
    calories: int | None = Field(default=None, ge=0)
    max_order_qty: int = Field(default=10, ge=1)
    available_time: str | None = None
    available_date: str | None = None
    attributes: dict[str, Any] = Field(default_factory=dict)
    allergen_ids: list[str] = Field(default_factory=list, validation_alias=AliasChoices("allergenIds", "allergens", "allergen_ids"))
    modifier_group_ids: list[str] = Field(default_factory=list)
    tenant_id: str | None = None


class MenuItemUpdate(CamelModel):
    category_id: str | None = None
    subcategory_id: str | None = Field(default=None, alias="subCategoryId")
    name: str | None = Field(default=None, min_length=1)
    display_name: str | None = None
    item_code: str | None = None
    description: str | None = None
    price: Decimal | None = Field(default=None, ge=0)
    currency: Currency | None = None
    image_url: str | None = None
    image_orientation: ImageOrientation | None = None
    video_url: str | None = None
    availability_flag: bool | None = None
    sold_out: bool | None = None
    bogo: bool | None = None
    complimentary: str | None = None
    sort_order: int | None = None
    prep_time: int | None = Field(default=None, ge=0)
    portion: str | None = None
    special_type: SpecialType | None = None
    calories: int | None = Field(default=None, ge=0)
    max_order_qty: int | None = Field(default=None, ge=1)
    available_time: str | None = None
    available_date: str | None = None
    attributes: dict[str, Any] | None = None
    allergen_ids: list[str] | None = Field(
        default=None, validation_alias=AliasChoices("allergenIds", "allergens", "allergen_ids")
    )
    modifier_group_ids: list[str] | None = None


class MenuItemResponse(CamelModel):
    id: str
    category_id: str
    subcategory_id: str | None = Field(default=None, alias="subCategoryId")
    name: str
    display_name: str | None = None
    item_code: str | None = None
    description: str | None = None
    price: float
    currency: str
    image_url: str | None = None
    image_orientation: str
    video_url: str | None = None
    availability_flag: bool
    sold_out: bool
    bogo: bool
    complimentary: str | None = None
    sort_order: int
    prep_time: int | None = None
    portion: str | None = None
    special_type: str
    calories: int | None = None
    max_order_qty: int
    available_time: str | None = None
    available_date: str | None = None
    attributes: dict[str, Any]
    allergen_ids: list[str] = Field(default_factory=list)
    modifier_group_ids: list[str] = Field(default_factory=list)
    tenant_id: str | None = None
    created_at: datetime
    updated_at: datetime


class BulkActionRequest(CamelModel):
    action: BulkActionName
    item_ids: list[str] = Field(min_length=1)
    currency: Currency | None = None


class BulkActionResult(CamelModel):
    action: str
    updated: int


class ModifierItemCreate(CamelModel):
    modifier_group_id: str
    name: str = Field(min_length=1)
    price: Decimal = Field(default=Decimal("0"), ge=0)
    calories: int | None = Field(default=None, ge=0)


class ModifierItemUpdate(CamelModel):
    name: str | None = Field(default=None, min_length=1)
    price: Decimal | None = Field(default=None, ge=0)
    calories: int | None = Field(default=None, ge=0)


class ModifierItemResponse(CamelModel):
    id: str
    modifier_group_id: str
    name: str
    code: str | None = None
    price: float
    calories: int | None = None


class ModifierGroupCreate(CamelModel):
    restaurant_id: str
    name: str = Field(min_length=1)
    min_selection: int = Field(default=0, ge=0)
    max_selection: int = Field(default=1, ge=0)


class ModifierGroupUpdate(CamelModel):
    name: str | None = Field(default=None, min_length=1)
    min_selection: int | None = Field(default=None, ge=0)
    max_selection: int | None = Field(default=None, ge=0)


class ModifierGroupResponse(CamelModel):
    id: str
    restaurant_id: str
    name: str
    code: str | None = None
    min_selection: int
    max_selection: int
    items: list[ModifierItemResponse] = Field(default_factory=list)


class AllergenCreate(CamelModel):
    name: str = Field(min_length=1)
    icon: str | None = None


class AllergenResponse(CamelModel):
    id: str
    name: str
    icon: str | None = None


class AttributeCreate(CamelModel):
    name: str = Field(min_length=1)
    type: AttributeType = "Text"
    options: list[str] | None = None


class AttributeResponse(CamelModel):
    id: str
    name: str
    type: str
    options: list[str] | None = None


class PublicMenuItem(CamelModel):
    id: str
    name: str
    display_name: str | None = None
    description: str | None = None
    price: float
    currency: str
    image_url: str | None = None
    image_orientation: str
    video_url: str | None = None
    sold_out: bool
    bogo: bool
    special_type: str
    calories: int | None = None
    prep_time: int | None = None
    portion: str | None = None
    max_order_qty: int
    sort_order: int
    allergens: list[str] = Field(default_factory=list)
    modifier_group_ids: list[str] = Field(default_factory=list)


class PublicSubCategory(CamelModel):
    id: str
    name: str
    sort_order: int
    items: list[PublicMenuItem] = Field(default_factory=list)


class PublicCategory(CamelModel):
    id: str
    name: str
    description: str
    sort_order: int
    subcategories: list[PublicSubCategory] = Field(default_factory=list)
    items: list[PublicMenuItem] = Field(default_factory=list)


class PublicMenu(CamelModel):
    """Guest-facing menu tree of one restaurant."""

    restaurant: RestaurantResponse
    categories: list[PublicCategory]
    modifier_groups: list[ModifierGroupResponse] = Field(default_factory=list)
