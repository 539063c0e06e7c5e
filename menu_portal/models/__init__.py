"""Application models package."""

from menu_portal.models.api_token import ApiToken
from menu_portal.models.audit_log import AuditLog
from menu_portal.models.menu import MenuCategory, MenuItem, MenuItemModifierGroup, SubCategory, menu_item_allergens
from menu_portal.models.modifier import ModifierGroup, ModifierItem
from menu_portal.models.order import LiveOrder, LiveOrderItem
from menu_portal.models.property import Property
from menu_portal.models.restaurant import Restaurant
from menu_portal.models.sale import Sale
from menu_portal.models.service_request import ServiceRequest
from menu_portal.models.user import IdentityAccount, User
from menu_portal.models.vocabulary import Allergen, Attribute

__all__ = [
    "ApiToken", "AuditLog", "MenuCategory", "SubCategory", "MenuItem", "MenuItemModifierGroup",
    "menu_item_allergens", "ModifierGroup", "ModifierItem", "LiveOrder", "LiveOrderItem", "Property",
    "Restaurant", "Sale", "ServiceRequest", "IdentityAccount", "User", "Allergen", "Attribute",
]
