"""portal schema

Revision ID: 0001_portal
Revises:
Create Date: 2026-10-18
"""

from alembic import op
import sqlalchemy as sa

revision = "0001_portal"
down_revision = None
branch_labels = None
depends_on = None


def _id() -> sa.Column:
    return sa.Column("id", sa.String(length=36), primary_key=True)


def _created_at() -> sa.Column:
    return sa.Column("created_at", sa.DateTime(timezone=True), nullable=False)


def upgrade() -> None:
    op.create_table(
        "properties",
        _id(),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("address", sa.Text(), nullable=True),
        sa.Column("phone", sa.String(length=64), nullable=True),
        sa.Column("email", sa.String(length=255), nullable=True),
        sa.Column("tenant_id", sa.String(length=64), nullable=True),
        _created_at(),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_table(
        "restaurants",
        _id(),
        sa.Column("property_id", sa.String(length=36), sa.ForeignKey("properties.id"), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("cuisine", sa.String(length=128), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("phone", sa.String(length=64), nullable=True),
        sa.Column("email", sa.String(length=255), nullable=True),
        sa.Column("address", sa.Text(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("1")),
        _created_at(),
    )
    op.create_index("ix_restaurants_property_id", "restaurants", ["property_id"])
    op.create_table(
        "identity_accounts",
        _id(),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("password_hash", sa.String(length=255), nullable=False),
        sa.Column("user_metadata", sa.JSON(), nullable=False),
        _created_at(),
        sa.Column("last_sign_in_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_identity_accounts_email", "identity_accounts", ["email"], unique=True)
    op.create_table(
        "users",
        _id(),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("role", sa.String(length=16), nullable=False, server_default="Staff"),
        sa.Column("property_id", sa.String(length=36), sa.ForeignKey("properties.id"), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("1")),
        _created_at(),
        sa.Column("last_login_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)
    op.create_index("ix_users_property_id", "users", ["property_id"])
    op.create_table(
        "menu_categories",
        _id(),
        sa.Column("restaurant_id", sa.String(length=36), sa.ForeignKey("restaurants.id"), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=False, server_default=""),
        sa.Column("sort_order", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("active_flag", sa.Boolean(), nullable=False, server_default=sa.text("1")),
        _created_at(),
    )
    op.create_index("ix_menu_categories_restaurant_id", "menu_categories", ["restaurant_id"])
    op.create_table(
        "menu_subcategories",
        _id(),
        sa.Column("category_id", sa.String(length=36), sa.ForeignKey("menu_categories.id"), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("sort_order", sa.Integer(), nullable=False, server_default="0"),
        _created_at(),
    )
    op.create_index("ix_menu_subcategories_category_id", "menu_subcategories", ["category_id"])
    op.create_table(
        "menu_items",
        _id(),
        sa.Column("category_id", sa.String(length=36), sa.ForeignKey("menu_categories.id"), nullable=False),
        sa.Column("subcategory_id", sa.String(length=36), sa.ForeignKey("menu_subcategories.id"), nullable=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("display_name", sa.String(length=255), nullable=True),
        sa.Column("item_code", sa.String(length=64), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("price", sa.Numeric(10, 2), nullable=False, server_default="0"),
        sa.Column("currency", sa.String(length=3), nullable=False, server_default="INR"),
        sa.Column("image_url", sa.Text(), nullable=True),
        sa.Column("image_orientation", sa.String(length=8), nullable=False, server_default="1:1"),
        sa.Column("video_url", sa.Text(), nullable=True),
        sa.Column("availability_flag", sa.Boolean(), nullable=False, server_default=sa.text("1")),
        sa.Column("sold_out", sa.Boolean(), nullable=False, server_default=sa.text("0")),
        sa.Column("bogo", sa.Boolean(), nullable=False, server_default=sa.text("0")),
        sa.Column("complimentary", sa.String(length=255), nullable=True),
        sa.Column("sort_order", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("prep_time", sa.Integer(), nullable=True),
        sa.Column("portion", sa.String(length=64), nullable=True),
        sa.Column("special_type", sa.String(length=32), nullable=False, server_default="None"),
        sa.Column("calories", sa.Integer(), nullable=True),
        sa.Column("max_order_qty", sa.Integer(), nullable=False, server_default="10"),
        sa.Column("available_time", sa.String(length=64), nullable=True),
        sa.Column("available_date", sa.String(length=64), nullable=True),
        sa.Column("attributes", sa.JSON(), nullable=False),
        sa.Column("tenant_id", sa.String(length=64), nullable=True),
        _created_at(),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_menu_items_category_id", "menu_items", ["category_id"])
    op.create_index("ix_menu_items_subcategory_id", "menu_items", ["subcategory_id"])
    op.create_index("ix_menu_items_item_code", "menu_items", ["item_code"])
    op.create_table(
        "allergens",
        _id(),
        sa.Column("name", sa.String(length=128), nullable=False),
        sa.Column("icon", sa.String(length=255), nullable=True),
        _created_at(),
    )
    op.create_table(
        "attributes",
        _id(),
        sa.Column("name", sa.String(length=128), nullable=False),
        sa.Column("type", sa.String(length=16), nullable=False, server_default="Text"),
        sa.Column("options", sa.JSON(), nullable=True),
        _created_at(),
    )
    op.create_table(
        "menu_item_allergens",
        sa.Column("menu_item_id", sa.String(length=36), sa.ForeignKey("menu_items.id"), primary_key=True),
        sa.Column("allergen_id", sa.String(length=36), sa.ForeignKey("allergens.id"), primary_key=True),
    )
    op.create_table(
        "modifier_groups",
        _id(),
        sa.Column("restaurant_id", sa.String(length=36), sa.ForeignKey("restaurants.id"), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("code", sa.String(length=64), nullable=True),
        sa.Column("min_selection", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("max_selection", sa.Integer(), nullable=False, server_default="1"),
        _created_at(),
    )
    op.create_index("ix_modifier_groups_restaurant_id", "modifier_groups", ["restaurant_id"])
    op.create_table(
        "modifier_items",
        _id(),
        sa.Column("modifier_group_id", sa.String(length=36), sa.ForeignKey("modifier_groups.id"), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("code", sa.String(length=64), nullable=True),
        sa.Column("price", sa.Numeric(10, 2), nullable=False, server_default="0"),
        sa.Column("calories", sa.Integer(), nullable=True),
        _created_at(),
    )
    op.create_index("ix_modifier_items_modifier_group_id", "modifier_items", ["modifier_group_id"])
    op.create_table(
        "menu_item_modifier_groups",
        _id(),
        sa.Column("menu_item_id", sa.String(length=36), sa.ForeignKey("menu_items.id"), nullable=False),
        sa.Column("modifier_group_id", sa.String(length=36), sa.ForeignKey("modifier_groups.id"), nullable=False),
        sa.Column("position", sa.Integer(), nullable=False, server_default="0"),
    )
    op.create_index("ix_menu_item_modifier_groups_menu_item_id", "menu_item_modifier_groups", ["menu_item_id"])
    op.create_index(
        "ix_menu_item_modifier_groups_modifier_group_id", "menu_item_modifier_groups", ["modifier_group_id"]
    )
    op.create_table(
        "live_orders",
        _id(),
        sa.Column("restaurant_id", sa.String(length=36), sa.ForeignKey("restaurants.id"), nullable=False),
        sa.Column("table_number", sa.String(length=32), nullable=True),
        sa.Column("customer_name", sa.String(length=255), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("total_amount", sa.Numeric(10, 2), nullable=False, server_default="0"),
        sa.Column("status", sa.String(length=16), nullable=False, server_default="New"),
        sa.Column("placed_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("status_updated_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_table(
        "live_order_items",
        _id(),
        sa.Column("order_id", sa.String(length=36), sa.ForeignKey("live_orders.id"), nullable=False),
        sa.Column("menu_item_id", sa.String(length=36), nullable=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("unit_price", sa.Numeric(10, 2), nullable=False),
        sa.Column("modifiers", sa.JSON(), nullable=False),
        sa.Column("line_total", sa.Numeric(10, 2), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("position", sa.Integer(), nullable=False, server_default="0"),
    )
    op.create_index("ix_live_order_items_order_id", "live_order_items", ["order_id"])
    op.create_table(
        "sales",
        _id(),
        sa.Column("restaurant_id", sa.String(length=36), sa.ForeignKey("restaurants.id"), nullable=False),
        sa.Column("order_id", sa.String(length=36), nullable=True, unique=True),
        sa.Column("table_number", sa.String(length=32), nullable=True),
        sa.Column("total_amount", sa.Numeric(10, 2), nullable=False),
        sa.Column("sale_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("items", sa.JSON(), nullable=False),
    )
    op.create_index("ix_sales_restaurant_id", "sales", ["restaurant_id"])
    op.create_index("ix_sales_sale_date", "sales", ["sale_date"])
    op.create_table(
        "api_tokens",
        _id(),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("token_hash", sa.String(length=64), nullable=False),
        sa.Column("token_preview", sa.String(length=32), nullable=False),
        sa.Column("restaurant_id", sa.String(length=36), sa.ForeignKey("restaurants.id"), nullable=True),
        sa.Column("property_id", sa.String(length=36), sa.ForeignKey("properties.id"), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("1")),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=True),
        _created_at(),
        sa.Column("last_used_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_by", sa.String(length=36), nullable=True),
    )
    op.create_index("ix_api_tokens_token_hash", "api_tokens", ["token_hash"], unique=True)
    op.create_table(
        "audit_logs",
        _id(),
        sa.Column("timestamp", sa.DateTime(timezone=True), nullable=False),
        sa.Column("user_id", sa.String(length=36), nullable=True),
        sa.Column("user_name", sa.String(length=255), nullable=False),
        sa.Column("action_type", sa.String(length=16), nullable=False),
        sa.Column("entity_type", sa.String(length=32), nullable=False),
        sa.Column("entity_id", sa.String(length=36), nullable=True),
        sa.Column("entity_name", sa.String(length=255), nullable=True),
        sa.Column("details", sa.JSON(), nullable=True),
    )
    op.create_index("ix_audit_logs_timestamp", "audit_logs", ["timestamp"])


def downgrade() -> None:
    for table in (
        "audit_logs",
        "api_tokens",
        "sales",
        "live_order_items",
        "live_orders",
        "menu_item_modifier_groups",
        "modifier_items",
        "modifier_groups",
        "menu_item_allergens",
        "attributes",
        "allergens",
        "menu_items",
        "menu_subcategories",
        "menu_categories",
        "users",
        "identity_accounts",
        "restaurants",
        "properties",
    ):
        op.drop_table(table)
