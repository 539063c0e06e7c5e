"""service requests

Revision ID: 0002_service_requests
Revises: 0001_portal
Create Date: 2026-10-18
"""

from alembic import op
import sqlalchemy as sa

revision = "0002_service_requests"
down_revision = "0001_portal"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "service_requests",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("restaurant_id", sa.String(length=36), sa.ForeignKey("restaurants.id"), nullable=True),
        sa.Column("table_number", sa.Integer(), nullable=False),
        sa.Column("request_type", sa.String(length=16), nullable=False),
        sa.Column("message", sa.Text(), nullable=True),
        sa.Column("status", sa.String(length=16), nullable=False, server_default="pending"),
        sa.Column("staff_member_id", sa.String(length=36), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("acknowledged_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index(
        "ix_service_requests_restaurant_status", "service_requests", ["restaurant_id", "status"]
    )


def downgrade() -> None:
    op.drop_index("ix_service_requests_restaurant_status", table_name="service_requests")
    op.drop_table("service_requests")
