"""initial schema

Revision ID: 0001_initial_schema
Revises:
Create Date: 2026-10-19 09:00:00.000000
"""

from alembic import op
import sqlalchemy as sa


revision = "0001_initial_schema"
down_revision = None
branch_labels = None
depends_on = None


def _audit_columns() -> list:
    return [
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.Column("deleted_at", sa.DateTime(), nullable=True),
    ]


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("email", sa.String(), nullable=False),
        sa.Column("password_hash", sa.String(), nullable=False),
        sa.Column("phone", sa.String(), nullable=True),
        sa.Column("avatar", sa.String(), nullable=True),
        sa.Column("role", sa.String(), nullable=False),
        sa.Column("status", sa.String(), nullable=False),
        sa.Column("access_scope", sa.String(), nullable=False),
        sa.Column("permissions", sa.JSON(), nullable=False),
        sa.Column("failed_login_attempts", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("locked_until", sa.DateTime(), nullable=True),
        sa.Column("last_login_at", sa.DateTime(), nullable=True),
        sa.Column("created_by", sa.String(), sa.ForeignKey("users.id"), nullable=True),
        *_audit_columns(),
    )
    op.create_index("ix_users_email", "users", ["email"])
    op.create_index("ix_users_role", "users", ["role"])
    op.create_index("ix_users_status", "users", ["status"])
    op.create_index("ix_users_deleted_at", "users", ["deleted_at"])

    op.create_table(
        "clients",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("email", sa.String(), nullable=False),
        sa.Column("phone", sa.String(), nullable=True),
        sa.Column("tax_id", sa.String(), nullable=True),
        sa.Column("address", sa.JSON(), nullable=True),
        sa.Column("production_type", sa.String(), nullable=True),
        sa.Column("total_area", sa.Float(), nullable=True),
        sa.Column("status", sa.String(), nullable=False),
        *_audit_columns(),
    )
    op.create_index("ix_clients_email", "clients", ["email"])
    op.create_index("ix_clients_tax_id", "clients", ["tax_id"])
    op.create_index("ix_clients_deleted_at", "clients", ["deleted_at"])

    op.create_table(
        "account_clients",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column("account_id", sa.String(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("client_id", sa.String(), sa.ForeignKey("clients.id"), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.UniqueConstraint("account_id", "client_id", name="uq_account_client"),
    )
    op.create_index("ix_account_clients_account_id", "account_clients", ["account_id"])
    op.create_index("ix_account_clients_client_id", "account_clients", ["client_id"])

    op.create_table(
        "properties",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column("client_id", sa.String(), sa.ForeignKey("clients.id"), nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("country", sa.String(length=2), nullable=False),
        sa.Column("state", sa.String(length=2), nullable=False),
        sa.Column("municipality", sa.String(), nullable=False),
        sa.Column("address", sa.String(), nullable=True),
        sa.Column("postal_code", sa.String(), nullable=True),
        sa.Column("geometry", sa.JSON(), nullable=False),
        sa.Column("srid", sa.Integer(), nullable=False),
        sa.Column("total_area_ha", sa.Float(), nullable=False),
        sa.Column("centroid", sa.JSON(), nullable=True),
        sa.Column("status", sa.String(), nullable=False),
        sa.Column("operation_start_date", sa.Date(), nullable=True),
        sa.Column("tenure_regime", sa.String(), nullable=False),
        sa.Column("display_owner", sa.String(), nullable=True),
        sa.Column("contract_start", sa.Date(), nullable=True),
        sa.Column("contract_end", sa.Date(), nullable=True),
        sa.Column("contract_identifier", sa.String(), nullable=True),
        sa.Column("car", sa.String(), nullable=True),
        sa.Column("ccir", sa.String(), nullable=True),
        sa.Column("manager_name", sa.String(), nullable=True),
        sa.Column("manager_contact", sa.String(), nullable=True),
        sa.Column("created_by", sa.String(), sa.ForeignKey("users.id"), nullable=True),
        sa.Column("updated_by", sa.String(), sa.ForeignKey("users.id"), nullable=True),
        *_audit_columns(),
    )
    op.create_index("ix_properties_client_id", "properties", ["client_id"])
    op.create_index("ix_properties_state", "properties", ["state"])
    op.create_index("ix_properties_status", "properties", ["status"])
    op.create_index("ix_properties_car", "properties", ["car"])
    op.create_index("ix_properties_deleted_at", "properties", ["deleted_at"])

    op.create_table(
        "areas",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column("client_id", sa.String(), sa.ForeignKey("clients.id"), nullable=False),
        sa.Column("property_id", sa.String(), sa.ForeignKey("properties.id"), nullable=True),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("size", sa.Float(), nullable=False),
        sa.Column("unit", sa.String(), nullable=False),
        sa.Column("location", sa.JSON(), nullable=False),
        sa.Column("soil_type", sa.String(), nullable=True),
        sa.Column("irrigated", sa.Boolean(), nullable=False),
        sa.Column("status", sa.String(), nullable=False),
        *_audit_columns(),
    )
    op.create_index("ix_areas_client_id", "areas", ["client_id"])
    op.create_index("ix_areas_property_id", "areas", ["property_id"])
    op.create_index("ix_areas_deleted_at", "areas", ["deleted_at"])

    op.create_table(
        "crops",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column("area_id", sa.String(), sa.ForeignKey("areas.id"), nullable=False),
        sa.Column("client_id", sa.String(), sa.ForeignKey("clients.id"), nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("variety", sa.String(), nullable=True),
        sa.Column("planted_on", sa.Date(), nullable=False),
        sa.Column("harvested_on", sa.Date(), nullable=True),
        sa.Column("stage", sa.String(), nullable=False),
        sa.Column("yield_amount", sa.Float(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        *_audit_columns(),
    )
    op.create_index("ix_crops_area_id", "crops", ["area_id"])
    op.create_index("ix_crops_client_id", "crops", ["client_id"])
    op.create_index("ix_crops_deleted_at", "crops", ["deleted_at"])

    op.create_table(
        "pests",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column("crop_id", sa.String(), sa.ForeignKey("crops.id"), nullable=False),
        sa.Column("area_id", sa.String(), sa.ForeignKey("areas.id"), nullable=False),
        sa.Column("client_id", sa.String(), sa.ForeignKey("clients.id"), nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("kind", sa.String(), nullable=False),
        sa.Column("severity", sa.String(), nullable=False),
        sa.Column("detected_on", sa.Date(), nullable=False),
        sa.Column("resolved_on", sa.Date(), nullable=True),
        sa.Column("affected_area", sa.Float(), nullable=True),
        sa.Column("treatment", sa.Text(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        *_audit_columns(),
    )
    op.create_index("ix_pests_crop_id", "pests", ["crop_id"])
    op.create_index("ix_pests_client_id", "pests", ["client_id"])
    op.create_index("ix_pests_resolved_on", "pests", ["resolved_on"])
    op.create_index("ix_pests_deleted_at", "pests", ["deleted_at"])

    op.create_table(
        "losses",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column("crop_id", sa.String(), sa.ForeignKey("crops.id"), nullable=False),
        sa.Column("pest_id", sa.String(), sa.ForeignKey("pests.id"), nullable=True),
        sa.Column("area_id", sa.String(), sa.ForeignKey("areas.id"), nullable=False),
        sa.Column("client_id", sa.String(), sa.ForeignKey("clients.id"), nullable=False),
        sa.Column("kind", sa.String(), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("quantity", sa.Float(), nullable=False),
        sa.Column("unit", sa.String(), nullable=True),
        sa.Column("estimated_value", sa.Float(), nullable=False),
        sa.Column("occurred_on", sa.Date(), nullable=False),
        sa.Column("preventive_measure", sa.Text(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        *_audit_columns(),
    )
    op.create_index("ix_losses_crop_id", "losses", ["crop_id"])
    op.create_index("ix_losses_client_id", "losses", ["client_id"])
    op.create_index("ix_losses_kind", "losses", ["kind"])
    op.create_index("ix_losses_occurred_on", "losses", ["occurred_on"])
    op.create_index("ix_losses_deleted_at", "losses", ["deleted_at"])


def downgrade() -> None:
    op.drop_table("losses")
    op.drop_table("pests")
    op.drop_table("crops")
    op.drop_table("areas")
    op.drop_table("properties")
    op.drop_table("account_clients")
    op.drop_table("clients")
    op.drop_table("users")
