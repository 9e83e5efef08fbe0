"""compliance tracking tables

Revision ID: 0001_compliance_tracking
Revises:
Create Date: 2024-01-15
"""
from alembic import op
import sqlalchemy as sa


revision = "0001_compliance_tracking"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps():
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("is_deleted", sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
    ]


def upgrade():
    op.create_table(
        "compliance_requirements",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("tenant_id", sa.String(length=100), nullable=False),
        sa.Column("site_id", sa.String(length=36), nullable=True),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("regulation_reference", sa.String(length=100), nullable=True),
        sa.Column("category", sa.String(length=50), nullable=False),
        sa.Column("compliance_type", sa.String(length=100), nullable=True),
        sa.Column("priority", sa.String(length=20), nullable=False),
        sa.Column("frequency", sa.String(length=20), nullable=False),
        sa.Column("last_inspection_date", sa.Date(), nullable=True),
        sa.Column("next_inspection_date", sa.Date(), nullable=False),
        sa.Column("last_audit_date", sa.Date(), nullable=True),
        sa.Column("last_audited_by", sa.String(length=36), nullable=True),
        sa.Column("status", sa.String(length=20), nullable=False),
        sa.Column("assigned_to", sa.String(length=36), nullable=True),
        sa.Column("requirements", sa.JSON(), nullable=False),
        sa.Column("required_actions", sa.JSON(), nullable=False),
        sa.Column("documentation_links", sa.JSON(), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        *_timestamps(),
    )
    for column in (
        "tenant_id", "site_id", "category", "compliance_type", "priority",
        "frequency", "next_inspection_date", "status", "assigned_to", "is_deleted",
    ):
        op.create_index(f"ix_compliance_requirements_{column}", "compliance_requirements", [column])

    op.create_table(
        "equipment_compliance",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("tenant_id", sa.String(length=100), nullable=False),
        sa.Column(
            "requirement_id",
            sa.String(length=36),
            sa.ForeignKey("compliance_requirements.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("equipment_type", sa.String(length=50), nullable=False),
        sa.Column("equipment_name", sa.String(length=255), nullable=True),
        sa.Column("serial_number", sa.String(length=100), nullable=True),
        sa.Column("certification_expiry", sa.Date(), nullable=True),
        sa.Column("status", sa.String(length=20), nullable=False),
        sa.Column("next_inspection_date", sa.Date(), nullable=True),
        sa.Column("next_maintenance_date", sa.Date(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        *_timestamps(),
    )
    for column in (
        "tenant_id", "requirement_id", "equipment_type", "serial_number",
        "certification_expiry", "status", "is_deleted",
    ):
        op.create_index(f"ix_equipment_compliance_{column}", "equipment_compliance", [column])

    op.create_table(
        "audit_leases",
        sa.Column("tenant_id", sa.String(length=100), primary_key=True),
        sa.Column("token", sa.String(length=36), nullable=False),
        sa.Column("holder", sa.String(length=36), nullable=True),
        sa.Column("acquired_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
    )

    op.create_table(
        "audit_trail",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("tenant_id", sa.String(length=100), nullable=False),
        sa.Column("actor_id", sa.String(length=36), nullable=True),
        sa.Column("ip_address", sa.String(length=50), nullable=True),
        sa.Column("user_agent", sa.String(length=512), nullable=True),
        sa.Column("action", sa.String(length=100), nullable=False),
        sa.Column("entity_type", sa.String(length=100), nullable=False),
        sa.Column("entity_id", sa.String(length=36), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    for column in ("tenant_id", "actor_id", "action", "entity_type", "entity_id", "created_at"):
        op.create_index(f"ix_audit_trail_{column}", "audit_trail", [column])


def downgrade():
    op.drop_table("audit_trail")
    op.drop_table("audit_leases")
    op.drop_table("equipment_compliance")
    op.drop_table("compliance_requirements")
