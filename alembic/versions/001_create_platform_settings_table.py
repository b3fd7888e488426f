"""create platform_settings table

Revision ID: 001
Revises:
Create Date: 2026-10-19
"""

from alembic import op
import sqlalchemy as sa

revision = "001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "platform_settings",
        sa.Column("id", sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column("platform_name", sa.String(100), nullable=False),
        sa.Column("platform_fee_percentage", sa.Numeric(5, 2), nullable=False),
        sa.Column("platform_to_payoneer_amount", sa.Numeric(18, 2)),
        sa.Column("platform_to_payoneer_currency", sa.String(10)),
        sa.Column("platform_to_local_bank_amount", sa.Numeric(18, 2)),
        sa.Column("platform_to_local_bank_currency", sa.String(10)),
        sa.Column("payoneer_to_local_bank_amount", sa.Numeric(18, 2)),
        sa.Column("payoneer_to_local_bank_currency", sa.String(10)),
        sa.Column("is_custom", sa.Boolean(), server_default="false", nullable=False),
        sa.Column("owner_id", sa.String(64), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint(
            "owner_id", "platform_name", name="uq_platform_settings_owner_platform",
        ),
        sa.CheckConstraint(
            "platform_fee_percentage >= 0 AND platform_fee_percentage <= 100",
            name="ck_platform_settings_fee_percentage",
        ),
    )
    op.create_index("ix_platform_settings_owner_id", "platform_settings", ["owner_id"])


def downgrade() -> None:
    op.drop_index("ix_platform_settings_owner_id", table_name="platform_settings")
    op.drop_table("platform_settings")
