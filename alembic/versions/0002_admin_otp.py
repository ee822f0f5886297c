"""admin_otp: one-time codes for admin login

Revision ID: 0002_admin_otp
Revises: 0001_crm_sync
Create Date: 2026-10-19 12:00:00.000000
"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "0002_admin_otp"
down_revision = "0001_crm_sync"
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        "admin_otp",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("otp_code", sa.String(6), nullable=False),
        sa.Column("expires_at", sa.DateTime(), nullable=False),
        sa.Column("used", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.text("CURRENT_TIMESTAMP")),
        sa.PrimaryKeyConstraint("id", name="pk_admin_otp"),
    )
    op.create_index("ix_admin_otp_email", "admin_otp", ["email"], unique=False)


def downgrade():
    op.drop_index("ix_admin_otp_email", table_name="admin_otp")
    op.drop_table("admin_otp")
