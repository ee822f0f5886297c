"""crm sync tables: users, user_activities, activity_logs, leads

Revision ID: 0001_crm_sync
Revises:
Create Date: 2026-10-19 00:00:00.000000
"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "0001_crm_sync"
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        "users",
        sa.Column("id", sa.String(64), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("full_name", sa.String(255), nullable=True),
        sa.Column("registration_source", sa.String(32), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.text("CURRENT_TIMESTAMP")),
        sa.PrimaryKeyConstraint("id", name="pk_users"),
        sa.UniqueConstraint("email", name="uq_users_email"),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=False)

    op.create_table(
        "user_activities",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.String(64), nullable=False),
        sa.Column("login_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("subscription_days_left", sa.Integer(), nullable=True),
        sa.Column("daily_time_spent", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("total_time_spent", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("last_active", sa.DateTime(), nullable=True),
        sa.Column("updated_at", sa.DateTime(), nullable=False, server_default=sa.text("CURRENT_TIMESTAMP")),
        sa.PrimaryKeyConstraint("id", name="pk_user_activities"),
        sa.ForeignKeyConstraint(
            ["user_id"], ["users.id"], ondelete="CASCADE",
            name="fk_user_activities_user_id_users",
        ),
        sa.UniqueConstraint("user_id", name="uq_user_activities_user_id"),
    )

    op.create_table(
        "activity_logs",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.String(64), nullable=False),
        sa.Column("page_name", sa.String(255), nullable=True),
        sa.Column("page_url", sa.String(1024), nullable=True),
        sa.Column("time_spent", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("visit_date", sa.Date(), nullable=True),
        sa.Column("timestamp", sa.DateTime(), nullable=False, server_default=sa.text("CURRENT_TIMESTAMP")),
        sa.PrimaryKeyConstraint("id", name="pk_activity_logs"),
        sa.ForeignKeyConstraint(
            ["user_id"], ["users.id"], ondelete="CASCADE",
            name="fk_activity_logs_user_id_users",
        ),
    )
    op.create_index("ix_activity_logs_user_id", "activity_logs", ["user_id"], unique=False)
    op.create_index("ix_activity_logs_user_visit", "activity_logs", ["user_id", "visit_date"], unique=False)

    op.create_table(
        "leads",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(255), nullable=True),
        sa.Column("first_name", sa.String(120), nullable=True),
        sa.Column("last_name", sa.String(120), nullable=True),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("phone", sa.String(64), nullable=True),
        sa.Column("company", sa.String(255), nullable=True),
        sa.Column("state", sa.String(120), nullable=True),
        sa.Column("gender", sa.String(32), nullable=True),
        sa.Column("exam_category", sa.String(120), nullable=True),
        sa.Column("how_did_you_hear", sa.String(255), nullable=True),
        sa.Column("source", sa.String(120), nullable=True),
        sa.Column("status", sa.String(32), nullable=False, server_default="New"),
        sa.Column("user_type", sa.String(32), nullable=True),
        sa.Column("plan", sa.String(120), nullable=True),
        sa.Column("referral_code", sa.String(64), nullable=True),
        sa.Column("subscription_plan", sa.String(64), nullable=True),
        sa.Column("value", sa.Float(), nullable=True),
        sa.Column("amount_paid", sa.Float(), nullable=False, server_default="0"),
        sa.Column("trial_start_date", sa.DateTime(), nullable=True),
        sa.Column("trial_end_date", sa.DateTime(), nullable=True),
        sa.Column("subscription_start_date", sa.DateTime(), nullable=True),
        sa.Column("subscription_end_date", sa.DateTime(), nullable=True),
        sa.Column("next_payment_date", sa.DateTime(), nullable=True),
        sa.Column("is_trial_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("is_subscription_active", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("tags", sa.JSON(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("user_id", sa.String(64), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.text("CURRENT_TIMESTAMP")),
        sa.Column("updated_at", sa.DateTime(), nullable=False, server_default=sa.text("CURRENT_TIMESTAMP")),
        sa.PrimaryKeyConstraint("id", name="pk_leads"),
        sa.ForeignKeyConstraint(
            ["user_id"], ["users.id"], ondelete="SET NULL",
            name="fk_leads_user_id_users",
        ),
    )
    op.create_index("ix_leads_email", "leads", ["email"], unique=False)
    op.create_index("ix_leads_user_id", "leads", ["user_id"], unique=False)
    op.create_index("ix_leads_trial_end_date", "leads", ["trial_end_date"], unique=False)
    op.create_index(
        "ix_leads_trial_check", "leads",
        ["trial_end_date", "subscription_plan", "status"], unique=False,
    )


def downgrade():
    op.drop_index("ix_leads_trial_check", table_name="leads")
    op.drop_index("ix_leads_trial_end_date", table_name="leads")
    op.drop_index("ix_leads_user_id", table_name="leads")
    op.drop_index("ix_leads_email", table_name="leads")
    op.drop_table("leads")
    op.drop_index("ix_activity_logs_user_visit", table_name="activity_logs")
    op.drop_index("ix_activity_logs_user_id", table_name="activity_logs")
    op.drop_table("activity_logs")
    op.drop_table("user_activities")
    op.drop_index("ix_users_email", table_name="users")
    op.drop_table("users")
