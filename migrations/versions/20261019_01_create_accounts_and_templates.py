"""create accounts and templates tables

Revision ID: 20261019_01
Revises:
Create Date: 2026-10-19 09:00:00.000000
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "20261019_01"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "accounts",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("username", sa.String(length=50), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("password_hash", sa.String(length=255), nullable=False),
        sa.Column("refresh_token_hash", sa.String(length=64)),
        sa.Column("role", sa.String(length=20), nullable=False, server_default="user"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True)),
        sa.Column("last_login_at", sa.DateTime(timezone=True)),
    )
    op.create_index("ix_accounts_username", "accounts", ["username"])
    op.create_index("ix_accounts_email", "accounts", ["email"], unique=True)

    op.create_table(
        "templates",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=False, server_default=""),
        sa.Column("tags", sa.Text(), nullable=False, server_default="[]"),
        sa.Column("category", sa.String(length=100)),
        sa.Column("tech_stack", sa.String(length=100)),
        sa.Column("price_cents", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("preview_image_url", sa.String(length=1024)),
        sa.Column("download_url", sa.String(length=1024)),
        sa.Column("is_premium", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="pending"),
        sa.Column("admin_comment", sa.Text()),
        sa.Column("created_by", sa.String(length=36), sa.ForeignKey("accounts.id"), nullable=False),
        sa.Column("reviewed_by", sa.String(length=36), sa.ForeignKey("accounts.id")),
        sa.Column("reviewed_at", sa.DateTime(timezone=True)),
        sa.Column("demo_url", sa.String(length=1024)),
        sa.Column("has_live_demo", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("demo_deployment_id", sa.String(length=255), unique=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True)),
    )
    op.create_index("ix_templates_title", "templates", ["title"])
    op.create_index("ix_templates_category", "templates", ["category"])
    op.create_index("ix_templates_status", "templates", ["status"])
    op.create_index("ix_templates_created_by", "templates", ["created_by"])


def downgrade() -> None:
    op.drop_index("ix_templates_created_by", table_name="templates")
    op.drop_index("ix_templates_status", table_name="templates")
    op.drop_index("ix_templates_category", table_name="templates")
    op.drop_index("ix_templates_title", table_name="templates")
    op.drop_table("templates")
    op.drop_index("ix_accounts_email", table_name="accounts")
    op.drop_index("ix_accounts_username", table_name="accounts")
    op.drop_table("accounts")
