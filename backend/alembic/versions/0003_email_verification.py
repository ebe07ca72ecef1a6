"""Add email verification state to users.

Accounts that already exist were created before verification was
enforced and are marked verified so they can keep signing in.

Revision ID: 0003
Revises: 0002
Create Date: 2026-10-19
"""

revision = "0003"
down_revision = "0002"
branch_labels = None
depends_on = None

from alembic import op
import sqlalchemy as sa


def upgrade() -> None:
    op.add_column(
        "users",
        sa.Column("email_verified", sa.Boolean(), nullable=False, server_default=sa.text("false")),
    )
    op.add_column("users", sa.Column("verification_token", sa.String(64)))
    op.add_column("users", sa.Column("verification_token_expiry", sa.DateTime()))
    op.add_column("users", sa.Column("last_verification_email_sent_at", sa.DateTime()))
    op.create_index("ix_users_verification_token", "users", ["verification_token"])

    op.execute("UPDATE users SET email_verified = true")


def downgrade() -> None:
    op.drop_index("ix_users_verification_token", table_name="users")
    op.drop_column("users", "last_verification_email_sent_at")
    op.drop_column("users", "verification_token_expiry")
    op.drop_column("users", "verification_token")
    op.drop_column("users", "email_verified")
