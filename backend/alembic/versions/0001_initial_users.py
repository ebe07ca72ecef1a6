"""Create users and security_logs tables.

Revision ID: 0001
Revises:
Create Date: 2026-09-28
"""

revision = "0001"
down_revision = None
branch_labels = None
depends_on = None

from alembic import op
import sqlalchemy as sa


USER_ROLE = sa.Enum("USER", "STAFFER", "SUPER_ADMIN", name="userrole")


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("username", sa.String(50), nullable=False),
        sa.Column("hashed_password", sa.String(255), nullable=False),
        sa.Column("first_name", sa.String(100)),
        sa.Column("last_name", sa.String(100)),
        sa.Column("avatar", sa.String(500)),
        sa.Column("city", sa.String(100)),
        sa.Column("country", sa.String(100)),
        sa.Column("role", USER_ROLE, nullable=False, server_default="USER"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("failed_login_attempts", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("locked_until", sa.DateTime()),
        sa.Column("last_login_at", sa.DateTime()),
        sa.Column("password_reset_token_hash", sa.String(64)),
        sa.Column("password_reset_expires_at", sa.DateTime()),
        # Flat onboarding columns; folded into a status column by 0002
        sa.Column("onboarding_step", sa.Integer()),
        sa.Column("onboarding_started_at", sa.DateTime()),
        sa.Column("onboarding_completed_at", sa.DateTime()),
        sa.Column("onboarding_completed", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("onboarding_skipped", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("locations_onboarding_completed", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("people_onboarding_completed", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("terms_accepted_at", sa.DateTime()),
        sa.Column("terms_version", sa.String(20)),
        sa.Column("privacy_accepted_at", sa.DateTime()),
        sa.Column("privacy_version", sa.String(20)),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)
    op.create_index("ix_users_username", "users", ["username"], unique=True)
    op.create_index("ix_users_password_reset_token_hash", "users", ["password_reset_token_hash"])

    op.create_table(
        "security_logs",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("user_id", sa.String(36), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("event_type", sa.String(50), nullable=False),
        sa.Column("ip_address", sa.String(100), nullable=False, server_default="unknown"),
        sa.Column("user_agent", sa.String(500), nullable=False, server_default="unknown"),
        sa.Column("device_type", sa.String(30), nullable=False, server_default="web"),
        sa.Column("details", sa.JSON()),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_security_logs_user_id", "security_logs", ["user_id"])
    op.create_index("ix_security_logs_event_type", "security_logs", ["event_type"])
    op.create_index("ix_security_logs_created_at", "security_logs", ["created_at"])


def downgrade() -> None:
    op.drop_table("security_logs")
    op.drop_table("users")
    USER_ROLE.drop(op.get_bind(), checkfirst=True)
