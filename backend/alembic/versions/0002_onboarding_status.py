"""Replace onboarding_completed / onboarding_skipped with onboarding_status.

Rows with both flags set become completed. Payload columns are
normalised so every row satisfies its status:
  not_started → no step, no timestamps
  in_progress → step kept (clamped to 0..8), started_at backfilled
  completed   → step 9, completed_at backfilled
  skipped     → no step, no completed_at

Revision ID: 0002
Revises: 0001
Create Date: 2026-10-06
"""

revision = "0002"
down_revision = "0001"
branch_labels = None
depends_on = None

from alembic import op
import sqlalchemy as sa


ONBOARDING_STATUS = sa.Enum(
    "NOT_STARTED", "IN_PROGRESS", "COMPLETED", "SKIPPED", name="onboardingstatus"
)


def upgrade() -> None:
    ONBOARDING_STATUS.create(op.get_bind(), checkfirst=True)
    op.add_column(
        "users",
        sa.Column(
            "onboarding_status",
            ONBOARDING_STATUS,
            nullable=False,
            server_default="NOT_STARTED",
        ),
    )

    op.execute("""
        UPDATE users SET onboarding_status = CASE
            WHEN onboarding_completed THEN 'COMPLETED'
            WHEN onboarding_skipped THEN 'SKIPPED'
            WHEN onboarding_step IS NOT NULL THEN 'IN_PROGRESS'
            ELSE 'NOT_STARTED'
        END::onboardingstatus
    """)
    op.execute("""
        UPDATE users SET onboarding_step = 9,
            onboarding_completed_at = COALESCE(onboarding_completed_at, updated_at)
        WHERE onboarding_status = 'COMPLETED'
    """)
    op.execute("""
        UPDATE users SET onboarding_step = NULL, onboarding_completed_at = NULL
        WHERE onboarding_status = 'SKIPPED'
    """)
    op.execute("""
        UPDATE users SET onboarding_step = LEAST(GREATEST(onboarding_step, 0), 8),
            onboarding_started_at = COALESCE(onboarding_started_at, updated_at),
            onboarding_completed_at = NULL
        WHERE onboarding_status = 'IN_PROGRESS'
    """)
    op.execute("""
        UPDATE users SET onboarding_step = NULL, onboarding_started_at = NULL,
            onboarding_completed_at = NULL
        WHERE onboarding_status = 'NOT_STARTED'
    """)

    op.drop_column("users", "onboarding_completed")
    op.drop_column("users", "onboarding_skipped")


def downgrade() -> None:
    op.add_column(
        "users",
        sa.Column("onboarding_completed", sa.Boolean(), nullable=False, server_default=sa.text("false")),
    )
    op.add_column(
        "users",
        sa.Column("onboarding_skipped", sa.Boolean(), nullable=False, server_default=sa.text("false")),
    )
    op.execute("UPDATE users SET onboarding_completed = (onboarding_status = 'COMPLETED')")
    op.execute("UPDATE users SET onboarding_skipped = (onboarding_status = 'SKIPPED')")
    op.drop_column("users", "onboarding_status")
    ONBOARDING_STATUS.drop(op.get_bind(), checkfirst=True)
