"""Create gamification tables

Revision ID: 001
Revises:
Create Date: 2026-10-17 10:00:00.000000

"""

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision = "001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "user_stats",
        sa.Column("id", sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column("tenant_id", sa.String(64), nullable=False),
        sa.Column("user_id", sa.String(64), nullable=False),
        sa.Column("total_xp", sa.BigInteger(), nullable=False, server_default="0"),
        sa.Column("level", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("badges", sa.JSON(), nullable=False),
        sa.Column("total_courses_completed", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("total_modules_completed", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("total_assessments_taken", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("total_assessments_passed", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("average_score", sa.Float(), nullable=False, server_default="0"),
        sa.Column("current_streak", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("longest_streak", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("last_activity_date", sa.Date(), nullable=True),
        sa.Column("last_login_date", sa.Date(), nullable=True),
        sa.Column(
            "created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()
        ),
        sa.Column(
            "updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()
        ),
        sa.UniqueConstraint("tenant_id", "user_id", name="uq_user_stats_tenant_user"),
    )

    op.create_table(
        "xp_events",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("tenant_id", sa.String(64), nullable=False),
        sa.Column("user_id", sa.String(64), nullable=False),
        sa.Column("type", sa.String(32), nullable=False),
        sa.Column("amount", sa.BigInteger(), nullable=False),
        sa.Column("label", sa.String(255), nullable=False, server_default=""),
        sa.Column(
            "created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()
        ),
    )
    op.create_index(
        "ix_xp_events_tenant_user_created", "xp_events", ["tenant_id", "user_id", "created_at"]
    )

    op.create_table(
        "user_achievements",
        sa.Column("id", sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column("tenant_id", sa.String(64), nullable=False),
        sa.Column("user_id", sa.String(64), nullable=False),
        sa.Column("achievement_id", sa.String(64), nullable=False),
        sa.Column(
            "unlocked_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()
        ),
        sa.UniqueConstraint("tenant_id", "user_id", "achievement_id", name="uq_user_achievement"),
    )
    op.create_index(
        "ix_user_achievements_tenant_user", "user_achievements", ["tenant_id", "user_id"]
    )

    op.create_table(
        "dashboard_snapshots",
        sa.Column("id", sa.Uuid(as_uuid=True), primary_key=True),
        sa.Column("tenant_id", sa.String(64), nullable=False),
        sa.Column("user_id", sa.String(64), nullable=False),
        sa.Column("payload", sa.Text(), nullable=False),
        sa.Column(
            "updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()
        ),
        sa.UniqueConstraint("tenant_id", "user_id", name="uq_dashboard_snapshot_owner"),
    )


def downgrade() -> None:
    op.drop_table("dashboard_snapshots")
    op.drop_index("ix_user_achievements_tenant_user", table_name="user_achievements")
    op.drop_table("user_achievements")
    op.drop_index("ix_xp_events_tenant_user_created", table_name="xp_events")
    op.drop_table("xp_events")
    op.drop_table("user_stats")
