"""
initial schema: users, groups (invite_code inline), group_members
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa

revision: str = "20250819_initial_groups"
down_revision: str | None = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column("device_token", sa.String(), nullable=False),
        sa.Column("name", sa.String(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_users_device_token", "users", ["device_token"], unique=True)

    op.create_table(
        "groups",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column("invite_code", sa.String(16), nullable=False, comment="Короткий код приглашения (8 символов a-z0-9)"),
        sa.Column("model_id", sa.String(), nullable=False, comment="Внешний идентификатор модели, вокруг которой собрана группа"),
        sa.Column(
            "creator_id",
            sa.String(),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("title", sa.String(), nullable=True),
        sa.Column("description", sa.String(), nullable=True),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=True, comment="Когда приглашение истекает (UTC); NULL - бессрочно"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_groups_invite_code", "groups", ["invite_code"], unique=True)
    op.create_index("ix_groups_creator_id", "groups", ["creator_id"])

    op.create_table(
        "group_members",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column(
            "user_id",
            sa.String(),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "group_id",
            sa.String(),
            sa.ForeignKey("groups.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("joined_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint("user_id", "group_id", name="uq_group_members_user_group"),
    )
    op.create_index("ix_group_members_user_id", "group_members", ["user_id"])
    op.create_index("ix_group_members_group_id", "group_members", ["group_id"])


def downgrade() -> None:
    op.drop_index("ix_group_members_group_id", table_name="group_members")
    op.drop_index("ix_group_members_user_id", table_name="group_members")
    op.drop_table("group_members")

    op.drop_index("ix_groups_creator_id", table_name="groups")
    op.drop_index("ix_groups_invite_code", table_name="groups")
    op.drop_table("groups")

    op.drop_index("ix_users_device_token", table_name="users")
    op.drop_table("users")
