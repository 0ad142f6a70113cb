"""Initial schema

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-19

"""

from collections.abc import Sequence

from alembic import op
import sqlalchemy as sa


revision: str = "0001_initial"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("uid", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("mail", sa.String(length=254), nullable=True),
        sa.Column("preferred_langcode", sa.String(length=12), server_default=sa.text("'en'"), nullable=False),
        sa.PrimaryKeyConstraint("uid"),
    )
    op.create_table(
        "taxonomy_terms",
        sa.Column("tid", sa.Integer(), nullable=False),
        sa.Column("vid", sa.String(length=32), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.PrimaryKeyConstraint("tid"),
    )
    op.create_table(
        "nodes",
        sa.Column("nid", sa.Integer(), nullable=False),
        sa.Column("type", sa.String(length=32), nullable=False),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("shared_subject_tid", sa.Integer(), nullable=True),
        sa.ForeignKeyConstraint(["shared_subject_tid"], ["taxonomy_terms.tid"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("nid"),
    )
    op.create_table(
        "messages",
        sa.Column("mid", sa.Integer(), nullable=False),
        sa.Column("template", sa.String(length=64), nullable=False),
        sa.Column("created", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("uid", sa.Integer(), nullable=True),
        sa.Column("node_nid", sa.Integer(), nullable=True),
        sa.Column("text", sa.JSON(), nullable=True),
        sa.ForeignKeyConstraint(["uid"], ["users.uid"], ondelete="SET NULL"),
        sa.ForeignKeyConstraint(["node_nid"], ["nodes.nid"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("mid"),
    )
    op.create_index("ix_messages_template_created", "messages", ["template", "created"])
    op.create_table(
        "flagging",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("flag_id", sa.String(length=32), nullable=False),
        sa.Column("uid", sa.Integer(), nullable=False),
        sa.Column("entity_type", sa.String(length=32), nullable=False),
        sa.Column("entity_id", sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(["uid"], ["users.uid"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_flagging_flag_id_uid", "flagging", ["flag_id", "uid"])


def downgrade() -> None:
    op.drop_index("ix_flagging_flag_id_uid", table_name="flagging")
    op.drop_table("flagging")
    op.drop_index("ix_messages_template_created", table_name="messages")
    op.drop_table("messages")
    op.drop_table("nodes")
    op.drop_table("taxonomy_terms")
    op.drop_table("users")
