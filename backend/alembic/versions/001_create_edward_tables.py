"""Create Edward content tables

Revision ID: 001
Revises: None
Create Date: 2026-10-19 00:00:00.000000+00:00

What:  Users, documents, chapters, master topics, chapter topic bindings,
       plans, sections, workshops and order records.
Why:   Each content table carries a unique constraint on its natural key.
       The upsert engine's INSERT ... ON CONFLICT targets exactly these
       constraints, so two concurrent saves of the same item produce one row.

Rollback: downgrade() drops every table (destructive).
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps():
    return [
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
    ]


def _owner():
    return sa.Column(
        "user_id",
        sa.Integer(),
        sa.ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )


def _document():
    return sa.Column(
        "document_id",
        sa.Integer(),
        sa.ForeignKey("documents.id", ondelete="CASCADE"),
        nullable=False,
    )


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("email", sa.String(255), nullable=False, unique=True),
        sa.Column(
            "account_type",
            sa.String(20),
            nullable=False,
            server_default=sa.text("'LIMITED'"),
            comment="DEMO, LIMITED, PREMIUM, GOLD or ADMIN",
        ),
        sa.Column("verified", sa.Boolean(), nullable=False, server_default=sa.false()),
        *_timestamps(),
    )

    op.create_table(
        "documents",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("guid", sa.String(64), nullable=False),
        _owner(),
        sa.Column("name", sa.String(255), nullable=False, server_default=""),
        *_timestamps(),
        sa.UniqueConstraint("guid", "user_id", name="uq_documents_guid_user"),
    )
    op.create_index("ix_documents_user_id", "documents", ["user_id"])

    op.create_table(
        "chapters",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("guid", sa.String(64), nullable=False),
        _document(),
        _owner(),
        sa.Column("title", sa.String(255), nullable=False, server_default=""),
        sa.Column("content", sa.JSON(), nullable=True, comment="Rich-text delta"),
        sa.Column("archived", sa.Boolean(), nullable=False, server_default=sa.false()),
        *_timestamps(),
        sa.UniqueConstraint("guid", "document_id", "user_id", name="uq_chapters_natural_key"),
    )
    op.create_index("ix_chapters_document_id", "chapters", ["document_id"])

    op.create_table(
        "master_topics",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("guid", sa.String(64), nullable=False),
        _document(),
        _owner(),
        sa.Column("title", sa.String(255), nullable=False, server_default=""),
        sa.Column("archived", sa.Boolean(), nullable=False, server_default=sa.false()),
        *_timestamps(),
        sa.UniqueConstraint("guid", "document_id", "user_id", name="uq_master_topics_natural_key"),
    )
    op.create_index("ix_master_topics_document_id", "master_topics", ["document_id"])

    op.create_table(
        "chapter_topics",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        _owner(),
        sa.Column(
            "chapter_id",
            sa.Integer(),
            sa.ForeignKey("chapters.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "master_topic_id",
            sa.Integer(),
            sa.ForeignKey("master_topics.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("content", sa.JSON(), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint(
            "user_id", "chapter_id", "master_topic_id", name="uq_chapter_topics_natural_key"
        ),
    )
    op.create_index("ix_chapter_topics_chapter_id", "chapter_topics", ["chapter_id"])
    op.create_index("ix_chapter_topics_master_topic_id", "chapter_topics", ["master_topic_id"])

    op.create_table(
        "plans",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("guid", sa.String(64), nullable=False),
        _document(),
        _owner(),
        sa.Column("title", sa.String(255), nullable=False, server_default=""),
        sa.Column("archived", sa.Boolean(), nullable=False, server_default=sa.false()),
        *_timestamps(),
        sa.UniqueConstraint("guid", "document_id", "user_id", name="uq_plans_natural_key"),
    )
    op.create_index("ix_plans_document_id", "plans", ["document_id"])

    op.create_table(
        "sections",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("guid", sa.String(64), nullable=False),
        sa.Column(
            "plan_id",
            sa.Integer(),
            sa.ForeignKey("plans.id", ondelete="CASCADE"),
            nullable=False,
        ),
        _owner(),
        sa.Column("title", sa.String(255), nullable=False, server_default=""),
        sa.Column("content", sa.JSON(), nullable=True),
        sa.Column("tags", sa.JSON(), nullable=False, server_default=sa.text("'[]'")),
        sa.Column("archived", sa.Boolean(), nullable=False, server_default=sa.false()),
        *_timestamps(),
        sa.UniqueConstraint("guid", "plan_id", "user_id", name="uq_sections_natural_key"),
    )
    op.create_index("ix_sections_plan_id", "sections", ["plan_id"])

    op.create_table(
        "workshops",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("guid", sa.String(64), nullable=False),
        _document(),
        _owner(),
        sa.Column("title", sa.String(255), nullable=False, server_default=""),
        sa.Column("workshop_name", sa.String(100), nullable=False),
        sa.Column("position", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("content", sa.JSON(), nullable=True),
        sa.Column("date", sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column("archived", sa.Boolean(), nullable=False, server_default=sa.false()),
        *_timestamps(),
        sa.UniqueConstraint("guid", "document_id", "user_id", name="uq_workshops_natural_key"),
    )
    op.create_index("ix_workshops_document_id", "workshops", ["document_id"])

    op.create_table(
        "order_records",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "kind",
            sa.String(20),
            nullable=False,
            comment="chapter, topic, plan or section",
        ),
        sa.Column(
            "owner_guid",
            sa.String(160),
            nullable=False,
            comment="Document guid, or document guid / plan guid for section orders",
        ),
        _owner(),
        sa.Column("order", sa.JSON(), nullable=False, server_default=sa.text("'[]'")),
        *_timestamps(),
        sa.UniqueConstraint("kind", "owner_guid", "user_id", name="uq_order_records_natural_key"),
    )


def downgrade() -> None:
    op.drop_table("order_records")
    op.drop_index("ix_workshops_document_id", table_name="workshops")
    op.drop_table("workshops")
    op.drop_index("ix_sections_plan_id", table_name="sections")
    op.drop_table("sections")
    op.drop_index("ix_plans_document_id", table_name="plans")
    op.drop_table("plans")
    op.drop_index("ix_chapter_topics_master_topic_id", table_name="chapter_topics")
    op.drop_index("ix_chapter_topics_chapter_id", table_name="chapter_topics")
    op.drop_table("chapter_topics")
    op.drop_index("ix_master_topics_document_id", table_name="master_topics")
    op.drop_table("master_topics")
    op.drop_index("ix_chapters_document_id", table_name="chapters")
    op.drop_table("chapters")
    op.drop_index("ix_documents_user_id", table_name="documents")
    op.drop_table("documents")
    op.drop_table("users")
