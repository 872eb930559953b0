"""Add articles table for text source nodes.

Revision ID: 0002
Revises: 0001
Create Date: 2026-10-18

Adds:
- articles table (uploaded or scraped text placed on a project canvas)

"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

revision: str = "0002"
down_revision: Union[str, None] = "0001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "articles",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("project_id", sa.Uuid(), nullable=False),
        sa.Column("user_id", sa.String(255), nullable=False),
        sa.Column("title", sa.String(500), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("format", sa.String(20), nullable=True),
        sa.Column("word_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("file_name", sa.String(512), nullable=True),
        sa.Column("storage_id", sa.String(64), nullable=True),
        sa.Column("source_url", sa.String(2048), nullable=True),
        sa.Column("canvas_x", sa.Float(), nullable=False, server_default="0"),
        sa.Column("canvas_y", sa.Float(), nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), onupdate=sa.func.now()),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["project_id"], ["projects.id"], ondelete="CASCADE"),
    )
    op.create_index("ix_articles_project_id", "articles", ["project_id"])
    op.create_index("ix_articles_user_id", "articles", ["user_id"])


def downgrade() -> None:
    op.drop_index("ix_articles_user_id", table_name="articles")
    op.drop_index("ix_articles_project_id", table_name="articles")
    op.drop_table("articles")
