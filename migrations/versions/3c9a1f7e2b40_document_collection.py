"""document collection

Revision ID: 3c9a1f7e2b40
Revises:
Create Date: 2026-10-18 09:12:44.512031

"""
from __future__ import annotations

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "3c9a1f7e2b40"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create the shared partitioned document table."""
    op.create_table(
        "document",
        sa.Column("id", sa.String(length=64), nullable=False),
        sa.Column("partition_key", sa.String(length=64), nullable=False),
        sa.Column("doc_type", sa.String(length=32), nullable=False),
        sa.Column("date_created", sa.DateTime(timezone=True), nullable=False),
        sa.Column("body", sa.JSON(), nullable=False),
        sa.Column("version", sa.Integer(), nullable=False, server_default="1"),
        sa.PrimaryKeyConstraint("id", "partition_key"),
    )
    op.create_index(
        "ix_document_type_date_created",
        "document",
        ["doc_type", "date_created"],
    )
    op.create_index(
        "ix_document_partition_type",
        "document",
        ["partition_key", "doc_type"],
    )


def downgrade() -> None:
    """Drop the document table."""
    op.drop_index("ix_document_partition_type", table_name="document")
    op.drop_index("ix_document_type_date_created", table_name="document")
    op.drop_table("document")
