"""create records table

Revision ID: 5b1c9e2a7d40
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '5b1c9e2a7d40'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "records",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("collection", sa.String(length=50), nullable=False),
        sa.Column("data", sa.JSON(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_records_id", "records", ["id"])
    op.create_index("ix_records_collection", "records", ["collection"])
    op.create_index("ix_records_created_at", "records", ["created_at"])
    op.create_index("ix_records_collection_created", "records", ["collection", "created_at"])


def downgrade() -> None:
    op.drop_index("ix_records_collection_created", table_name="records")
    op.drop_index("ix_records_created_at", table_name="records")
    op.drop_index("ix_records_collection", table_name="records")
    op.drop_index("ix_records_id", table_name="records")
    op.drop_table("records")
