"""add contact address columns to visitor identities

Revision ID: 8e4a6d2c1f07
Revises: 5c1f2e7a9b3d
Create Date: 2026-10-18 14:00:00.000000

"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "8e4a6d2c1f07"
down_revision: Union[str, None] = "5c1f2e7a9b3d"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema: keep the latest email/phone next to an account identifier."""
    op.add_column(
        "visitor_identities",
        sa.Column("contact_id", sa.String(length=320), nullable=True),
    )
    op.add_column(
        "visitor_identities",
        sa.Column("contact_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index(
        "ix_visitor_identities_contact_id", "visitor_identities", ["contact_id"]
    )


def downgrade() -> None:
    """Downgrade schema: drop contact address columns."""
    op.drop_index("ix_visitor_identities_contact_id", table_name="visitor_identities")
    op.drop_column("visitor_identities", "contact_at")
    op.drop_column("visitor_identities", "contact_id")
