"""number_sequences_and_unique_certificates

Revision ID: 8e4b2c7d1f60
Revises: 3c1f0a9d2b7e
Create Date: 2026-10-16 14:03:51.772904

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '8e4b2c7d1f60'
down_revision: Union[str, Sequence[str], None] = '3c1f0a9d2b7e'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        "number_sequences",
        sa.Column("prefix", sa.String(), primary_key=True, nullable=False),
        sa.Column("last_value", sa.Integer(), nullable=False, server_default="0"),
    )

    # carry on from the highest number already issued under each prefix
    op.execute(
        """
        INSERT INTO number_sequences (prefix, last_value)
        SELECT
            left(n, length(n) - position('-' in reverse(n))),
            max(CAST(right(n, position('-' in reverse(n)) - 1) AS INTEGER))
        FROM (
            SELECT booking_number AS n FROM bookings
            UNION ALL SELECT erp_job_number FROM jobs
            UNION ALL SELECT invoice_number FROM invoices
            UNION ALL SELECT certificate_id FROM sanitisation_records
        ) issued
        GROUP BY 1;
        """
    )

    op.create_unique_constraint(
        "uq_sanitisation_records_certificate_id",
        "sanitisation_records",
        ["certificate_id"],
    )


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_constraint("uq_sanitisation_records_certificate_id", "sanitisation_records", type_="unique")
    op.drop_table("number_sequences")
