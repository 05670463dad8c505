"""create contracts table

Revision ID: 0001_create_contracts
Revises:
Create Date: 2026-10-19 00:00:00.000000
"""

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = "0001_create_contracts"
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        "contracts",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("network", sa.String(64), nullable=False),
        sa.Column("address", sa.String(42), nullable=False),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("entrypoint", sa.Text(), nullable=False),
        sa.Column("compiler", sa.Text(), nullable=False),
        sa.Column("optimise", sa.Boolean(), nullable=False),
        sa.Column("txid", sa.String(66), nullable=False),
        sa.Column("constructor_arguments", sa.Text(), nullable=False),
        sa.Column("sources", sa.JSON().with_variant(postgresql.JSONB(), "postgresql"), nullable=False),
        sa.Column("abi", sa.Text(), nullable=False),
        sa.Column("bin", sa.Text(), nullable=False),
        sa.UniqueConstraint("network", "address", name="ux_contracts_network_address"),
    )
    op.create_index("ix_contracts_txid", "contracts", ["txid"])


def downgrade():
    op.drop_index("ix_contracts_txid", table_name="contracts")
    op.drop_table("contracts")
