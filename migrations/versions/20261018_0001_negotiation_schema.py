"""users, contracts and contract adjustment negotiations

Revision ID: 20261018_0001
Revises:
Create Date: 2026-10-18 00:00:01
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "20261018_0001"
down_revision = None
branch_labels = None
depends_on = None

ACTIVE_NEGOTIATION_PREDICATE = "status IN ('pending', 'countered')"


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.String(length=64), nullable=False),
        sa.Column("email", sa.String(length=320), nullable=False),
        sa.Column("full_name", sa.String(length=255), nullable=False),
        sa.Column("roles", sa.JSON(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("email"),
    )

    op.create_table(
        "contracts",
        sa.Column("id", sa.String(length=64), nullable=False),
        sa.Column("buyer_id", sa.String(length=64), nullable=False),
        sa.Column("provider_id", sa.String(length=64), nullable=False),
        sa.Column("status", sa.String(length=32), nullable=False),
        sa.Column("total_price", sa.Numeric(12, 2), nullable=True),
        sa.Column("deadline", sa.String(length=200), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["buyer_id"], ["users.id"], ondelete="RESTRICT"),
        sa.ForeignKeyConstraint(["provider_id"], ["users.id"], ondelete="RESTRICT"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("idx_contracts_buyer_status", "contracts", ["buyer_id", "status"])
    op.create_index("idx_contracts_provider_status", "contracts", ["provider_id", "status"])

    op.create_table(
        "negotiations",
        sa.Column("id", sa.String(length=64), nullable=False),
        sa.Column("contract_id", sa.String(length=64), nullable=False),
        sa.Column("buyer_id", sa.String(length=64), nullable=False),
        sa.Column("provider_id", sa.String(length=64), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False),
        sa.Column("version", sa.Integer(), nullable=False),
        sa.Column("initial_price", sa.Numeric(12, 2), nullable=False),
        sa.Column("initial_deadline", sa.String(length=200), nullable=False),
        sa.Column("initial_notes", sa.Text(), nullable=True),
        sa.Column("counter_price", sa.Numeric(12, 2), nullable=True),
        sa.Column("counter_deadline", sa.String(length=200), nullable=True),
        sa.Column("counter_notes", sa.Text(), nullable=True),
        sa.Column("final_price", sa.Numeric(12, 2), nullable=True),
        sa.Column("final_deadline", sa.String(length=200), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["contract_id"], ["contracts.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "uq_negotiations_active_contract",
        "negotiations",
        ["contract_id"],
        unique=True,
        sqlite_where=sa.text(ACTIVE_NEGOTIATION_PREDICATE),
        postgresql_where=sa.text(ACTIVE_NEGOTIATION_PREDICATE),
    )
    op.create_index("idx_negotiations_contract_created", "negotiations", ["contract_id", "created_at"])
    op.create_index("idx_negotiations_buyer_status", "negotiations", ["buyer_id", "status"])
    op.create_index("idx_negotiations_provider_status", "negotiations", ["provider_id", "status"])

    op.create_table(
        "negotiation_events",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("negotiation_id", sa.String(length=64), nullable=False),
        sa.Column("sequence", sa.Integer(), nullable=False),
        sa.Column("author_id", sa.String(length=64), nullable=False),
        sa.Column("kind", sa.String(length=32), nullable=False),
        sa.Column("price", sa.Numeric(12, 2), nullable=True),
        sa.Column("deadline", sa.String(length=200), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("message", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["negotiation_id"], ["negotiations.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("negotiation_id", "sequence", name="uq_negotiation_events_sequence"),
    )


def downgrade() -> None:
    op.drop_table("negotiation_events")
    op.drop_index("idx_negotiations_provider_status", table_name="negotiations")
    op.drop_index("idx_negotiations_buyer_status", table_name="negotiations")
    op.drop_index("idx_negotiations_contract_created", table_name="negotiations")
    op.drop_index("uq_negotiations_active_contract", table_name="negotiations")
    op.drop_table("negotiations")
    op.drop_index("idx_contracts_provider_status", table_name="contracts")
    op.drop_index("idx_contracts_buyer_status", table_name="contracts")
    op.drop_table("contracts")
    op.drop_table("users")
