"""Negotiation and negotiation event model module."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from sqlalchemy import DateTime, ForeignKey, Index, Integer, Numeric, String, Text, UniqueConstraint, text
from sqlalchemy.orm import Mapped, mapped_column

from marketplace.models.base import Base

# Partial-index predicate enforcing one active negotiation per contract.
ACTIVE_NEGOTIATION_PREDICATE = "status IN ('pending', 'countered')"


class Negotiation(Base):
    __tablename__ = "negotiations"
    __table_args__ = (
        Index(
            "uq_negotiations_active_contract",
            "contract_id",
            unique=True,
            sqlite_where=text(ACTIVE_NEGOTIATION_PREDICATE),
            postgresql_where=text(ACTIVE_NEGOTIATION_PREDICATE),
        ),
        Index("idx_negotiations_contract_created", "contract_id", "created_at"),
        Index("idx_negotiations_buyer_status", "buyer_id", "status"),
        Index("idx_negotiations_provider_status", "provider_id", "status"),
    )

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    contract_id: Mapped[str] = mapped_column(ForeignKey("contracts.id", ondelete="CASCADE"), nullable=False)
    buyer_id: Mapped[str] = mapped_column(String(64), nullable=False)
    provider_id: Mapped[str] = mapped_column(String(64), nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False)
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    initial_price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    initial_deadline: Mapped[str] = mapped_column(String(200), nullable=False)
    initial_notes: Mapped[str | None] = mapped_column(Text)

    counter_price: Mapped[Decimal | None] = mapped_column(Numeric(12, 2))
    counter_deadline: Mapped[str | None] = mapped_column(String(200))
    counter_notes: Mapped[str | None] = mapped_column(Text)

    final_price: Mapped[Decimal | None] = mapped_column(Numeric(12, 2))
    final_deadline: Mapped[str | None] = mapped_column(String(200))

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)


class NegotiationEventRow(Base):
    __tablename__ = "negotiation_events"
    __table_args__ = (UniqueConstraint("negotiation_id", "sequence", name="uq_negotiation_events_sequence"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    negotiation_id: Mapped[str] = mapped_column(ForeignKey("negotiations.id", ondelete="CASCADE"), nullable=False)
    sequence: Mapped[int] = mapped_column(Integer, nullable=False)
    author_id: Mapped[str] = mapped_column(String(64), nullable=False)
    kind: Mapped[str] = mapped_column(String(32), nullable=False)
    price: Mapped[Decimal | None] = mapped_column(Numeric(12, 2))
    deadline: Mapped[str | None] = mapped_column(String(200))
    notes: Mapped[str | None] = mapped_column(Text)
    message: Mapped[str | None] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
