"""Contract model module."""

from __future__ import annotations

from decimal import Decimal

from sqlalchemy import ForeignKey, Index, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from marketplace.models.base import AuditMixin, Base
from marketplace.models.enums import ContractStatus


class Contract(Base, AuditMixin):
    __tablename__ = "contracts"
    __table_args__ = (
        Index("idx_contracts_buyer_status", "buyer_id", "status"),
        Index("idx_contracts_provider_status", "provider_id", "status"),
    )

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    buyer_id: Mapped[str] = mapped_column(ForeignKey("users.id", ondelete="RESTRICT"), nullable=False)
    provider_id: Mapped[str] = mapped_column(ForeignKey("users.id", ondelete="RESTRICT"), nullable=False)
    status: Mapped[str] = mapped_column(String(32), default=ContractStatus.PENDING.value, nullable=False)
    total_price: Mapped[Decimal | None] = mapped_column(Numeric(12, 2))
    deadline: Mapped[str | None] = mapped_column(String(200))
