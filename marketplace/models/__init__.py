"""SQLAlchemy model package for the marketplace schema."""

from marketplace.models.base import Base
from marketplace.models.contract import Contract
from marketplace.models.enums import ContractStatus
from marketplace.models.negotiation import Negotiation, NegotiationEventRow
from marketplace.models.user import User

__all__ = [
    "Base",
    "Contract",
    "ContractStatus",
    "Negotiation",
    "NegotiationEventRow",
    "User",
]
