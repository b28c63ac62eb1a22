"""Value types for contract adjustment negotiations."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal


class NegotiationStatus(str, enum.Enum):
    PENDING = "pending"
    COUNTERED = "countered"
    CONFIRMED = "confirmed"
    REJECTED = "rejected"
    CANCELLED = "cancelled"


ACTIVE_STATUSES = frozenset({NegotiationStatus.PENDING, NegotiationStatus.COUNTERED})
TERMINAL_STATUSES = frozenset(
    {NegotiationStatus.CONFIRMED, NegotiationStatus.REJECTED, NegotiationStatus.CANCELLED}
)


class Transition(str, enum.Enum):
    INITIATE = "initiate"
    RESPOND = "respond"
    CONFIRM = "confirm"
    REJECT = "reject"
    CANCEL = "cancel"


class Participant(str, enum.Enum):
    """Role of a caller relative to one contract, not an account role."""

    BUYER = "buyer"
    PROVIDER = "provider"


class EventKind(str, enum.Enum):
    BUYER_PROPOSAL = "buyer_proposal"
    PROVIDER_RESPONSE = "provider_response"
    STATUS_CHANGE = "status_change"


# Contract statuses from which a buyer may open a negotiation.
NEGOTIABLE_CONTRACT_STATUSES = frozenset({"pending", "accepted"})


@dataclass(frozen=True)
class Proposal:
    new_price: Decimal
    new_deadline: str
    notes: str | None = None


@dataclass(frozen=True)
class FinalTerms:
    price: Decimal
    deadline: str


@dataclass(frozen=True)
class NegotiationEvent:
    sequence: int
    author_id: str
    kind: EventKind
    created_at: datetime
    proposal: Proposal | None = None
    message: str | None = None


@dataclass(frozen=True)
class ContractRef:
    """The slice of a contract the negotiation core reads."""

    contract_id: str
    buyer_id: str
    provider_id: str
    status: str
    price: Decimal | None = None
    deadline: str | None = None

    @property
    def is_negotiable(self) -> bool:
        return self.status in NEGOTIABLE_CONTRACT_STATUSES

    def participant(self, caller_id: str) -> Participant | None:
        return _resolve_participant(caller_id, self.buyer_id, self.provider_id)


@dataclass(frozen=True)
class NegotiationRecord:
    id: str
    contract_id: str
    buyer_id: str
    provider_id: str
    initial_proposal: Proposal
    status: NegotiationStatus
    created_at: datetime
    updated_at: datetime
    counter_proposal: Proposal | None = None
    final_terms: FinalTerms | None = None
    history: tuple[NegotiationEvent, ...] = ()
    version: int = 0

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES

    @property
    def is_active(self) -> bool:
        return self.status in ACTIVE_STATUSES

    def participant(self, caller_id: str) -> Participant | None:
        return _resolve_participant(caller_id, self.buyer_id, self.provider_id)


def _resolve_participant(caller_id: str, buyer_id: str, provider_id: str) -> Participant | None:
    if caller_id is None:
        return None
    caller = str(caller_id)
    if caller == str(buyer_id):
        return Participant.BUYER
    if caller == str(provider_id):
        return Participant.PROVIDER
    return None
