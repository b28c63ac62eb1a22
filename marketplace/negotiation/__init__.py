"""Contract adjustment negotiation core."""

from marketplace.negotiation.engine import apply, initiate
from marketplace.negotiation.errors import (
    ListOutcome,
    NegotiationErrorCode,
    TransitionError,
    TransitionOutcome,
)
from marketplace.negotiation.gate import Decision, authorize, authorize_initiate, authorize_view
from marketplace.negotiation.repository import (
    ActiveNegotiationExistsError,
    ConcurrentModificationError,
    ContractRepository,
    InMemoryContractRepository,
    InMemoryNegotiationRepository,
    NegotiationRepository,
    RepositoryConflictError,
)
from marketplace.negotiation.types import (
    ContractRef,
    EventKind,
    FinalTerms,
    NegotiationEvent,
    NegotiationRecord,
    NegotiationStatus,
    Participant,
    Proposal,
    Transition,
)

__all__ = [
    "ActiveNegotiationExistsError",
    "ConcurrentModificationError",
    "ContractRef",
    "ContractRepository",
    "Decision",
    "EventKind",
    "FinalTerms",
    "InMemoryContractRepository",
    "InMemoryNegotiationRepository",
    "ListOutcome",
    "NegotiationErrorCode",
    "NegotiationEvent",
    "NegotiationRecord",
    "NegotiationRepository",
    "NegotiationStatus",
    "Participant",
    "Proposal",
    "RepositoryConflictError",
    "Transition",
    "TransitionError",
    "TransitionOutcome",
    "apply",
    "authorize",
    "authorize_initiate",
    "authorize_view",
    "initiate",
]
