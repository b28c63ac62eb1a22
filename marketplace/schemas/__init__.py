"""Pydantic schema package for API contracts."""

from marketplace.schemas.common import ErrorEnvelope
from marketplace.schemas.negotiations import (
    FinalTermsResponse,
    NegotiationCreateRequest,
    NegotiationEventResponse,
    NegotiationListResponse,
    NegotiationRespondRequest,
    NegotiationResponse,
    ProposalPayload,
    ProposalResponse,
)
from marketplace.schemas.users import MeResponse

__all__ = [
    "ErrorEnvelope",
    "FinalTermsResponse",
    "MeResponse",
    "NegotiationCreateRequest",
    "NegotiationEventResponse",
    "NegotiationListResponse",
    "NegotiationRespondRequest",
    "NegotiationResponse",
    "ProposalPayload",
    "ProposalResponse",
]
