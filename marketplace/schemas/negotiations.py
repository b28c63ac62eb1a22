"""Negotiation request/response schemas for API contracts.

Bodies use camelCase on the wire; snake_case field names are accepted too.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from marketplace.negotiation.types import NegotiationEvent, NegotiationRecord, Proposal


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ProposalPayload(CamelModel):
    new_price: Decimal = Field(gt=0, max_digits=12, decimal_places=2, allow_inf_nan=False)
    new_deadline: str = Field(min_length=1, max_length=200)
    notes: str | None = Field(default=None, max_length=1000)

    def to_proposal(self) -> Proposal:
        return Proposal(new_price=self.new_price, new_deadline=self.new_deadline, notes=self.notes)


class NegotiationCreateRequest(CamelModel):
    contract_id: str = Field(min_length=1, max_length=64)
    provider_id: str | None = Field(default=None, min_length=1, max_length=64)
    initial_proposal: ProposalPayload


class NegotiationRespondRequest(CamelModel):
    counter_proposal: ProposalPayload


class ProposalResponse(CamelModel):
    new_price: Decimal
    new_deadline: str
    notes: str | None = None

    @classmethod
    def from_proposal(cls, proposal: Proposal | None) -> "ProposalResponse | None":
        if proposal is None:
            return None
        return cls(new_price=proposal.new_price, new_deadline=proposal.new_deadline, notes=proposal.notes)


class FinalTermsResponse(CamelModel):
    price: Decimal
    deadline: str


class NegotiationEventResponse(CamelModel):
    sequence: int
    author_id: str
    kind: str
    created_at: datetime
    proposal: ProposalResponse | None = None
    message: str | None = None

    @classmethod
    def from_event(cls, event: NegotiationEvent) -> "NegotiationEventResponse":
        return cls(
            sequence=event.sequence,
            author_id=event.author_id,
            kind=event.kind.value,
            created_at=event.created_at,
            proposal=ProposalResponse.from_proposal(event.proposal),
            message=event.message,
        )


class NegotiationResponse(CamelModel):
    id: str
    contract_id: str
    buyer_id: str
    provider_id: str
    status: str
    initial_proposal: ProposalResponse
    counter_proposal: ProposalResponse | None = None
    final_terms: FinalTermsResponse | None = None
    history: list[NegotiationEventResponse] = Field(default_factory=list)
    version: int
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_record(cls, record: NegotiationRecord) -> "NegotiationResponse":
        final = record.final_terms
        return cls(
            id=record.id,
            contract_id=record.contract_id,
            buyer_id=record.buyer_id,
            provider_id=record.provider_id,
            status=record.status.value,
            initial_proposal=ProposalResponse.from_proposal(record.initial_proposal),
            counter_proposal=ProposalResponse.from_proposal(record.counter_proposal),
            final_terms=FinalTermsResponse(price=final.price, deadline=final.deadline) if final else None,
            history=[NegotiationEventResponse.from_event(event) for event in record.history],
            version=record.version,
            created_at=record.created_at,
            updated_at=record.updated_at,
        )


class NegotiationListResponse(CamelModel):
    items: list[NegotiationResponse]
    total: int
