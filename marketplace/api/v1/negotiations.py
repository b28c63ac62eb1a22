"""Contract adjustment negotiation endpoints for API v1."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Header, status

from marketplace.api.v1._authz import authorize_or_raise, raise_for_error
from marketplace.core.dependencies import get_negotiation_service
from marketplace.negotiation.errors import TransitionOutcome
from marketplace.schemas.negotiations import (
    NegotiationCreateRequest,
    NegotiationListResponse,
    NegotiationRespondRequest,
    NegotiationResponse,
)
from marketplace.services.negotiation_service import NegotiationService

router = APIRouter(prefix="/negotiations", tags=["negotiations"])


def _respond(outcome: TransitionOutcome) -> NegotiationResponse:
    if not outcome.ok:
        raise_for_error(outcome.error)
    return NegotiationResponse.from_record(outcome.record)


@router.post("", response_model=NegotiationResponse, status_code=status.HTTP_201_CREATED)
def create_negotiation(
    payload: NegotiationCreateRequest,
    authorization: str | None = Header(default=None, alias="Authorization"),
    service: NegotiationService = Depends(get_negotiation_service),
) -> NegotiationResponse:
    user = authorize_or_raise(authorization, ["negotiations.initiate"])
    outcome = service.initiate(
        contract_id=payload.contract_id,
        caller_id=user.user_id,
        proposal=payload.initial_proposal.to_proposal(),
        provider_id=payload.provider_id,
    )
    return _respond(outcome)


@router.get("/by-contract/{contract_id}", response_model=NegotiationResponse)
def get_negotiation_by_contract(
    contract_id: str,
    authorization: str | None = Header(default=None, alias="Authorization"),
    service: NegotiationService = Depends(get_negotiation_service),
) -> NegotiationResponse:
    user = authorize_or_raise(authorization, ["negotiations.read"])
    return _respond(service.get_by_contract(contract_id=contract_id, caller_id=user.user_id))


@router.get("/by-contract/{contract_id}/all", response_model=NegotiationListResponse)
def list_negotiations_by_contract(
    contract_id: str,
    authorization: str | None = Header(default=None, alias="Authorization"),
    service: NegotiationService = Depends(get_negotiation_service),
) -> NegotiationListResponse:
    user = authorize_or_raise(authorization, ["negotiations.read"])
    outcome = service.list_by_contract(contract_id=contract_id, caller_id=user.user_id)
    if not outcome.ok:
        raise_for_error(outcome.error)
    items = [NegotiationResponse.from_record(record) for record in outcome.records]
    return NegotiationListResponse(items=items, total=len(items))


@router.get("/{negotiation_id}", response_model=NegotiationResponse)
def get_negotiation(
    negotiation_id: str,
    authorization: str | None = Header(default=None, alias="Authorization"),
    service: NegotiationService = Depends(get_negotiation_service),
) -> NegotiationResponse:
    user = authorize_or_raise(authorization, ["negotiations.read"])
    return _respond(service.get(negotiation_id=negotiation_id, caller_id=user.user_id))


@router.put("/{negotiation_id}", response_model=NegotiationResponse)
def respond_to_negotiation(
    negotiation_id: str,
    payload: NegotiationRespondRequest,
    authorization: str | None = Header(default=None, alias="Authorization"),
    service: NegotiationService = Depends(get_negotiation_service),
) -> NegotiationResponse:
    user = authorize_or_raise(authorization, ["negotiations.respond"])
    outcome = service.respond(
        negotiation_id=negotiation_id,
        caller_id=user.user_id,
        proposal=payload.counter_proposal.to_proposal(),
    )
    return _respond(outcome)


@router.put("/{negotiation_id}/confirm", response_model=NegotiationResponse)
def confirm_negotiation(
    negotiation_id: str,
    authorization: str | None = Header(default=None, alias="Authorization"),
    service: NegotiationService = Depends(get_negotiation_service),
) -> NegotiationResponse:
    user = authorize_or_raise(authorization, ["negotiations.confirm"])
    return _respond(service.confirm(negotiation_id=negotiation_id, caller_id=user.user_id))


@router.put("/{negotiation_id}/reject", response_model=NegotiationResponse)
def reject_negotiation(
    negotiation_id: str,
    authorization: str | None = Header(default=None, alias="Authorization"),
    service: NegotiationService = Depends(get_negotiation_service),
) -> NegotiationResponse:
    user = authorize_or_raise(authorization, ["negotiations.reject"])
    return _respond(service.reject(negotiation_id=negotiation_id, caller_id=user.user_id))


@router.put("/{negotiation_id}/cancel", response_model=NegotiationResponse)
def cancel_negotiation(
    negotiation_id: str,
    authorization: str | None = Header(default=None, alias="Authorization"),
    service: NegotiationService = Depends(get_negotiation_service),
) -> NegotiationResponse:
    user = authorize_or_raise(authorization, ["negotiations.cancel"])
    return _respond(service.cancel(negotiation_id=negotiation_id, caller_id=user.user_id))
