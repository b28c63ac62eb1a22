"""Transition engine for contract adjustment negotiations.

The engine never performs I/O and never mutates its inputs: each call either
returns the next ``NegotiationRecord`` value or a typed error.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import replace
from datetime import datetime, timezone
from typing import Any

from marketplace.negotiation.errors import NegotiationErrorCode, TransitionOutcome
from marketplace.negotiation.gate import TARGET_STATUS, authorize, authorize_initiate
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
from marketplace.negotiation.validation import (
    DEFAULT_DEADLINE_MAX_LENGTH,
    DEFAULT_NOTES_MAX_LENGTH,
    ProposalValidationError,
    validate_proposal,
)
from marketplace.utils.ids import new_negotiation_id

ProposalPayload = Proposal | Mapping[str, Any] | None


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _event(
    record_history: tuple[NegotiationEvent, ...],
    author_id: str,
    kind: EventKind,
    created_at: datetime,
    proposal: Proposal | None = None,
    message: str | None = None,
) -> NegotiationEvent:
    return NegotiationEvent(
        sequence=len(record_history) + 1,
        author_id=str(author_id),
        kind=kind,
        created_at=created_at,
        proposal=proposal,
        message=message,
    )


def initiate(
    contract: ContractRef,
    proposal: ProposalPayload,
    caller_id: str,
    *,
    active: NegotiationRecord | None = None,
    provider_id: str | None = None,
    now: datetime | None = None,
    negotiation_id: str | None = None,
    notes_max_length: int = DEFAULT_NOTES_MAX_LENGTH,
    deadline_max_length: int = DEFAULT_DEADLINE_MAX_LENGTH,
) -> TransitionOutcome:
    """Open a negotiation on ``contract`` with the buyer's initial proposal."""
    decision = authorize_initiate(contract, caller_id)
    if not decision.allowed:
        return TransitionOutcome.failure(decision.reason, decision.detail)

    if provider_id is not None and str(provider_id) != str(contract.provider_id):
        return TransitionOutcome.failure(
            NegotiationErrorCode.INVALID_PAYLOAD,
            "providerId does not match the provider of this contract.",
        )

    try:
        initial = validate_proposal(
            proposal,
            notes_max_length=notes_max_length,
            deadline_max_length=deadline_max_length,
        )
    except ProposalValidationError as exc:
        return TransitionOutcome.failure(NegotiationErrorCode.INVALID_PAYLOAD, str(exc))

    if active is not None and active.is_active:
        return TransitionOutcome.failure(
            NegotiationErrorCode.DUPLICATE_ACTIVE_NEGOTIATION,
            f"Contract {contract.contract_id} already has an active negotiation ({active.id}).",
        )

    if not contract.is_negotiable:
        return TransitionOutcome.failure(
            NegotiationErrorCode.INVALID_STATE,
            f"Cannot negotiate a contract with status '{contract.status}'.",
        )

    timestamp = now or utcnow()
    history = (_event((), caller_id, EventKind.BUYER_PROPOSAL, timestamp, proposal=initial),)
    record = NegotiationRecord(
        id=negotiation_id or new_negotiation_id(),
        contract_id=str(contract.contract_id),
        buyer_id=str(contract.buyer_id),
        provider_id=str(contract.provider_id),
        initial_proposal=initial,
        status=NegotiationStatus.PENDING,
        created_at=timestamp,
        updated_at=timestamp,
        history=history,
    )
    return TransitionOutcome.success(record)


def apply(
    record: NegotiationRecord,
    transition: Transition,
    caller_id: str,
    payload: ProposalPayload = None,
    *,
    now: datetime | None = None,
    notes_max_length: int = DEFAULT_NOTES_MAX_LENGTH,
    deadline_max_length: int = DEFAULT_DEADLINE_MAX_LENGTH,
) -> TransitionOutcome:
    """Apply ``transition`` to an existing record on behalf of ``caller_id``."""
    if transition is Transition.INITIATE:
        return TransitionOutcome.failure(
            NegotiationErrorCode.INVALID_STATE,
            "A negotiation that already exists cannot be initiated again.",
        )

    decision = authorize(record, caller_id, transition)
    if not decision.allowed:
        return TransitionOutcome.failure(decision.reason, decision.detail)

    timestamp = now or utcnow()
    role = record.participant(caller_id)
    target = TARGET_STATUS[transition]

    if transition is Transition.RESPOND:
        try:
            counter = validate_proposal(
                payload,
                notes_max_length=notes_max_length,
                deadline_max_length=deadline_max_length,
            )
        except ProposalValidationError as exc:
            return TransitionOutcome.failure(NegotiationErrorCode.INVALID_PAYLOAD, str(exc))
        event = _event(record.history, caller_id, EventKind.PROVIDER_RESPONSE, timestamp, proposal=counter)
        return TransitionOutcome.success(
            replace(
                record,
                status=target,
                counter_proposal=counter,
                history=record.history + (event,),
                updated_at=timestamp,
            )
        )

    actor = "buyer" if role is Participant.BUYER else "provider"
    event = _event(
        record.history,
        caller_id,
        EventKind.STATUS_CHANGE,
        timestamp,
        message=f"Negotiation {target.value} by {actor}.",
    )
    changes: dict[str, Any] = {
        "status": target,
        "history": record.history + (event,),
        "updated_at": timestamp,
    }
    if transition is Transition.CONFIRM:
        # Confirm is only reachable from countered, so a counter proposal exists.
        changes["final_terms"] = FinalTerms(
            price=record.counter_proposal.new_price,
            deadline=record.counter_proposal.new_deadline,
        )
    return TransitionOutcome.success(replace(record, **changes))
