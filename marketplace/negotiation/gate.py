"""Role authorization gate for negotiation transitions.

Everything here is pure: a decision depends only on the record (or contract),
the caller id and the requested transition.
"""

from __future__ import annotations

from dataclasses import dataclass

from marketplace.negotiation.errors import NegotiationErrorCode
from marketplace.negotiation.types import (
    ContractRef,
    NegotiationRecord,
    NegotiationStatus,
    Participant,
    Transition,
)

# Which transitions each participant may apply from each status.
ALLOWED_TRANSITIONS: dict[Participant, dict[NegotiationStatus, frozenset[Transition]]] = {
    Participant.BUYER: {
        NegotiationStatus.PENDING: frozenset({Transition.CANCEL}),
        NegotiationStatus.COUNTERED: frozenset({Transition.CONFIRM, Transition.REJECT}),
    },
    Participant.PROVIDER: {
        NegotiationStatus.PENDING: frozenset({Transition.RESPOND, Transition.REJECT}),
        NegotiationStatus.COUNTERED: frozenset({Transition.REJECT}),
    },
}

TARGET_STATUS: dict[Transition, NegotiationStatus] = {
    Transition.INITIATE: NegotiationStatus.PENDING,
    Transition.RESPOND: NegotiationStatus.COUNTERED,
    Transition.CONFIRM: NegotiationStatus.CONFIRMED,
    Transition.REJECT: NegotiationStatus.REJECTED,
    Transition.CANCEL: NegotiationStatus.CANCELLED,
}


@dataclass(frozen=True)
class Decision:
    allowed: bool
    reason: NegotiationErrorCode | None = None
    detail: str = ""


ALLOWED = Decision(allowed=True)


def denied(reason: NegotiationErrorCode, detail: str) -> Decision:
    return Decision(allowed=False, reason=reason, detail=detail)


def allowed_transitions(role: Participant, status: NegotiationStatus) -> frozenset[Transition]:
    return ALLOWED_TRANSITIONS.get(role, {}).get(status, frozenset())


def role_source_statuses(role: Participant, transition: Transition) -> frozenset[NegotiationStatus]:
    """Statuses from which ``role`` may apply ``transition``."""
    return frozenset(
        status
        for status, transitions in ALLOWED_TRANSITIONS.get(role, {}).items()
        if transition in transitions
    )


def authorize(record: NegotiationRecord, caller_id: str, transition: Transition) -> Decision:
    """Decide whether ``caller_id`` may apply ``transition`` to ``record``.

    Terminal records, and transitions the caller's role only owns from another
    status, are ``invalid_state``. A transition the role never owns is
    ``forbidden``.
    """
    role = record.participant(caller_id)
    if role is None:
        return denied(NegotiationErrorCode.NOT_PARTICIPANT, "Caller does not participate in this negotiation.")

    if transition in allowed_transitions(role, record.status):
        return ALLOWED

    if record.is_terminal or role_source_statuses(role, transition):
        return denied(
            NegotiationErrorCode.INVALID_STATE,
            f"Cannot {transition.value} a negotiation with status '{record.status.value}'.",
        )
    return denied(
        NegotiationErrorCode.FORBIDDEN,
        f"The {role.value} may not {transition.value} a negotiation.",
    )


def authorize_initiate(contract: ContractRef, caller_id: str) -> Decision:
    role = contract.participant(caller_id)
    if role is None:
        return denied(NegotiationErrorCode.NOT_PARTICIPANT, "Caller does not participate in this contract.")
    if role is not Participant.BUYER:
        return denied(NegotiationErrorCode.FORBIDDEN, "Only the buyer may start a negotiation.")
    return ALLOWED


def authorize_view(parties: NegotiationRecord | ContractRef, caller_id: str) -> Decision:
    if parties.participant(caller_id) is None:
        return denied(NegotiationErrorCode.NOT_PARTICIPANT, "Caller does not participate in this contract.")
    return ALLOWED
