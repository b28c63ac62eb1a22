from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal

import pytest

from marketplace.negotiation.errors import NegotiationErrorCode
from marketplace.negotiation.gate import (
    allowed_transitions,
    authorize,
    authorize_initiate,
    authorize_view,
    role_source_statuses,
)
from marketplace.negotiation.types import (
    NegotiationRecord,
    NegotiationStatus,
    Participant,
    Proposal,
    Transition,
)

NOW = datetime(2026, 10, 18, tzinfo=timezone.utc)
CALLERS = {Participant.BUYER: "B1", Participant.PROVIDER: "P1"}
RECORD_TRANSITIONS = [t for t in Transition if t is not Transition.INITIATE]
TERMINAL = [NegotiationStatus.CONFIRMED, NegotiationStatus.REJECTED, NegotiationStatus.CANCELLED]

P, C = NegotiationStatus.PENDING, NegotiationStatus.COUNTERED
OK = None
INV = NegotiationErrorCode.INVALID_STATE
FBD = NegotiationErrorCode.FORBIDDEN

# (role, status, transition) -> expected denial reason, None when allowed.
EXPECTED = {
    (Participant.BUYER, P, Transition.RESPOND): FBD,
    (Participant.BUYER, P, Transition.CONFIRM): INV,
    (Participant.BUYER, P, Transition.REJECT): INV,
    (Participant.BUYER, P, Transition.CANCEL): OK,
    (Participant.BUYER, C, Transition.RESPOND): FBD,
    (Participant.BUYER, C, Transition.CONFIRM): OK,
    (Participant.BUYER, C, Transition.REJECT): OK,
    (Participant.BUYER, C, Transition.CANCEL): INV,
    (Participant.PROVIDER, P, Transition.RESPOND): OK,
    (Participant.PROVIDER, P, Transition.CONFIRM): FBD,
    (Participant.PROVIDER, P, Transition.REJECT): OK,
    (Participant.PROVIDER, P, Transition.CANCEL): FBD,
    (Participant.PROVIDER, C, Transition.RESPOND): INV,
    (Participant.PROVIDER, C, Transition.CONFIRM): FBD,
    (Participant.PROVIDER, C, Transition.REJECT): OK,
    (Participant.PROVIDER, C, Transition.CANCEL): FBD,
}


def _record(status: NegotiationStatus) -> NegotiationRecord:
    return NegotiationRecord(
        id="N1",
        contract_id="C1",
        buyer_id="B1",
        provider_id="P1",
        initial_proposal=Proposal(new_price=Decimal("150.00"), new_deadline="5 business days"),
        status=status,
        created_at=NOW,
        updated_at=NOW,
    )


def test_table_matches_documented_state_machine():
    assert allowed_transitions(Participant.BUYER, NegotiationStatus.PENDING) == {Transition.CANCEL}
    assert allowed_transitions(Participant.BUYER, NegotiationStatus.COUNTERED) == {Transition.CONFIRM, Transition.REJECT}
    assert allowed_transitions(Participant.PROVIDER, NegotiationStatus.PENDING) == {Transition.RESPOND, Transition.REJECT}
    assert allowed_transitions(Participant.PROVIDER, NegotiationStatus.COUNTERED) == {Transition.REJECT}
    assert role_source_statuses(Participant.BUYER, Transition.CONFIRM) == {NegotiationStatus.COUNTERED}
    assert role_source_statuses(Participant.PROVIDER, Transition.CONFIRM) == frozenset()


@pytest.mark.parametrize(("role", "status", "transition"), list(EXPECTED))
def test_active_record_decisions(role, status, transition):
    decision = authorize(_record(status), CALLERS[role], transition)
    expected = EXPECTED[(role, status, transition)]

    if expected is None:
        assert decision.allowed
    else:
        assert not decision.allowed
        assert decision.reason is expected


@pytest.mark.parametrize("status", TERMINAL)
def test_terminal_records_are_invalid_state_for_everyone(status):
    record = _record(status)
    for caller in CALLERS.values():
        for transition in RECORD_TRANSITIONS:
            assert authorize(record, caller, transition).reason is NegotiationErrorCode.INVALID_STATE


def test_outsider_is_not_participant_before_any_state_check():
    decision = authorize(_record(NegotiationStatus.CONFIRMED), "X9", Transition.CONFIRM)
    assert decision.reason is NegotiationErrorCode.NOT_PARTICIPANT


def test_provider_confirm_on_countered_is_forbidden():
    decision = authorize(_record(NegotiationStatus.COUNTERED), "P1", Transition.CONFIRM)
    assert decision.reason is NegotiationErrorCode.FORBIDDEN


def test_initiate_is_buyer_only(contract):
    assert authorize_initiate(contract, "B1").allowed
    assert authorize_initiate(contract, "P1").reason is NegotiationErrorCode.FORBIDDEN
    assert authorize_initiate(contract, "X9").reason is NegotiationErrorCode.NOT_PARTICIPANT


def test_view_is_limited_to_parties(contract):
    assert authorize_view(contract, "B1").allowed
    assert authorize_view(_record(NegotiationStatus.PENDING), "P1").allowed
    assert authorize_view(contract, "X9").reason is NegotiationErrorCode.NOT_PARTICIPANT


def test_provider_cancel_is_forbidden_in_both_active_statuses():
    for status in (NegotiationStatus.PENDING, NegotiationStatus.COUNTERED):
        decision = authorize(_record(status), "P1", Transition.CANCEL)
        assert decision.reason is NegotiationErrorCode.FORBIDDEN
