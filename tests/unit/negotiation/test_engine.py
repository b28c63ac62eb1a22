from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from marketplace.negotiation import engine
from marketplace.negotiation.errors import NegotiationErrorCode
from marketplace.negotiation.types import (
    EventKind,
    FinalTerms,
    NegotiationStatus,
    Proposal,
    Transition,
)

T0 = datetime(2026, 10, 18, 9, 0, tzinfo=timezone.utc)
T1 = T0 + timedelta(hours=1)
T2 = T0 + timedelta(hours=2)


def _initiated(contract):
    outcome = engine.initiate(
        contract,
        {"newPrice": 150.00, "newDeadline": "5 business days"},
        "B1",
        now=T0,
        negotiation_id="N1",
    )
    assert outcome.ok
    return outcome.record


def test_initiate_creates_pending_record(contract):
    record = _initiated(contract)

    assert record.id == "N1"
    assert record.status is NegotiationStatus.PENDING
    assert record.buyer_id == "B1"
    assert record.provider_id == "P1"
    assert record.initial_proposal == Proposal(new_price=Decimal("150.0"), new_deadline="5 business days")
    assert record.counter_proposal is None
    assert record.created_at == record.updated_at == T0
    assert record.version == 0
    assert [event.kind for event in record.history] == [EventKind.BUYER_PROPOSAL]


def test_respond_sets_counter_and_keeps_initial(contract):
    record = _initiated(contract)

    outcome = engine.apply(
        record,
        Transition.RESPOND,
        "P1",
        {"newPrice": 180.00, "newDeadline": "7 business days"},
        now=T1,
    )

    assert outcome.ok
    countered = outcome.record
    assert countered.status is NegotiationStatus.COUNTERED
    assert countered.counter_proposal.new_price == Decimal("180.0")
    assert countered.initial_proposal == record.initial_proposal
    assert countered.updated_at == T1
    assert countered.created_at == T0
    assert countered.history[-1].kind is EventKind.PROVIDER_RESPONSE
    assert countered.history[-1].sequence == 2
    # The input record is untouched.
    assert record.status is NegotiationStatus.PENDING
    assert record.counter_proposal is None


def test_confirm_fixes_final_terms_from_counter(contract):
    countered = engine.apply(
        _initiated(contract), Transition.RESPOND, "P1", {"newPrice": "180.00", "newDeadline": "7 business days"}, now=T1
    ).record

    outcome = engine.apply(countered, Transition.CONFIRM, "B1", now=T2)

    assert outcome.ok
    assert outcome.record.status is NegotiationStatus.CONFIRMED
    assert outcome.record.final_terms == FinalTerms(price=Decimal("180.00"), deadline="7 business days")
    assert outcome.record.history[-1].message == "Negotiation confirmed by buyer."


def test_confirm_twice_is_invalid_state(contract):
    countered = engine.apply(
        _initiated(contract), Transition.RESPOND, "P1", {"newPrice": 180, "newDeadline": "7 days"}, now=T1
    ).record
    confirmed = engine.apply(countered, Transition.CONFIRM, "B1", now=T2).record

    again = engine.apply(confirmed, Transition.CONFIRM, "B1", now=T2)

    assert again.error.code is NegotiationErrorCode.INVALID_STATE


def test_provider_cannot_confirm(contract):
    countered = engine.apply(
        _initiated(contract), Transition.RESPOND, "P1", {"newPrice": 180, "newDeadline": "7 days"}, now=T1
    ).record

    outcome = engine.apply(countered, Transition.CONFIRM, "P1", now=T2)

    assert outcome.error.code is NegotiationErrorCode.FORBIDDEN


def test_initiate_rejects_negative_price(contract):
    outcome = engine.initiate(contract, {"newPrice": -10, "newDeadline": "3 days"}, "B1", now=T0)

    assert not outcome.ok
    assert outcome.record is None
    assert outcome.error.code is NegotiationErrorCode.INVALID_PAYLOAD


def test_initiate_rejects_when_active_negotiation_exists(contract):
    active = _initiated(contract)

    outcome = engine.initiate(
        contract, {"newPrice": 99, "newDeadline": "2 days"}, "B1", active=active, now=T1
    )

    assert outcome.error.code is NegotiationErrorCode.DUPLICATE_ACTIVE_NEGOTIATION


def test_initiate_allowed_after_terminal_negotiation(contract):
    finished = replace(_initiated(contract), status=NegotiationStatus.CANCELLED)

    outcome = engine.initiate(
        contract, {"newPrice": 99, "newDeadline": "2 days"}, "B1", active=finished, now=T1
    )

    assert outcome.ok


def test_initiate_requires_buyer_and_negotiable_contract(contract_factory):
    contract = contract_factory()
    proposal = {"newPrice": 99, "newDeadline": "2 days"}

    assert engine.initiate(contract, proposal, "P1").error.code is NegotiationErrorCode.FORBIDDEN
    assert engine.initiate(contract, proposal, "X9").error.code is NegotiationErrorCode.NOT_PARTICIPANT

    closed = contract_factory(status="completed")
    assert engine.initiate(closed, proposal, "B1").error.code is NegotiationErrorCode.INVALID_STATE


def test_initiate_rejects_mismatched_provider(contract):
    outcome = engine.initiate(
        contract, {"newPrice": 99, "newDeadline": "2 days"}, "B1", provider_id="P2"
    )

    assert outcome.error.code is NegotiationErrorCode.INVALID_PAYLOAD


def test_respond_with_bad_payload_leaves_record_unchanged(contract):
    record = _initiated(contract)

    outcome = engine.apply(record, Transition.RESPOND, "P1", {"newPrice": 0, "newDeadline": "7 days"}, now=T1)

    assert outcome.error.code is NegotiationErrorCode.INVALID_PAYLOAD
    assert record.status is NegotiationStatus.PENDING


def test_authorization_runs_before_payload_validation(contract):
    record = _initiated(contract)

    outcome = engine.apply(record, Transition.RESPOND, "B1", {"newPrice": -1, "newDeadline": ""})

    assert outcome.error.code is NegotiationErrorCode.FORBIDDEN


@pytest.mark.parametrize(
    ("caller", "transition", "expected"),
    [
        ("B1", Transition.CANCEL, NegotiationStatus.CANCELLED),
        ("P1", Transition.REJECT, NegotiationStatus.REJECTED),
    ],
)
def test_pending_exits(contract, caller, transition, expected):
    outcome = engine.apply(_initiated(contract), transition, caller, now=T1)

    assert outcome.record.status is expected
    assert outcome.record.is_terminal
    assert outcome.record.final_terms is None


def test_initiate_cannot_be_applied_to_existing_record(contract):
    outcome = engine.apply(_initiated(contract), Transition.INITIATE, "B1")

    assert outcome.error.code is NegotiationErrorCode.INVALID_STATE
