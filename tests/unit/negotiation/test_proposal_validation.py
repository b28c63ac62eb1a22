from __future__ import annotations

from decimal import Decimal

import pytest

from marketplace.negotiation.types import Proposal
from marketplace.negotiation.validation import ProposalValidationError, validate_proposal


def test_accepts_camel_case_payload_and_normalizes_text():
    proposal = validate_proposal({"newPrice": 150.00, "newDeadline": "  5 business days ", "notes": "  "})
    assert proposal == Proposal(new_price=Decimal("150.0"), new_deadline="5 business days", notes=None)


def test_accepts_snake_case_payload_and_decimal_strings():
    proposal = validate_proposal({"new_price": "180.50", "new_deadline": "7 business days", "notes": "rush fee"})
    assert proposal.new_price == Decimal("180.50")
    assert proposal.notes == "rush fee"


@pytest.mark.parametrize("price", [0, -10, "-0.01", "NaN", "Infinity", True, "abc", None, [150]])
def test_rejects_invalid_prices_without_clamping(price):
    with pytest.raises(ProposalValidationError):
        validate_proposal({"newPrice": price, "newDeadline": "3 days"})


@pytest.mark.parametrize("price", ["0.001", "150.005", 0.125, "10000000000", "1e12"])
def test_rejects_prices_the_price_columns_cannot_hold(price):
    with pytest.raises(ProposalValidationError, match="newPrice"):
        validate_proposal({"newPrice": price, "newDeadline": "3 days"})


@pytest.mark.parametrize("price", ["0.01", "150.50", "150.500", "9999999999.99"])
def test_accepts_prices_within_two_decimal_places_and_twelve_digits(price):
    assert validate_proposal({"newPrice": price, "newDeadline": "3 days"}).new_price == Decimal(price)


@pytest.mark.parametrize("deadline", ["", "   ", None, 5])
def test_rejects_empty_or_non_string_deadline(deadline):
    with pytest.raises(ProposalValidationError, match="newDeadline"):
        validate_proposal({"newPrice": 100, "newDeadline": deadline})


def test_enforces_length_limits():
    with pytest.raises(ProposalValidationError, match="notes"):
        validate_proposal({"newPrice": 100, "newDeadline": "3 days", "notes": "x" * 11}, notes_max_length=10)
    with pytest.raises(ProposalValidationError, match="newDeadline"):
        validate_proposal({"newPrice": 100, "newDeadline": "y" * 11}, deadline_max_length=10)


def test_revalidates_proposal_instances():
    with pytest.raises(ProposalValidationError):
        validate_proposal(Proposal(new_price=Decimal("-1"), new_deadline="3 days"))


def test_rejects_missing_or_non_object_payload():
    with pytest.raises(ProposalValidationError):
        validate_proposal(None)
    with pytest.raises(ProposalValidationError):
        validate_proposal("150 in 5 days")
