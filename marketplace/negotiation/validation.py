"""Proposal payload validation.

The transition engine runs these checks on every proposal it receives, even
when the HTTP layer already validated the body with pydantic.
"""

from __future__ import annotations

from collections.abc import Mapping
from decimal import Decimal, InvalidOperation
from typing import Any

from marketplace.core.exceptions import ValidationError
from marketplace.negotiation.types import Proposal
from marketplace.utils.validators import sanitize_text

DEFAULT_NOTES_MAX_LENGTH = 1000
DEFAULT_DEADLINE_MAX_LENGTH = 200

# Matches the Numeric(12, 2) price columns.
PRICE_MAX_DIGITS = 12
PRICE_DECIMAL_PLACES = 2
PRICE_LIMIT = Decimal(10) ** (PRICE_MAX_DIGITS - PRICE_DECIMAL_PLACES)

_FIELD_ALIASES = {
    "new_price": ("new_price", "newPrice"),
    "new_deadline": ("new_deadline", "newDeadline"),
    "notes": ("notes",),
}


class ProposalValidationError(ValidationError):
    """Raised when a proposal payload is malformed."""


def _pick(payload: Mapping[str, Any], field_name: str) -> Any:
    for key in _FIELD_ALIASES[field_name]:
        if key in payload:
            return payload[key]
    return None


def parse_price(value: Any) -> Decimal:
    """Parse a positive, finite monetary amount without coercing bad input."""
    if value is None:
        raise ProposalValidationError("newPrice is required.")
    if isinstance(value, bool):
        raise ProposalValidationError("newPrice must be a number.")
    if isinstance(value, Decimal):
        price = value
    elif isinstance(value, (int, float, str)):
        try:
            price = Decimal(str(value).strip())
        except InvalidOperation as exc:
            raise ProposalValidationError("newPrice must be a number.") from exc
    else:
        raise ProposalValidationError("newPrice must be a number.")

    if not price.is_finite():
        raise ProposalValidationError("newPrice must be finite.")
    if price <= 0:
        raise ProposalValidationError("newPrice must be greater than zero.")
    if -price.normalize().as_tuple().exponent > PRICE_DECIMAL_PLACES:
        raise ProposalValidationError(f"newPrice must have at most {PRICE_DECIMAL_PLACES} decimal places.")
    if price >= PRICE_LIMIT:
        raise ProposalValidationError(f"newPrice must be less than {PRICE_LIMIT:,}.")
    return price


def parse_deadline(value: Any, max_length: int = DEFAULT_DEADLINE_MAX_LENGTH) -> str:
    if not isinstance(value, str):
        raise ProposalValidationError("newDeadline must be a non-empty string.")
    deadline = sanitize_text(value)
    if not deadline:
        raise ProposalValidationError("newDeadline must be a non-empty string.")
    if len(deadline) > max_length:
        raise ProposalValidationError(f"newDeadline must be at most {max_length} characters.")
    return deadline


def parse_notes(value: Any, max_length: int = DEFAULT_NOTES_MAX_LENGTH) -> str | None:
    if value is None:
        return None
    if not isinstance(value, str):
        raise ProposalValidationError("notes must be a string.")
    notes = sanitize_text(value)
    if len(notes) > max_length:
        raise ProposalValidationError(f"notes must be at most {max_length} characters.")
    return notes or None


def validate_proposal(
    payload: Proposal | Mapping[str, Any] | None,
    notes_max_length: int = DEFAULT_NOTES_MAX_LENGTH,
    deadline_max_length: int = DEFAULT_DEADLINE_MAX_LENGTH,
) -> Proposal:
    """Return a normalized ``Proposal`` or raise ``ProposalValidationError``."""
    if payload is None:
        raise ProposalValidationError("A proposal is required.")
    if isinstance(payload, Proposal):
        raw_price, raw_deadline, raw_notes = payload.new_price, payload.new_deadline, payload.notes
    elif isinstance(payload, Mapping):
        raw_price = _pick(payload, "new_price")
        raw_deadline = _pick(payload, "new_deadline")
        raw_notes = _pick(payload, "notes")
    else:
        raise ProposalValidationError("A proposal must be an object.")

    return Proposal(
        new_price=parse_price(raw_price),
        new_deadline=parse_deadline(raw_deadline, max_length=deadline_max_length),
        notes=parse_notes(raw_notes, max_length=notes_max_length),
    )
