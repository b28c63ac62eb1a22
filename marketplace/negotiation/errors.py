"""Typed outcomes for negotiation operations."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field

from marketplace.negotiation.types import NegotiationRecord


class NegotiationErrorCode(str, enum.Enum):
    NOT_FOUND = "not_found"
    NOT_PARTICIPANT = "not_participant"
    FORBIDDEN = "forbidden"
    INVALID_STATE = "invalid_state"
    INVALID_PAYLOAD = "invalid_payload"
    DUPLICATE_ACTIVE_NEGOTIATION = "duplicate_active_negotiation"
    CONFLICT = "conflict"


@dataclass(frozen=True)
class TransitionError:
    code: NegotiationErrorCode
    detail: str


@dataclass(frozen=True)
class TransitionOutcome:
    """Either a record or a typed error, never both."""

    record: NegotiationRecord | None = None
    error: TransitionError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, record: NegotiationRecord) -> "TransitionOutcome":
        return cls(record=record)

    @classmethod
    def failure(cls, code: NegotiationErrorCode, detail: str) -> "TransitionOutcome":
        return cls(error=TransitionError(code=code, detail=detail))


@dataclass(frozen=True)
class ListOutcome:
    records: list[NegotiationRecord] = field(default_factory=list)
    error: TransitionError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def failure(cls, code: NegotiationErrorCode, detail: str) -> "ListOutcome":
        return cls(error=TransitionError(code=code, detail=detail))
