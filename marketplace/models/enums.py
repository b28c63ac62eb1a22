"""Canonical enum values for the marketplace schema."""

from __future__ import annotations

import enum


class ContractStatus(str, enum.Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED_BY_BUYER = "cancelled_by_buyer"
    CANCELLED_BY_PROVIDER = "cancelled_by_provider"
    DISPUTED = "disputed"
