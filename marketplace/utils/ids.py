"""Identifier generation helpers."""

from __future__ import annotations

import uuid


def new_negotiation_id() -> str:
    """Create a UUID4-based negotiation identifier."""
    return uuid.uuid4().hex
