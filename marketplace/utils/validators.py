"""Deterministic sanitizers used across the negotiation core and API."""

from __future__ import annotations


def sanitize_text(value: str | None, max_len: int | None = None) -> str:
    """Sanitize free-form content before persistence/display."""
    if value is None:
        return ""
    cleaned = str(value).replace("\x00", "").strip()
    if max_len is not None:
        cleaned = cleaned[:max_len]
    return cleaned
