"""HS256 bearer tokens carrying a marketplace caller's id and role set.

Tokens are issued by the identity service. ``create_access_token`` exists for
local runs (``scripts/seed_data.py``) and tests.
"""

from __future__ import annotations

import base64
import hashlib
import hmac
import json
import uuid
from collections.abc import Iterable
from datetime import datetime, timedelta, timezone
from typing import Any

from marketplace.auth.roles import Role
from marketplace.core.exceptions import AuthenticationError

ALGORITHM = "HS256"
ACCESS_TOKEN_USE = "access"
_HEADER = {"alg": ALGORITHM, "typ": "JWT"}


def _b64url(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).decode("ascii").rstrip("=")


def _unb64url(segment: str) -> bytes:
    return base64.urlsafe_b64decode(segment + "=" * (-len(segment) % 4))


def _segment(document: dict[str, Any]) -> str:
    return _b64url(json.dumps(document, separators=(",", ":"), sort_keys=True).encode("utf-8"))


def _signature(signing_input: str, secret: str) -> str:
    if not secret:
        raise AuthenticationError("JWT secret must be configured.")
    return _b64url(hmac.new(secret.encode("utf-8"), signing_input.encode("ascii"), hashlib.sha256).digest())


def _load_segment(segment: str, what: str) -> dict[str, Any]:
    try:
        document = json.loads(_unb64url(segment))
    except ValueError as exc:
        raise AuthenticationError(f"Invalid token {what}.") from exc
    if not isinstance(document, dict):
        raise AuthenticationError(f"Invalid token {what}.")
    return document


def encode_jwt(payload: dict[str, Any], secret: str, ttl: timedelta) -> str:
    """Sign ``payload`` adding ``iat``, ``exp`` and ``jti`` unless already present."""
    issued = datetime.now(timezone.utc)
    claims = {
        "iat": int(issued.timestamp()),
        "exp": int((issued + ttl).timestamp()),
        "jti": uuid.uuid4().hex,
        **payload,
    }
    signing_input = f"{_segment(_HEADER)}.{_segment(claims)}"
    return f"{signing_input}.{_signature(signing_input, secret)}"


def decode_jwt(token: str, secret: str, verify_exp: bool = True) -> dict[str, Any]:
    """Verify the signature, algorithm and expiry of ``token`` and return its claims."""
    parts = token.split(".")
    if len(parts) != 3:
        raise AuthenticationError("Invalid token format.")
    header_segment, payload_segment, signature = parts

    if not hmac.compare_digest(_signature(f"{header_segment}.{payload_segment}", secret), signature):
        raise AuthenticationError("Invalid token signature.")
    if _load_segment(header_segment, "header").get("alg") != ALGORITHM:
        raise AuthenticationError(f"Token must be signed with {ALGORITHM}.")

    claims = _load_segment(payload_segment, "payload")
    if verify_exp:
        if "exp" not in claims:
            raise AuthenticationError("Token is missing exp claim.")
        if int(claims["exp"]) < int(datetime.now(timezone.utc).timestamp()):
            raise AuthenticationError("Token has expired.")
    return claims


def create_access_token(
    user_id: str,
    roles: Iterable[Role | str],
    secret: str,
    permissions_version: int = 1,
    ttl_minutes: int = 60,
) -> str:
    """Issue an access token whose ``roles`` claim is the caller's sorted role names."""
    payload = {
        "sub": str(user_id),
        "roles": sorted({r.value if isinstance(r, Role) else str(r) for r in roles}),
        "permissions_version": permissions_version,
        "token_use": ACCESS_TOKEN_USE,
    }
    return encode_jwt(payload, secret=secret, ttl=timedelta(minutes=ttl_minutes))
