"""Shared authorization helpers for API v1 route modules."""

from __future__ import annotations

from fastapi import HTTPException, status

from marketplace.auth.rbac import require_scopes
from marketplace.core.config import get_config
from marketplace.core.dependencies import CurrentUser, get_current_user
from marketplace.core.exceptions import AuthenticationError, AuthorizationError
from marketplace.negotiation.errors import NegotiationErrorCode, TransitionError
from marketplace.schemas.common import ErrorEnvelope

ERROR_STATUS: dict[NegotiationErrorCode, int] = {
    NegotiationErrorCode.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    NegotiationErrorCode.NOT_PARTICIPANT: status.HTTP_403_FORBIDDEN,
    NegotiationErrorCode.FORBIDDEN: status.HTTP_403_FORBIDDEN,
    NegotiationErrorCode.INVALID_STATE: status.HTTP_409_CONFLICT,
    NegotiationErrorCode.INVALID_PAYLOAD: status.HTTP_400_BAD_REQUEST,
    NegotiationErrorCode.DUPLICATE_ACTIVE_NEGOTIATION: status.HTTP_409_CONFLICT,
    NegotiationErrorCode.CONFLICT: status.HTTP_409_CONFLICT,
}


def _extract_bearer_token(authorization: str | None) -> str:
    if authorization is None or not authorization.strip():
        raise AuthenticationError("Authorization header is required.")
    parts = authorization.strip().split(" ", 1)
    if len(parts) != 2 or parts[0].lower() != "bearer":
        raise AuthenticationError("Authorization header must use Bearer token.")
    return parts[1].strip()


def authorize(authorization: str | None, scopes: list[str]) -> CurrentUser:
    token = _extract_bearer_token(authorization)
    user = get_current_user(token=token, settings=get_config())
    require_scopes(user.roles, scopes)
    return user


def map_auth_error(exc: Exception) -> tuple[int, str]:
    if isinstance(exc, AuthenticationError):
        return 401, str(exc)
    if isinstance(exc, AuthorizationError):
        return 403, str(exc)
    return 401, "Unauthorized."


def authorize_or_raise(authorization: str | None, scopes: list[str]) -> CurrentUser:
    try:
        return authorize(authorization=authorization, scopes=scopes)
    except (AuthenticationError, AuthorizationError) as exc:
        code, detail = map_auth_error(exc)
        raise HTTPException(status_code=code, detail=detail) from exc


def raise_for_error(error: TransitionError) -> None:
    raise HTTPException(
        status_code=ERROR_STATUS[error.code],
        detail=ErrorEnvelope(error_code=error.code.value, detail=error.detail).model_dump(),
    )
