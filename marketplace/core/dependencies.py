"""Dependency providers for API handlers."""

from __future__ import annotations

from collections.abc import Generator
from dataclasses import dataclass
from typing import Any

from fastapi import Depends
from sqlalchemy.orm import Session

from marketplace.auth.jwt import ACCESS_TOKEN_USE, decode_jwt
from marketplace.auth.roles import Role, parse_roles
from marketplace.core.config import Config, get_config
from marketplace.core.exceptions import AuthenticationError, ValidationError
from marketplace.database.db import get_db
from marketplace.services.negotiation_repository import (
    SqlAlchemyContractRepository,
    SqlAlchemyNegotiationRepository,
)
from marketplace.services.negotiation_service import NegotiationService


@dataclass(frozen=True)
class CurrentUser:
    user_id: str
    roles: frozenset[Role]
    permissions_version: int
    claims: dict[str, Any]


def get_settings() -> Config:
    """Return validated application configuration."""
    return get_config()


def get_db_session() -> Generator[Session, None, None]:
    """Yield SQLAlchemy session for dependency injection."""
    yield from get_db()


def get_current_user(token: str, settings: Config | None = None) -> CurrentUser:
    """Resolve the caller from a bearer token issued by the identity service."""
    cfg = settings or get_settings()
    claims = decode_jwt(token=token, secret=cfg.JWT_SECRET)
    if claims.get("token_use", ACCESS_TOKEN_USE) != ACCESS_TOKEN_USE:
        raise AuthenticationError("Token is not an access token.")

    try:
        user_id = str(claims["sub"]).strip()
        roles = parse_roles(claims.get("roles", []))
        permissions_version = int(claims.get("permissions_version", 1))
    except (KeyError, TypeError, ValueError, ValidationError) as exc:
        raise AuthenticationError("Invalid auth claims.") from exc
    if not user_id:
        raise AuthenticationError("Invalid auth claims.")
    if permissions_version < cfg.JWT_PERMISSIONS_VERSION:
        raise AuthenticationError("Token permissions are outdated.")

    return CurrentUser(
        user_id=user_id,
        roles=roles,
        permissions_version=permissions_version,
        claims=claims,
    )


def get_negotiation_service(db: Session = Depends(get_db_session)) -> NegotiationService:
    """Build a request-scoped negotiation service sharing one DB session."""
    return NegotiationService(
        negotiations=SqlAlchemyNegotiationRepository(db=db),
        contracts=SqlAlchemyContractRepository(db=db),
    )
