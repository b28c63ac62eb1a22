"""Health and caller-profile endpoints for API v1."""

from __future__ import annotations

from fastapi import APIRouter, Header

from marketplace.api.v1._authz import authorize_or_raise
from marketplace.core.config import get_config
from marketplace.schemas.users import MeResponse

router = APIRouter(tags=["health"])


@router.get("/health")
def health() -> dict:
    cfg = get_config()
    return {"status": "ok", "service": cfg.APP_NAME, "version": cfg.APP_VERSION}


@router.get("/me", response_model=MeResponse)
def me(authorization: str | None = Header(default=None, alias="Authorization")) -> MeResponse:
    user = authorize_or_raise(authorization, ["profile.read"])
    return MeResponse.from_roles(user_id=user.user_id, roles=user.roles)
