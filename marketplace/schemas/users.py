"""User-facing schemas."""

from __future__ import annotations

from pydantic import BaseModel

from marketplace.auth.roles import Role, role_flags


class MeResponse(BaseModel):
    user_id: str
    roles: list[str]
    is_buyer: bool
    is_provider: bool
    is_advertiser: bool
    is_admin: bool

    @classmethod
    def from_roles(cls, user_id: str, roles: frozenset[Role]) -> "MeResponse":
        flags = role_flags(roles)
        return cls(
            user_id=user_id,
            roles=sorted(role.value for role in roles),
            is_buyer=flags.is_buyer,
            is_provider=flags.is_provider,
            is_advertiser=flags.is_advertiser,
            is_admin=flags.is_admin,
        )
