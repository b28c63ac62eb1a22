"""Canonical user role set and its boolean projection.

A user carries exactly one ``frozenset[Role]``. Boolean flags such as
``is_buyer`` exist only as a derived view for presentation code.
"""

from __future__ import annotations

import enum
from collections.abc import Iterable
from dataclasses import dataclass

from marketplace.core.exceptions import ValidationError


class Role(str, enum.Enum):
    BUYER = "buyer"
    PROVIDER = "provider"
    ADVERTISER = "advertiser"
    ADMIN = "admin"


@dataclass(frozen=True)
class RoleFlags:
    is_buyer: bool
    is_provider: bool
    is_advertiser: bool
    is_admin: bool


def parse_roles(values: Iterable[str | Role] | None) -> frozenset[Role]:
    """Normalize raw role names into the canonical role set."""
    roles: set[Role] = set()
    for value in values or ():
        name = value.value if isinstance(value, Role) else str(value).strip().lower()
        try:
            roles.add(Role(name))
        except ValueError as exc:
            raise ValidationError(f"Unknown role: {value}") from exc
    return frozenset(roles)


def role_flags(roles: Iterable[Role]) -> RoleFlags:
    role_set = frozenset(roles)
    return RoleFlags(
        is_buyer=Role.BUYER in role_set,
        is_provider=Role.PROVIDER in role_set,
        is_advertiser=Role.ADVERTISER in role_set,
        is_admin=Role.ADMIN in role_set,
    )
