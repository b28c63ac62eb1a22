"""Account-level scope checks for API endpoints.

These scopes only say what kind of user may call an endpoint. Whether the
caller may act on a particular negotiation is decided by the negotiation gate.
"""

from __future__ import annotations

from collections.abc import Iterable

from marketplace.auth.roles import Role
from marketplace.core.exceptions import AuthorizationError

# Scope strings are kept explicit for endpoint-level declarations.
ROLE_SCOPES: dict[Role, set[str]] = {
    Role.ADMIN: {
        "*",
    },
    Role.BUYER: {
        "negotiations.initiate",
        "negotiations.confirm",
        "negotiations.cancel",
        "negotiations.reject",
        "negotiations.read",
        "profile.read",
    },
    Role.PROVIDER: {
        "negotiations.respond",
        "negotiations.reject",
        "negotiations.read",
        "profile.read",
    },
    Role.ADVERTISER: {
        "profile.read",
    },
}


def get_scopes_for_roles(roles: Iterable[Role]) -> set[str]:
    """Return the union of scopes granted to a role set."""
    granted: set[str] = set()
    for role in roles:
        granted |= ROLE_SCOPES.get(role, set())
    return granted


def has_scopes(roles: Iterable[Role], required_scopes: list[str] | set[str] | tuple[str, ...]) -> bool:
    """Check if the role set includes every required scope."""
    granted = get_scopes_for_roles(roles)
    if "*" in granted:
        return True
    return set(required_scopes).issubset(granted)


def require_scopes(roles: Iterable[Role], required_scopes: list[str] | set[str] | tuple[str, ...]) -> None:
    """Raise when a role set lacks required scopes."""
    role_set = frozenset(roles)
    if has_scopes(roles=role_set, required_scopes=required_scopes):
        return
    missing = sorted(set(required_scopes) - get_scopes_for_roles(role_set))
    raise AuthorizationError(f"Missing required scopes: {', '.join(missing)}")
