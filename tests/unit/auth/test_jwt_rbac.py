from __future__ import annotations

from datetime import timedelta

import pytest

from marketplace.auth.jwt import _segment, _signature, create_access_token, decode_jwt, encode_jwt
from marketplace.auth.rbac import has_scopes, require_scopes
from marketplace.auth.roles import Role
from marketplace.core.config import get_config
from marketplace.core.dependencies import get_current_user
from marketplace.core.exceptions import AuthenticationError, AuthorizationError


def test_access_token_roundtrip_contains_required_claims():
    token = create_access_token(user_id="B1", roles=["provider", Role.BUYER], secret="test-secret")
    claims = decode_jwt(token, secret="test-secret")
    assert claims["sub"] == "B1"
    assert claims["roles"] == ["buyer", "provider"]
    assert claims["token_use"] == "access"
    assert "exp" in claims
    assert "iat" in claims
    assert "jti" in claims


def test_decode_rejects_wrong_secret_and_expired_tokens():
    token = create_access_token(user_id="B1", roles=["buyer"], secret="test-secret")
    with pytest.raises(AuthenticationError, match="signature"):
        decode_jwt(token, secret="other-secret")

    expired = encode_jwt({"sub": "B1"}, secret="test-secret", ttl=timedelta(minutes=-5))
    with pytest.raises(AuthenticationError, match="expired"):
        decode_jwt(expired, secret="test-secret")


def test_current_user_carries_role_set():
    cfg = get_config()
    token = create_access_token(user_id="P1", roles=["provider", "advertiser"], secret=cfg.JWT_SECRET)

    user = get_current_user(token, settings=cfg)

    assert user.user_id == "P1"
    assert user.roles == frozenset({Role.PROVIDER, Role.ADVERTISER})


def test_current_user_rejects_unknown_role_and_refresh_tokens():
    cfg = get_config()
    bad_role = create_access_token(user_id="P1", roles=["superuser"], secret=cfg.JWT_SECRET)
    with pytest.raises(AuthenticationError, match="claims"):
        get_current_user(bad_role, settings=cfg)

    refresh = encode_jwt({"sub": "P1", "token_use": "refresh"}, secret=cfg.JWT_SECRET, ttl=timedelta(minutes=5))
    with pytest.raises(AuthenticationError, match="access token"):
        get_current_user(refresh, settings=cfg)


def test_rbac_blocks_missing_scope():
    require_scopes({Role.PROVIDER}, ["negotiations.respond"])
    with pytest.raises(AuthorizationError, match="negotiations.confirm"):
        require_scopes({Role.PROVIDER}, ["negotiations.confirm"])


def test_rbac_unions_scopes_across_roles():
    assert not has_scopes({Role.BUYER}, ["negotiations.respond"])
    assert has_scopes({Role.BUYER, Role.PROVIDER}, ["negotiations.respond", "negotiations.confirm"])
    assert has_scopes({Role.ADMIN}, ["anything.at.all"])
    assert not has_scopes({Role.ADVERTISER}, ["negotiations.read"])


def test_decode_rejects_tokens_not_signed_with_hs256():
    token = create_access_token(user_id="B1", roles=["buyer"], secret="test-secret")
    _, payload_segment, _ = token.split(".")
    header_segment = _segment({"alg": "none", "typ": "JWT"})
    forged = f"{header_segment}.{payload_segment}.{_signature(f'{header_segment}.{payload_segment}', 'test-secret')}"

    with pytest.raises(AuthenticationError, match="HS256"):
        decode_jwt(forged, secret="test-secret")


def test_duplicate_roles_collapse_in_the_claim():
    token = create_access_token(user_id="B1", roles=["buyer", Role.BUYER], secret="test-secret")
    assert decode_jwt(token, secret="test-secret")["roles"] == ["buyer"]
