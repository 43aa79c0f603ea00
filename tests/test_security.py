"""Unit tests for the token service, password hasher and role gate."""

import base64
import itertools
import json
from datetime import timedelta

import pytest
from jose import jwt

from app.api.deps import require_roles
from app.core.exceptions import AuthorizationError
from app.core.security import (
    Identity,
    InvalidTokenError,
    create_access_token,
    decode_access_token,
    get_password_hash,
    verify_password,
)
from app.models.user import Role


def _b64(data: dict) -> str:
    raw = json.dumps(data, separators=(",", ":")).encode()
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode()


# ── Passwords ───────────────────────────────────────────────────────
def test_password_hash_is_salted_and_verifies():
    first = get_password_hash("Secret1!x")
    second = get_password_hash("Secret1!x")
    assert first != second
    assert first.startswith("$2")
    assert verify_password("Secret1!x", first)
    assert verify_password("Secret1!x", second)


def test_password_hash_uses_cost_factor_of_at_least_ten():
    digest = get_password_hash("Secret1!x")
    cost = int(digest.split("$")[2])
    assert cost >= 10


@pytest.mark.parametrize("attempt", ["", "secret1!x", "Secret1!X", "Secret1!x ", "Secret1!"])
def test_wrong_password_never_verifies(attempt):
    digest = get_password_hash("Secret1!x")
    assert verify_password(attempt, digest) is False


# ── Tokens ──────────────────────────────────────────────────────────
def test_token_roundtrip_carries_id_and_role():
    token = create_access_token(42, Role.ADMIN)
    identity = decode_access_token(token)
    assert identity == Identity(user_id=42, role=Role.ADMIN)


def test_token_expires_one_hour_after_issue():
    claims = jwt.get_unverified_claims(create_access_token(7, Role.USER))
    assert claims["exp"] - claims["iat"] == 3600
    assert claims["sub"] == "7"
    assert claims["role"] == "user"


@pytest.mark.parametrize("position", [0, 5, 10, 20, 30, 40])
def test_tampered_signature_is_rejected(position):
    token = create_access_token(1, Role.USER)
    header, payload, signature = token.split(".")
    replacement = "A" if signature[position] != "A" else "B"
    forged_sig = signature[:position] + replacement + signature[position + 1:]
    with pytest.raises(InvalidTokenError):
        decode_access_token(f"{header}.{payload}.{forged_sig}")


def test_payload_swap_with_original_signature_is_rejected():
    token = create_access_token(1, Role.USER)
    header, payload, signature = token.split(".")
    claims = jwt.get_unverified_claims(token)
    claims["role"] = "admin"
    with pytest.raises(InvalidTokenError):
        decode_access_token(f"{header}.{_b64(claims)}.{signature}")


def test_unsigned_token_is_rejected():
    claims = jwt.get_unverified_claims(create_access_token(1, Role.ADMIN))
    unsigned = f"{_b64({'alg': 'none', 'typ': 'JWT'})}.{_b64(claims)}."
    with pytest.raises(InvalidTokenError):
        decode_access_token(unsigned)


def test_token_signed_with_other_secret_is_rejected():
    claims = jwt.get_unverified_claims(create_access_token(1, Role.ADMIN))
    forged = jwt.encode(claims, "not-the-server-secret", algorithm="HS256")
    with pytest.raises(InvalidTokenError):
        decode_access_token(forged)


def test_expired_token_is_rejected_even_with_valid_signature():
    token = create_access_token(1, Role.ADMIN, expires_delta=timedelta(seconds=-5))
    with pytest.raises(InvalidTokenError):
        decode_access_token(token)


@pytest.mark.parametrize("value", ["", "garbage", "a.b.c", "Bearer x.y.z"])
def test_malformed_token_is_rejected(value):
    with pytest.raises(InvalidTokenError):
        decode_access_token(value)


def test_unknown_role_claim_is_rejected():
    from app.core.config import settings

    claims = jwt.get_unverified_claims(create_access_token(1, Role.USER))
    claims["role"] = "superuser"
    token = jwt.encode(claims, settings.SECRET_KEY, algorithm=settings.ALGORITHM)
    with pytest.raises(InvalidTokenError):
        decode_access_token(token)


# ── Role gate ───────────────────────────────────────────────────────
_ROLE_SETS = [
    frozenset(combo)
    for size in range(1, len(Role) + 1)
    for combo in itertools.combinations(Role, size)
]


@pytest.mark.asyncio
@pytest.mark.parametrize("role", list(Role))
@pytest.mark.parametrize("allowed", _ROLE_SETS)
async def test_access_granted_iff_role_in_allowed_set(role, allowed):
    checker = require_roles(*allowed)
    identity = Identity(user_id=1, role=role)
    if role in allowed:
        assert await checker(identity=identity) is identity
    else:
        with pytest.raises(AuthorizationError):
            await checker(identity=identity)


@pytest.mark.asyncio
async def test_admin_gets_no_implicit_bypass():
    checker = require_roles(Role.USER)
    with pytest.raises(AuthorizationError):
        await checker(identity=Identity(user_id=1, role=Role.ADMIN))
