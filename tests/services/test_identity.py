from __future__ import annotations

import asyncio
from datetime import timedelta
from uuid import uuid4

import jwt
import pytest

from ead_service.core.errors import ProfileMissing, Unauthenticated
from ead_service.services import token_service
from ead_service.services.identity import IdentityResolver
from tests.conftest import add_account, mint_token


def test_missing_credential_never_calls_verifier(store) -> None:
    calls: list[str] = []

    def _verify(token: str) -> dict:
        calls.append(token)
        return {}

    resolver = IdentityResolver(store.accounts, verify_token=_verify)
    for raw in (None, ""):
        with pytest.raises(Unauthenticated):
            asyncio.run(resolver.resolve(raw))
    assert calls == []


def test_valid_token_resolves_account_and_role(store) -> None:
    account = add_account(store)
    identity = asyncio.run(IdentityResolver(store.accounts).resolve(mint_token(account.id)))
    assert identity.account == account
    assert identity.verified is True


def test_unverified_email_claim(store) -> None:
    account = add_account(store)
    token = mint_token(account.id, email_verified=False)
    identity = asyncio.run(IdentityResolver(store.accounts).resolve(token))
    assert identity.verified is False


def test_expired_token_is_unauthenticated(store) -> None:
    account = add_account(store)
    token = token_service.create_access_token(sub=str(account.id), ttl=timedelta(seconds=-1))
    with pytest.raises(Unauthenticated, match="expired"):
        asyncio.run(IdentityResolver(store.accounts).resolve(token))


def test_garbage_token_is_unauthenticated(store) -> None:
    with pytest.raises(Unauthenticated):
        asyncio.run(IdentityResolver(store.accounts).resolve("not.a.jwt"))


def test_setup_token_is_not_an_access_token(store) -> None:
    account = add_account(store)
    setup = token_service.create_setup_token(sub=str(account.id), email=account.email)
    with pytest.raises(Unauthenticated):
        asyncio.run(IdentityResolver(store.accounts).resolve(setup))


def test_token_signed_with_foreign_key_is_rejected(store) -> None:
    from cryptography.hazmat.primitives.asymmetric import ec

    account = add_account(store)
    foreign = ec.generate_private_key(ec.SECP256R1())
    token = jwt.encode(
        {
            "sub": str(account.id),
            "iss": token_service.ISSUER,
            "aud": token_service.AUDIENCE,
            "exp": 9999999999,
            "iat": 0,
            "jti": "x",
        },
        foreign,
        algorithm="ES256",
    )
    with pytest.raises(Unauthenticated):
        asyncio.run(IdentityResolver(store.accounts).resolve(token))


def test_valid_token_without_account_is_profile_missing(store) -> None:
    with pytest.raises(ProfileMissing):
        asyncio.run(IdentityResolver(store.accounts).resolve(mint_token(uuid4())))


def test_non_uuid_subject_is_profile_missing(store) -> None:
    with pytest.raises(ProfileMissing):
        asyncio.run(IdentityResolver(store.accounts).resolve(mint_token("auth0|abc")))


def test_resolver_never_creates_accounts(store) -> None:
    sub = uuid4()
    with pytest.raises(ProfileMissing):
        asyncio.run(IdentityResolver(store.accounts).resolve(mint_token(sub)))
    assert asyncio.run(store.accounts.get_by_id(sub)) is None
