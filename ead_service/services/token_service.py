"""JWT creation and validation (ES256).

Centralizes all token logic so the identity resolver (validation) and the
grant notification flow (setup links) share the same key and claims schema.

Key management: JWT_PRIVATE_KEY (PEM) in production; dev/test generate an
ephemeral EC key pair on import.
"""

from __future__ import annotations

import uuid
from datetime import UTC, datetime, timedelta

import jwt
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec

from ead_service.core.config import SETTINGS

if SETTINGS.jwt_private_key:
    _loaded = serialization.load_pem_private_key(
        SETTINGS.jwt_private_key.encode(), password=None
    )
    if not isinstance(_loaded, ec.EllipticCurvePrivateKey):
        raise ValueError("JWT_PRIVATE_KEY must be an EC (P-256) private key")
    _private_key = _loaded
else:
    _private_key = ec.generate_private_key(ec.SECP256R1())
_public_key = _private_key.public_key()

ALGORITHM = "ES256"
ISSUER = SETTINGS.jwt_issuer
AUDIENCE = SETTINGS.jwt_audience
ACCESS_TOKEN_TTL_MIN = 15

# Account-setup links use the same key pair but a different audience so a
# setup token can never be accepted as an API access token.
SETUP_AUDIENCE = f"{SETTINGS.jwt_audience}-account-setup"
SETUP_TOKEN_TTL_HOURS = 72


def create_access_token(
    *,
    sub: str,
    email_verified: bool = True,
    ttl: timedelta = timedelta(minutes=ACCESS_TOKEN_TTL_MIN),
) -> str:
    """Build and sign a JWT access token.

    Roles are deliberately absent: the resolver reads the account's current
    role from the store on every request, so a demotion takes effect at once.
    """
    now = datetime.now(UTC)
    payload = {
        "sub": sub,
        "iss": ISSUER,
        "aud": AUDIENCE,
        "exp": now + ttl,
        "iat": now,
        "jti": str(uuid.uuid4()),
        "email_verified": email_verified,
    }
    return jwt.encode(payload, _private_key, algorithm=ALGORITHM)


def decode_access_token(token: str) -> dict:
    """Verify signature and claims, return the payload.

    Pins algorithm to ES256 to prevent alg:none and alg-switching attacks.
    Validates exp, iss, and aud automatically via PyJWT options.

    Raises jwt.ExpiredSignatureError, jwt.InvalidTokenError on failure.
    """
    return jwt.decode(
        token,
        _public_key,
        algorithms=[ALGORITHM],
        issuer=ISSUER,
        audience=AUDIENCE,
        options={"require": ["sub", "exp", "iat", "jti"]},
    )


def create_setup_token(*, sub: str, email: str) -> str:
    """Sign the handle embedded in an account-setup / password-reset link."""
    now = datetime.now(UTC)
    payload = {
        "sub": sub,
        "email": email,
        "iss": ISSUER,
        "aud": SETUP_AUDIENCE,
        "exp": now + timedelta(hours=SETUP_TOKEN_TTL_HOURS),
        "iat": now,
        "jti": str(uuid.uuid4()),
    }
    return jwt.encode(payload, _private_key, algorithm=ALGORITHM)


def decode_setup_token(token: str) -> dict:
    """Verify a setup token. Pins audience to SETUP_AUDIENCE.

    Raises jwt.ExpiredSignatureError, jwt.InvalidTokenError on failure.
    """
    return jwt.decode(
        token,
        _public_key,
        algorithms=[ALGORITHM],
        issuer=ISSUER,
        audience=SETUP_AUDIENCE,
        options={"require": ["sub", "email", "exp", "iat", "jti"]},
    )
