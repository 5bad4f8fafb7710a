"""Identity resolver: bearer credential -> (Account, verified).

Three distinct failure modes:
  - no credential at all                     -> Unauthenticated (verifier not called)
  - credential rejected by the token verifier -> Unauthenticated
  - credential fine, no local account        -> ProfileMissing

The last one is not an authentication failure: the identity provider
vouched for the caller, but local state is inconsistent.  The resolver
never creates accounts to paper over it.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from uuid import UUID

import jwt

from ead_service.core.errors import ProfileMissing, Unauthenticated
from ead_service.models.account import Identity
from ead_service.repos.account_repo import AccountRepo
from ead_service.services import token_service

logger = logging.getLogger(__name__)

TokenVerifier = Callable[[str], dict]


class IdentityResolver:
    def __init__(
        self,
        accounts: AccountRepo,
        verify_token: TokenVerifier = token_service.decode_access_token,
    ) -> None:
        self._accounts = accounts
        self._verify_token = verify_token

    async def resolve(self, raw_token: str | None) -> Identity:
        if not raw_token:
            raise Unauthenticated("Missing Authorization header")

        try:
            claims = self._verify_token(raw_token)
        except jwt.ExpiredSignatureError:
            logger.warning("Expired token rejected")
            raise Unauthenticated("Token expired") from None
        except jwt.InvalidTokenError as e:
            logger.warning("Invalid token rejected: %s", e)
            raise Unauthenticated("Invalid token") from None

        try:
            account_id = UUID(str(claims["sub"]))
        except ValueError:
            logger.warning("Token subject is not an account id: sub=%r", claims["sub"])
            raise ProfileMissing() from None

        account = await self._accounts.get_by_id(account_id)
        if account is None:
            logger.warning(
                "Valid token without profile account=%s",
                account_id,
                extra={"account_id": str(account_id)},
            )
            raise ProfileMissing()

        logger.debug("Token resolved to account=%s role=%s", account.id, account.role)
        return Identity(account=account, verified=bool(claims.get("email_verified")))
