"""FastAPI dependencies: the request-scoped store and the route guards.

Guards run the identity resolver and then the access policy gate; a denial
becomes an HTTPException here so route handlers only ever see an Identity
that is allowed to be there.  Public routes (certificate verification)
declare neither guard and never touch the resolver.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncGenerator
from typing import Annotated

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.exc import InterfaceError, OperationalError

from ead_service.core.errors import ProfileMissing, StoreUnavailable, Unauthenticated
from ead_service.core.metrics import ACCESS_DENIALS
from ead_service.db import engine as db
from ead_service.models.account import Identity
from ead_service.repos.store import Store, in_memory_store, pg_store
from ead_service.services.access_policy import DenialReason, RouteClass, decide
from ead_service.services.identity import IdentityResolver

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)

# Process-wide store used when no DATABASE_URL is configured.
memory_store: Store = in_memory_store()


async def get_store() -> AsyncGenerator[Store, None]:
    """Yield the store for this request.

    With Postgres, every repo shares one session: commit on success,
    rollback on exception, so a failed request leaves no partial writes.
    """
    if db.async_session_factory is None:
        yield memory_store
        return

    async with db.async_session_factory() as session:
        try:
            await session.connection()
        except (OperationalError, InterfaceError, OSError) as e:
            logger.error("Database unreachable: %s", e)
            raise StoreUnavailable() from e
        try:
            yield pg_store(session)
            await session.commit()
        except Exception:
            await session.rollback()
            raise


StoreDep = Annotated[Store, Depends(get_store)]


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def _resolve(
    credentials: HTTPAuthorizationCredentials | None, store: Store
) -> Identity:
    raw_token = credentials.credentials if credentials is not None else None
    try:
        return await IdentityResolver(store.accounts).resolve(raw_token)
    except Unauthenticated as e:
        ACCESS_DENIALS.labels(reason="unauthenticated").inc()
        raise _unauthorized(str(e)) from None
    except ProfileMissing:
        ACCESS_DENIALS.labels(reason="profile_missing").inc()
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN, detail="Profile not found"
        ) from None


def _guard(route_class: RouteClass):
    async def _check(
        store: StoreDep,
        credentials: Annotated[
            HTTPAuthorizationCredentials | None, Depends(bearer_scheme)
        ],
    ) -> Identity:
        identity = await _resolve(credentials, store)
        decision = decide(identity, route_class)
        if decision.allowed:
            return identity

        ACCESS_DENIALS.labels(reason=str(decision.reason)).inc()
        if decision.reason == DenialReason.UNAUTHENTICATED:
            raise _unauthorized("Not authenticated")
        logger.warning(
            "Access denied: account=%s role=%s route_class=%s",
            identity.account.id,
            identity.account.role,
            route_class,
            extra={"account_id": str(identity.account.id)},
        )
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN, detail="Insufficient permissions"
        )

    return _check


require_authenticated = _guard(RouteClass.AUTHENTICATED)
require_admin = _guard(RouteClass.ADMIN_ONLY)

CurrentIdentity = Annotated[Identity, Depends(require_authenticated)]
AdminIdentity = Annotated[Identity, Depends(require_admin)]
