"""Access policy gate.

A pure classification of (identity, route class) -> Decision.  It never
touches storage and never sees a raw token: the identity resolver has
already run (or been skipped for public routes) by the time it decides.
Keeping the decision here, rather than in database row-level policies,
makes every route's authorization visible and unit-testable.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum

from ead_service.models.account import Identity


class RouteClass(StrEnum):
    PUBLIC = "public"
    AUTHENTICATED = "authenticated"
    ADMIN_ONLY = "admin_only"


class DenialReason(StrEnum):
    UNAUTHENTICATED = "unauthenticated"
    FORBIDDEN = "forbidden"


@dataclass(frozen=True, slots=True)
class Decision:
    allowed: bool
    reason: DenialReason | None = None


ALLOW = Decision(allowed=True)


def decide(identity: Identity | None, route_class: RouteClass) -> Decision:
    if route_class == RouteClass.PUBLIC:
        return ALLOW
    if identity is None:
        return Decision(allowed=False, reason=DenialReason.UNAUTHENTICATED)
    if route_class == RouteClass.ADMIN_ONLY and not identity.account.is_admin:
        return Decision(allowed=False, reason=DenialReason.FORBIDDEN)
    return ALLOW
