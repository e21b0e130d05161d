from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from waitlist_service.core.errors import ErrorCode, WaitlistError
from waitlist_service.core.options import WaitlistOptions, call_hook

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Principal:
    """The authenticated actor behind a request."""

    id: int
    email: str
    role: str


async def can_manage(principal: Principal, options: WaitlistOptions) -> bool:
    # A configured predicate replaces the role check, it is not combined with it.
    if options.can_manage is not None:
        return bool(await call_hook(options.can_manage, principal))
    return principal.role == options.admin_role


async def authorize(principal: Optional[Principal], options: WaitlistOptions) -> Principal:
    if principal is None:
        raise WaitlistError(ErrorCode.UNAUTHORIZED)
    if not await can_manage(principal, options):
        logger.warning("Waitlist management denied for principal id=%s role=%s", principal.id, principal.role)
        raise WaitlistError(ErrorCode.FORBIDDEN)
    return principal
