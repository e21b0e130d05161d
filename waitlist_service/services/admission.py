"""
Admission policy for waitlist join requests.

Pure decision logic: the caller looks up whether the email is already on the
waitlist and how many entries are pending, then asks evaluate() for a verdict.
Checks run in a fixed order and the first failing one decides the reason.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional

from fastapi import status

from waitlist_service.core.errors import ErrorCode, WaitlistError
from waitlist_service.core.options import WaitlistOptions, call_hook, mask_email

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Decision:
    accepted: bool
    reason: Optional[ErrorCode] = None
    # Overrides the reason's default HTTP status when set
    status_code: Optional[int] = None

    @classmethod
    def accept(cls) -> "Decision":
        return cls(accepted=True)

    @classmethod
    def reject(cls, reason: ErrorCode, status_code: Optional[int] = None) -> "Decision":
        return cls(accepted=False, reason=reason, status_code=status_code)

    def raise_for_rejection(self) -> None:
        if not self.accepted:
            raise WaitlistError(self.reason, status_code=self.status_code)


def domain_of(email: str) -> Optional[str]:
    """Return the '@domain' suffix of an address, or None if it is malformed."""
    parts = email.split("@")
    if len(parts) != 2 or not parts[0] or not parts[1]:
        return None
    return f"@{parts[1]}"


async def evaluate(
    email: str,
    *,
    already_exists: bool,
    pending_count: Optional[int],
    options: WaitlistOptions,
    data: Optional[dict[str, Any]] = None,
) -> Decision:
    if not options.enabled:
        return Decision.reject(ErrorCode.WAITLIST_NOT_ENABLED)

    if already_exists:
        return Decision.reject(ErrorCode.EMAIL_ALREADY_IN_WAITLIST)

    if (
        options.maximum_participants is not None
        and pending_count is not None
        and pending_count >= options.maximum_participants
    ):
        return Decision.reject(ErrorCode.WAITLIST_FULL)

    if options.allowed_domains is not None:
        domain = domain_of(email)
        if domain is None:
            return Decision.reject(
                ErrorCode.DOMAIN_NOT_ALLOWED,
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            )
        if domain.lower() not in options.allowed_domains:
            return Decision.reject(ErrorCode.DOMAIN_NOT_ALLOWED)

    if options.validate_entry is not None:
        payload = dict(data or {})
        payload["email"] = email
        try:
            valid = await call_hook(options.validate_entry, payload)
        except Exception:
            logger.exception("validate_entry raised for %s", mask_email(email))
            return Decision.reject(ErrorCode.INVALID_ENTRY)
        if not valid:
            return Decision.reject(ErrorCode.INVALID_ENTRY)

    return Decision.accept()
