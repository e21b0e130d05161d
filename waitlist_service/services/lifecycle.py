from __future__ import annotations

import logging
from datetime import datetime, timezone

from waitlist_service.core.errors import ErrorCode, WaitlistError
from waitlist_service.models.waitlist import WaitlistEntry, WaitlistStatus
from waitlist_service.services.access import Principal
from waitlist_service.services.query import Where
from waitlist_service.services.store import WaitlistStore

logger = logging.getLogger(__name__)

TERMINAL_STATES = frozenset({WaitlistStatus.approved, WaitlistStatus.rejected})


def can_transition(current: WaitlistStatus, target: WaitlistStatus) -> bool:
    return current == WaitlistStatus.pending and target in TERMINAL_STATES


async def transition(
    store: WaitlistStore,
    entry_id: str,
    target: WaitlistStatus,
    principal: Principal,
) -> WaitlistEntry:
    if target not in TERMINAL_STATES:
        raise ValueError(f"Cannot transition a waitlist entry to {target}")

    # Guarding on status in the UPDATE keeps concurrent approve/reject calls
    # from overwriting each other's processing stamp.
    updated = await store.update(
        where=[Where("id", entry_id), Where("status", WaitlistStatus.pending)],
        values={
            "status": target,
            "processed_at": datetime.now(timezone.utc),
            "processed_by": principal.id,
        },
    )
    if updated is not None:
        logger.info("Waitlist entry %s %s by principal id=%s", entry_id, target.value, principal.id)
        return updated

    existing = await store.find_one([Where("id", entry_id)])
    if existing is None:
        raise WaitlistError(ErrorCode.WAITLIST_ENTRY_NOT_FOUND)
    logger.warning(
        "Refusing to mark waitlist entry %s %s: already %s",
        entry_id, target.value, existing.status.value,
    )
    raise WaitlistError(ErrorCode.WAITLIST_ENTRY_ALREADY_PROCESSED)


async def approve(store: WaitlistStore, entry_id: str, principal: Principal) -> WaitlistEntry:
    return await transition(store, entry_id, WaitlistStatus.approved, principal)


async def reject(store: WaitlistStore, entry_id: str, principal: Principal) -> WaitlistEntry:
    return await transition(store, entry_id, WaitlistStatus.rejected, principal)
