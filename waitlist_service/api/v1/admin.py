from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Request

from waitlist_service.core.deps import get_current_principal, get_waitlist_service
from waitlist_service.models.waitlist import WaitlistEntry
from waitlist_service.schemas.waitlist import (
    WaitlistActionRead,
    WaitlistCountRead,
    WaitlistEntryRead,
    WaitlistListRead,
)
from waitlist_service.services.access import Principal
from waitlist_service.services.waitlist import WaitlistService

router = APIRouter(prefix="/admin", tags=["admin"])


def _entry_read(entry: WaitlistEntry) -> WaitlistEntryRead:
    return WaitlistEntryRead(**entry.to_dict())


# ── Waitlist ──────────────────────────────────────────────────────────────────
# Query parameters: page, limit, status, email, sort_by, sort_direction and any
# scalar extension field. They are validated by the service after the access
# check so anonymous callers always get 401 first.

@router.get("/waitlist", response_model=WaitlistListRead)
async def list_waitlist(
    request: Request,
    principal: Optional[Principal] = Depends(get_current_principal),
    service: WaitlistService = Depends(get_waitlist_service),
):
    result = await service.list(dict(request.query_params), principal)
    return WaitlistListRead(
        data=[_entry_read(e) for e in result["data"]],
        page=result["page"],
        limit=result["limit"],
        total=result["total"],
    )


@router.get("/waitlist/count", response_model=WaitlistCountRead)
async def count_waitlist(
    request: Request,
    principal: Optional[Principal] = Depends(get_current_principal),
    service: WaitlistService = Depends(get_waitlist_service),
):
    return {"count": await service.count(dict(request.query_params), principal)}


@router.get("/waitlist/{entry_id}", response_model=WaitlistEntryRead)
async def get_waitlist_entry(
    entry_id: str,
    principal: Optional[Principal] = Depends(get_current_principal),
    service: WaitlistService = Depends(get_waitlist_service),
):
    return _entry_read(await service.find(entry_id, principal))


@router.patch("/waitlist/{entry_id}/approve", response_model=WaitlistActionRead)
async def approve_waitlist_entry(
    entry_id: str,
    principal: Optional[Principal] = Depends(get_current_principal),
    service: WaitlistService = Depends(get_waitlist_service),
):
    entry = await service.approve(entry_id, principal)
    return WaitlistActionRead(message="Waitlist entry approved", entry=_entry_read(entry))


@router.patch("/waitlist/{entry_id}/reject", response_model=WaitlistActionRead)
async def reject_waitlist_entry(
    entry_id: str,
    principal: Optional[Principal] = Depends(get_current_principal),
    service: WaitlistService = Depends(get_waitlist_service),
):
    entry = await service.reject(entry_id, principal)
    return WaitlistActionRead(message="Waitlist entry rejected", entry=_entry_read(entry))
