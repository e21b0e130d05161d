"""
Waitlist façade.

One method per exposed operation. Each composes the admission policy,
lifecycle, access gate and query builder over a WaitlistStore. Public
operations (join, check_status) take no principal; every management
operation runs the access gate first.
"""
from __future__ import annotations

import logging
from typing import Any, Mapping, Optional

from pydantic import ValidationError
from sqlalchemy.exc import IntegrityError

from waitlist_service.core.errors import ErrorCode, WaitlistError
from waitlist_service.core.options import WaitlistOptions, call_hook, mask_email, normalize_email
from waitlist_service.models.waitlist import WaitlistEntry, WaitlistStatus
from waitlist_service.schemas.waitlist import build_search_model
from waitlist_service.services import admission, lifecycle
from waitlist_service.services.access import Principal, authorize
from waitlist_service.services.query import Where, build_filters, build_query
from waitlist_service.services.store import WaitlistStore

logger = logging.getLogger(__name__)


class WaitlistService:
    def __init__(self, store: WaitlistStore, options: WaitlistOptions):
        self.store = store
        self.options = options

    # ── Public ────────────────────────────────────────────────────────────────

    async def join(self, email: str, fields: Optional[dict[str, Any]] = None) -> WaitlistEntry:
        email = normalize_email(email)
        fields = dict(fields or {})

        already_exists = False
        pending_count = None
        if self.options.enabled:
            already_exists = await self.store.find_one([Where("email", email)]) is not None
            if self.options.maximum_participants is not None:
                pending_count = await self.store.count([Where("status", WaitlistStatus.pending)])

        decision = await admission.evaluate(
            email,
            already_exists=already_exists,
            pending_count=pending_count,
            options=self.options,
            data=fields,
        )
        if not decision.accepted:
            logger.info("Waitlist join rejected for %s: %s", mask_email(email), decision.reason.value)
            decision.raise_for_rejection()

        try:
            entry = await self.store.create(email=email, extra=fields)
        except IntegrityError:
            # lost the race against a concurrent join for the same email
            logger.info("Waitlist join for %s hit the unique constraint", mask_email(email))
            raise WaitlistError(ErrorCode.EMAIL_ALREADY_IN_WAITLIST)

        logger.info("Waitlist entry %s created", entry.id)
        return entry

    async def check_status(self, email: str) -> dict[str, Any]:
        entry = await self.store.find_one([Where("email", normalize_email(email))])
        if entry is None:
            raise WaitlistError(ErrorCode.WAITLIST_ENTRY_NOT_FOUND)
        # processing metadata stays admin-only
        return {"status": entry.status, "requested_at": entry.requested_at}

    async def is_approved(self, email: str) -> bool:
        entry = await self.store.find_one([Where("email", normalize_email(email))])
        return entry is not None and entry.status == WaitlistStatus.approved

    # ── Management ────────────────────────────────────────────────────────────

    def _parse_search(self, params: Mapping[str, Any]) -> dict[str, Any]:
        model = build_search_model(self.options.additional_fields, self.options.max_page_size)
        try:
            search = model.model_validate(dict(params))
        except ValidationError as exc:
            problems = "; ".join(
                f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in exc.errors()
            )
            raise WaitlistError(ErrorCode.INVALID_QUERY, message=f"Invalid waitlist query: {problems}")
        return search.model_dump(exclude_none=True)

    async def list(self, params: Mapping[str, Any], principal: Optional[Principal]) -> dict[str, Any]:
        await authorize(principal, self.options)
        query = build_query(self._parse_search(params), self.options)
        entries = await self.store.find_many(
            where=query.where,
            sort_by=query.sort_by,
            limit=query.limit,
            offset=query.offset,
        )
        total = await self.store.count(query.where)
        return {
            "data": entries,
            "page": query.page,
            "limit": query.limit,
            "total": total,
        }

    async def count(self, params: Mapping[str, Any], principal: Optional[Principal]) -> int:
        await authorize(principal, self.options)
        return await self.store.count(build_filters(self._parse_search(params)))

    async def find(self, entry_id: str, principal: Optional[Principal]) -> WaitlistEntry:
        await authorize(principal, self.options)
        entry = await self.store.find_one([Where("id", entry_id)])
        if entry is None:
            raise WaitlistError(ErrorCode.WAITLIST_ENTRY_NOT_FOUND)
        return entry

    async def approve(self, entry_id: str, principal: Optional[Principal]) -> WaitlistEntry:
        principal = await authorize(principal, self.options)
        entry = await lifecycle.approve(self.store, entry_id, principal)
        await self._notify(entry)
        return entry

    async def reject(self, entry_id: str, principal: Optional[Principal]) -> WaitlistEntry:
        principal = await authorize(principal, self.options)
        entry = await lifecycle.reject(self.store, entry_id, principal)
        await self._notify(entry)
        return entry

    async def _notify(self, entry: WaitlistEntry) -> None:
        if self.options.on_status_change is not None:
            await call_hook(self.options.on_status_change, entry.to_dict())
