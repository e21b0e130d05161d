"""
Persistence adapter for waitlist entries.

Translates Where/SortBy descriptions into SQLAlchemy statements over the
waitlist_entries table. Core fields map to columns; declared extension fields
map to typed JSON lookups on the `extra` column. Anything else is rejected.
"""
from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Iterable, Optional, Sequence

from pydantic import TypeAdapter
from sqlalchemy import Select, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from waitlist_service.core.errors import ErrorCode, WaitlistError
from waitlist_service.core.options import FieldSpec, FieldType
from waitlist_service.models.waitlist import WaitlistEntry
from waitlist_service.services.query import SortBy, Where

logger = logging.getLogger(__name__)

# same encoding the join payload uses when it is stored as JSON
_DATETIME = TypeAdapter(datetime)

_COLUMNS = {
    "id":           WaitlistEntry.id,
    "email":        WaitlistEntry.email,
    "status":       WaitlistEntry.status,
    "requested_at": WaitlistEntry.requested_at,
    "processed_at": WaitlistEntry.processed_at,
    "processed_by": WaitlistEntry.processed_by,
}


class WaitlistStore:
    def __init__(self, db: AsyncSession, additional_fields: Iterable[FieldSpec] = ()):
        self.db = db
        self.fields = {f.name: f for f in additional_fields}

    # ── field resolution ──────────────────────────────────────────────────────

    def _column(self, name: str):
        if name in _COLUMNS:
            return _COLUMNS[name]
        spec = self.fields.get(name)
        if spec is None or not spec.filterable:
            raise WaitlistError(
                ErrorCode.INVALID_QUERY,
                message=f"Unknown or unsupported waitlist field: {name}",
            )
        path = WaitlistEntry.extra[name]
        if spec.type == FieldType.number:
            return path.as_float()
        if spec.type == FieldType.boolean:
            return path.as_boolean()
        return path.as_string()

    def _value(self, name: str, value: Any) -> Any:
        spec = self.fields.get(name)
        if spec is not None and spec.type == FieldType.date and isinstance(value, datetime):
            return _DATETIME.dump_python(value, mode="json")
        return value

    def _apply_where(self, stmt, where: Optional[Sequence[Where]]):
        for clause in where or ():
            column = self._column(clause.field)
            value = self._value(clause.field, clause.value)
            if clause.operator == "eq":
                stmt = stmt.where(column == value)
            elif clause.operator == "ne":
                stmt = stmt.where(column != value)
            else:
                raise WaitlistError(
                    ErrorCode.INVALID_QUERY,
                    message=f"Unsupported operator: {clause.operator}",
                )
        return stmt

    # ── operations ────────────────────────────────────────────────────────────

    async def create(self, email: str, extra: Optional[dict[str, Any]] = None) -> WaitlistEntry:
        entry = WaitlistEntry(email=email, extra=dict(extra or {}))
        self.db.add(entry)
        try:
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise
        await self.db.refresh(entry)
        return entry

    async def find_one(self, where: Sequence[Where]) -> Optional[WaitlistEntry]:
        stmt = self._apply_where(select(WaitlistEntry), where).limit(1)
        result = await self.db.execute(stmt.execution_options(populate_existing=True))
        return result.scalar_one_or_none()

    async def find_many(
        self,
        where: Optional[Sequence[Where]] = None,
        sort_by: Optional[SortBy] = None,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
    ) -> list[WaitlistEntry]:
        stmt: Select = self._apply_where(select(WaitlistEntry), where)
        if sort_by is not None:
            column = self._column(sort_by.field)
            if sort_by.direction not in ("asc", "desc"):
                raise WaitlistError(
                    ErrorCode.INVALID_QUERY,
                    message=f"Unsupported sort direction: {sort_by.direction}",
                )
            ordered = column.asc() if sort_by.direction == "asc" else column.desc()
            # id breaks ties so pages never overlap
            stmt = stmt.order_by(ordered, WaitlistEntry.id.asc())
        if offset:
            stmt = stmt.offset(offset)
        if limit is not None:
            stmt = stmt.limit(limit)
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def count(self, where: Optional[Sequence[Where]] = None) -> int:
        stmt = self._apply_where(select(func.count(WaitlistEntry.id)), where)
        return int(await self.db.scalar(stmt) or 0)

    async def update(self, where: Sequence[Where], values: dict[str, Any]) -> Optional[WaitlistEntry]:
        """Update the single entry matching `where`; None when nothing matched."""
        stmt = self._apply_where(update(WaitlistEntry), where).values(**values)
        result = await self.db.execute(stmt.execution_options(synchronize_session=False))
        if result.rowcount == 0:
            # nothing was written; leave loaded instances unexpired
            logger.debug("No waitlist entry matched update on %s", [w.field for w in where])
            return None
        await self.db.commit()
        ids = [w for w in where if w.field == "id" and w.operator == "eq"]
        return await self.find_one(ids or where)
