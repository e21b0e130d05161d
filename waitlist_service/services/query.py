from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal, Mapping

from waitlist_service.core.options import WaitlistOptions, normalize_email

DEFAULT_SORT_BY = "requested_at"
DEFAULT_SORT_DIRECTION = "desc"

Operator = Literal["eq", "ne"]
Direction = Literal["asc", "desc"]


@dataclass(frozen=True)
class Where:
    field: str
    value: Any
    operator: Operator = "eq"


@dataclass(frozen=True)
class SortBy:
    field: str = DEFAULT_SORT_BY
    direction: Direction = DEFAULT_SORT_DIRECTION


@dataclass(frozen=True)
class WaitlistQuery:
    where: list[Where] = field(default_factory=list)
    sort_by: SortBy = field(default_factory=SortBy)
    page: int = 1
    limit: int = 10
    offset: int = 0


_CONTROL_PARAMS = {"page", "limit", "sort_by", "sort_direction", "status", "email"}


def build_filters(params: Mapping[str, Any]) -> list[Where]:
    """Equality filter per supplied status, email and extension field (ANDed)."""
    where: list[Where] = []
    status = params.get("status")
    if status is not None:
        where.append(Where("status", status))
    email = params.get("email")
    if email is not None:
        where.append(Where("email", normalize_email(email)))

    # anything else is an extension field; the store rejects undeclared names
    for key, value in params.items():
        if key in _CONTROL_PARAMS or value is None:
            continue
        where.append(Where(key, value))
    return where


def build_query(params: Mapping[str, Any], options: WaitlistOptions) -> WaitlistQuery:
    page = params.get("page") or 1
    limit = params.get("limit") or options.default_page_size
    sort_by = SortBy(
        field=params.get("sort_by") or DEFAULT_SORT_BY,
        direction=params.get("sort_direction") or DEFAULT_SORT_DIRECTION,
    )
    return WaitlistQuery(
        where=build_filters(params),
        sort_by=sort_by,
        page=page,
        limit=limit,
        offset=0 if page == 1 else (page - 1) * limit,
    )
