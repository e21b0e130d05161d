from datetime import datetime
from functools import lru_cache
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, create_model

from waitlist_service.core.options import FieldSpec, FieldType
from waitlist_service.models.waitlist import WaitlistStatus

_PYTHON_TYPES: dict[FieldType, Any] = {
    FieldType.string:       str,
    FieldType.number:       float,
    FieldType.boolean:      bool,
    FieldType.date:         datetime,
    FieldType.string_array: list[str],
}


# ── Requests ──────────────────────────────────────────────────────────────────

class WaitlistJoinBase(BaseModel):
    model_config = ConfigDict(extra="forbid")

    email: EmailStr


class WaitlistSearchParams(BaseModel):
    model_config = ConfigDict(extra="forbid")

    page: int = Field(1, ge=1)
    limit: Optional[int] = Field(None, ge=1)
    status: Optional[WaitlistStatus] = None
    email: Optional[str] = None
    sort_by: Optional[str] = None
    sort_direction: Optional[Literal["asc", "desc"]] = None


@lru_cache(maxsize=None)
def build_join_model(fields: tuple[FieldSpec, ...]) -> type[WaitlistJoinBase]:
    """Join body model: email plus every declared extension field."""
    definitions: dict[str, Any] = {}
    for spec in fields:
        python_type = _PYTHON_TYPES[spec.type]
        if spec.required:
            definitions[spec.name] = (python_type, ...)
        else:
            definitions[spec.name] = (Optional[python_type], None)
    return create_model("WaitlistJoinRequest", __base__=WaitlistJoinBase, **definitions)


@lru_cache(maxsize=None)
def build_search_model(
    fields: tuple[FieldSpec, ...],
    max_page_size: int,
) -> type[WaitlistSearchParams]:
    """Search model: paging/sorting controls plus scalar extension fields as filters."""
    definitions: dict[str, Any] = {
        "limit": (Optional[int], Field(None, ge=1, le=max_page_size)),
    }
    for spec in fields:
        if spec.filterable:
            definitions[spec.name] = (Optional[_PYTHON_TYPES[spec.type]], None)
    return create_model("WaitlistSearchRequest", __base__=WaitlistSearchParams, **definitions)


# ── Responses ─────────────────────────────────────────────────────────────────

class WaitlistEntryRead(BaseModel):
    # extension fields are returned alongside the core ones
    model_config = ConfigDict(extra="allow")

    id: str
    email: str
    status: WaitlistStatus
    requested_at: datetime
    processed_at: Optional[datetime] = None
    processed_by: Optional[int] = None


class WaitlistJoinRead(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: str
    email: str
    status: WaitlistStatus
    requested_at: datetime


class WaitlistStatusRead(BaseModel):
    status: WaitlistStatus
    requested_at: datetime


class WaitlistListRead(BaseModel):
    data: list[WaitlistEntryRead]
    page: int
    limit: int
    total: int


class WaitlistCountRead(BaseModel):
    count: int


class WaitlistActionRead(BaseModel):
    message: str
    entry: WaitlistEntryRead
