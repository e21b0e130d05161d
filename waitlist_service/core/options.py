"""
Waitlist options.

WaitlistOptions is the single immutable configuration object handed to every
waitlist component. It is built once at startup, either from Settings or
directly in code when callbacks (validate_entry, can_manage, on_status_change)
need to be injected.
"""
from __future__ import annotations

import enum
import inspect
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Optional, Union

if TYPE_CHECKING:
    from waitlist_service.core.config import Settings
    from waitlist_service.services.access import Principal


RESERVED_FIELDS = frozenset(
    {"id", "email", "status", "requested_at", "processed_at", "processed_by", "extra",
     "page", "limit", "sort_by", "sort_direction"}
)


class FieldType(str, enum.Enum):
    string = "string"
    number = "number"
    boolean = "boolean"
    date = "date"
    string_array = "string[]"


SCALAR_FIELD_TYPES = frozenset(
    {FieldType.string, FieldType.number, FieldType.boolean, FieldType.date}
)


@dataclass(frozen=True)
class FieldSpec:
    """An extension attribute stored alongside the core entry fields."""

    name: str
    type: FieldType = FieldType.string
    required: bool = False

    def __post_init__(self):
        object.__setattr__(self, "type", FieldType(self.type))
        if not self.name.isidentifier() or self.name.startswith("_"):
            raise ValueError(f"Invalid waitlist field name: {self.name!r}")
        if self.name in RESERVED_FIELDS:
            raise ValueError(f"Waitlist field {self.name!r} is reserved")

    @property
    def filterable(self) -> bool:
        return self.type in SCALAR_FIELD_TYPES


ValidateEntry = Callable[[dict[str, Any]], Union[bool, Awaitable[bool]]]
CanManage = Callable[["Principal"], Union[bool, Awaitable[bool]]]
OnStatusChange = Callable[[dict[str, Any]], Union[None, Awaitable[None]]]


@dataclass(frozen=True)
class WaitlistOptions:
    enabled: bool = False
    allowed_domains: Optional[tuple[str, ...]] = None
    maximum_participants: Optional[int] = None
    additional_fields: tuple[FieldSpec, ...] = ()
    disable_sign_in_and_sign_up: bool = False
    admin_role: str = "admin"
    default_page_size: int = 10
    max_page_size: int = 100

    validate_entry: Optional[ValidateEntry] = field(default=None, compare=False)
    can_manage: Optional[CanManage] = field(default=None, compare=False)
    on_status_change: Optional[OnStatusChange] = field(default=None, compare=False)

    def __post_init__(self):
        if self.allowed_domains is not None:
            domains = tuple(d.strip().lower() for d in self.allowed_domains)
            bad = [d for d in domains if not d.startswith("@") or len(d) < 2]
            if bad:
                raise ValueError(f"Allowed domains must look like '@example.com': {bad}")
            object.__setattr__(self, "allowed_domains", domains)

        if self.maximum_participants is not None and self.maximum_participants < 1:
            raise ValueError("maximum_participants must be a positive integer")

        fields = tuple(self.additional_fields)
        names = [f.name for f in fields]
        duplicates = sorted({n for n in names if names.count(n) > 1})
        if duplicates:
            raise ValueError(f"Duplicate waitlist fields: {duplicates}")
        object.__setattr__(self, "additional_fields", fields)

        if not 1 <= self.default_page_size <= self.max_page_size:
            raise ValueError("default_page_size must be between 1 and max_page_size")

    @classmethod
    def from_settings(cls, settings: "Settings", **callbacks) -> "WaitlistOptions":
        return cls(
            enabled=settings.WAITLIST_ENABLED,
            allowed_domains=(
                tuple(settings.WAITLIST_ALLOWED_DOMAINS)
                if settings.WAITLIST_ALLOWED_DOMAINS is not None
                else None
            ),
            maximum_participants=settings.WAITLIST_MAXIMUM_PARTICIPANTS,
            additional_fields=tuple(
                FieldSpec(name=name, type=spec.type, required=spec.required)
                for name, spec in settings.WAITLIST_ADDITIONAL_FIELDS.items()
            ),
            disable_sign_in_and_sign_up=settings.WAITLIST_DISABLE_SIGN_IN_AND_SIGN_UP,
            admin_role=settings.WAITLIST_ADMIN_ROLE,
            default_page_size=settings.WAITLIST_DEFAULT_PAGE_SIZE,
            max_page_size=settings.WAITLIST_MAX_PAGE_SIZE,
            **callbacks,
        )


async def call_hook(hook: Callable[..., Any], *args: Any) -> Any:
    """Call a sync or async callback and return its (awaited) result."""
    result = hook(*args)
    if inspect.isawaitable(result):
        result = await result
    return result


def normalize_email(email: str) -> str:
    return email.strip().lower()


def mask_email(email: str) -> str:
    """Log-safe form of an address: first character of the local part plus the domain."""
    local, sep, domain = email.partition("@")
    if not local:
        return "***" + sep + domain
    return local[0] + "***" + sep + domain
