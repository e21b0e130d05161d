import enum
import uuid
from datetime import datetime, timezone
from typing import Any, Optional

from sqlalchemy import JSON, DateTime, Enum as SAEnum, ForeignKey, String, event
from sqlalchemy.orm import Mapped, mapped_column

from waitlist_service.db.session import Base


class WaitlistStatus(str, enum.Enum):
    pending = "pending"
    approved = "approved"
    rejected = "rejected"


def _new_id() -> str:
    return uuid.uuid4().hex


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class WaitlistEntry(Base):
    __tablename__ = "waitlist_entries"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    status: Mapped[WaitlistStatus] = mapped_column(
        SAEnum(WaitlistStatus, name="waitlist_status"),
        nullable=False,
        default=WaitlistStatus.pending,
        index=True,
    )
    requested_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=_utcnow,
        nullable=False,
    )
    processed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    processed_by: Mapped[Optional[int]] = mapped_column(
        ForeignKey("users.id", ondelete="NO ACTION"),
        nullable=True,
    )

    # Extension field values, keyed by field name
    extra: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)

    def to_dict(self) -> dict[str, Any]:
        data = dict(self.extra or {})
        data.update(
            id=self.id,
            email=self.email,
            status=self.status,
            requested_at=self.requested_at,
            processed_at=self.processed_at,
            processed_by=self.processed_by,
        )
        return data


@event.listens_for(WaitlistEntry, "before_insert")
def _stamp_new_entry(mapper, connection, target: WaitlistEntry) -> None:
    """New entries always start pending and unprocessed."""
    target.status = WaitlistStatus.pending
    if target.requested_at is None:
        target.requested_at = _utcnow()
    target.processed_at = None
    target.processed_by = None
    if target.extra is None:
        target.extra = {}
