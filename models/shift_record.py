from datetime import datetime, timezone
from typing import Optional
from uuid import uuid4

from pydantic import BaseModel, field_serializer
from sqlalchemy import text
from sqlmodel import Field, Index, SQLModel

from models.user import WorkerProfile
from utils.datetime_helpers import format_utc_datetime


# Defines the Structure of Data for a Clock in / Clock out Call
class PunchRequest(BaseModel):
    latitude: float | None = None
    longitude: float | None = None
    location: str | None = None
    note: str | None = None


class ShiftRecordBase(SQLModel):
    worker_id: str = Field(foreign_key="users.id")
    opened_at: datetime
    closed_at: Optional[datetime] = None
    open_latitude: Optional[float] = None
    open_longitude: Optional[float] = None
    open_label: Optional[str] = None
    open_note: Optional[str] = None
    close_latitude: Optional[float] = None
    close_longitude: Optional[float] = None
    close_label: Optional[str] = None
    close_note: Optional[str] = None
    is_open: bool = Field(default=True)

    @field_serializer("opened_at", "closed_at")
    def serialize_timestamps(self, dt: Optional[datetime]) -> Optional[str]:
        """Ensure timestamps are formatted as UTC with Z suffix"""
        return format_utc_datetime(dt)


# One open/close cycle of a worker's attendance
class ShiftRecord(ShiftRecordBase, table=True):
    __tablename__ = "shift_record"

    __table_args__ = (
        # Status lookups: "is this worker clocked in?"
        Index("ix_shift_record_worker_id_is_open", "worker_id", "is_open"),
        # History and analytics scan by open time
        Index("ix_shift_record_worker_id_opened_at", "worker_id", "opened_at"),
        Index("ix_shift_record_opened_at", "opened_at"),
        # At most one open shift per worker, enforced by the database
        Index(
            "uq_shift_record_one_open_per_worker",
            "worker_id",
            unique=True,
            postgresql_where=text("is_open"),
            sqlite_where=text("is_open = 1"),
        ),
    )

    id: str = Field(default_factory=lambda: str(uuid4()), primary_key=True)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class ShiftRecordRead(ShiftRecordBase):
    id: str


# Row of the manager's "who is on shift now" view
class RosterEntry(SQLModel):
    shift: ShiftRecordRead
    worker: WorkerProfile
