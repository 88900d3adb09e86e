import logging
from datetime import datetime
from typing import List, Optional, Tuple

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from core.errors import AlreadyOpen, InvalidRange, NoActiveShift
from models.shift_record import ShiftRecord
from models.user import User
from utils import datetime_helpers
from utils.datetime_helpers import ensure_utc
from utils.geofence import Coordinate

logger = logging.getLogger(__name__)


class ShiftService:
    """
    Open/closed lifecycle of a worker's shift records.

    A record is created OPEN by open_shift and moved to CLOSED exactly once
    by close_shift. Geofence checks are the caller's job.
    """

    @staticmethod
    def get_open_shift(session: Session, worker_id: str) -> Optional[ShiftRecord]:
        return session.exec(
            select(ShiftRecord)
            .where(ShiftRecord.worker_id == worker_id)
            .where(ShiftRecord.is_open == True)  # noqa: E712
            .order_by(ShiftRecord.opened_at.desc())
        ).first()

    @staticmethod
    def open_shift(
        session: Session,
        worker_id: str,
        position: Optional[Coordinate],
        label: Optional[str] = None,
        note: Optional[str] = None,
    ) -> ShiftRecord:
        if ShiftService.get_open_shift(session, worker_id) is not None:
            raise AlreadyOpen()

        record = ShiftRecord(
            worker_id=worker_id,
            opened_at=datetime_helpers.utc_now(),
            is_open=True,
            open_latitude=position.latitude if position else None,
            open_longitude=position.longitude if position else None,
            open_label=label,
            open_note=note,
        )
        session.add(record)

        # The partial unique index settles concurrent opens for the same worker
        try:
            session.commit()
        except IntegrityError:
            session.rollback()
            logger.info(f"Concurrent clock-in rejected for worker {worker_id}")
            raise AlreadyOpen()

        session.refresh(record)
        logger.info(f"Worker {worker_id} clocked in (shift {record.id})")
        return record

    @staticmethod
    def close_shift(
        session: Session,
        worker_id: str,
        position: Optional[Coordinate],
        label: Optional[str] = None,
        note: Optional[str] = None,
    ) -> ShiftRecord:
        record = ShiftService.get_open_shift(session, worker_id)
        if record is None:
            raise NoActiveShift()

        # Conditional on is_open so a concurrent clock-out cannot rewrite a closed record
        result = session.connection().execute(
            update(ShiftRecord)
            .where(ShiftRecord.id == record.id)
            .where(ShiftRecord.is_open == True)  # noqa: E712
            .values(
                closed_at=datetime_helpers.utc_now(),
                is_open=False,
                close_latitude=position.latitude if position else None,
                close_longitude=position.longitude if position else None,
                close_label=label,
                close_note=note,
            )
        )
        if result.rowcount == 0:
            session.rollback()
            logger.info(f"Concurrent clock-out rejected for worker {worker_id}")
            raise NoActiveShift()

        session.commit()
        session.refresh(record)
        logger.info(f"Worker {worker_id} clocked out (shift {record.id})")
        return record

    @staticmethod
    def list_shifts(
        session: Session,
        worker_id: str,
        range_start: Optional[datetime] = None,
        range_end: Optional[datetime] = None,
    ) -> List[ShiftRecord]:
        """Newest first; when both bounds are given, filter opened_at to [start, end]."""
        query = select(ShiftRecord).where(ShiftRecord.worker_id == worker_id)

        if range_start is not None or range_end is not None:
            if range_start is None or range_end is None:
                raise InvalidRange("Both start and end dates are required to filter by range.")
            range_start, range_end = ensure_utc(range_start), ensure_utc(range_end)
            if range_start > range_end:
                raise InvalidRange("Range start must not be after range end.")
            query = query.where(ShiftRecord.opened_at >= range_start).where(
                ShiftRecord.opened_at <= range_end
            )

        return list(session.exec(query.order_by(ShiftRecord.opened_at.desc())).all())

    @staticmethod
    def list_all_open_shifts(session: Session) -> List[Tuple[ShiftRecord, User]]:
        rows = session.exec(
            select(ShiftRecord, User)
            .join(User, ShiftRecord.worker_id == User.id)
            .where(ShiftRecord.is_open == True)  # noqa: E712
            .order_by(ShiftRecord.opened_at.desc())
        ).all()
        return [(record, user) for record, user in rows]
