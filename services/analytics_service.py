from datetime import date, datetime, timedelta
from typing import List, Optional

from pydantic import BaseModel
from sqlalchemy import func
from sqlmodel import Session, select

from core.errors import InvalidRange
from models.shift_record import ShiftRecord
from utils import datetime_helpers
from utils.datetime_helpers import ensure_utc, local_day_bounds, local_today


class ManagerAnalytics(BaseModel):
    currently_clocked_in: int
    avg_hours_today: float
    daily_checkins: int
    yesterday_checkins: int


class HoursSummary(BaseModel):
    start: datetime
    end: datetime
    total_hours: float
    shift_count: int


def _shift_hours(record: ShiftRecord, now: datetime) -> float:
    # Open shifts count up to now
    end = ensure_utc(record.closed_at) if record.closed_at else now
    return max(0.0, (end - ensure_utc(record.opened_at)).total_seconds() / 3600.0)


def _records_opened_between(
    session: Session, start: datetime, end: datetime, worker_id: Optional[str] = None
) -> List[ShiftRecord]:
    if start > end:
        raise InvalidRange("Range start must not be after range end.")
    query = (
        select(ShiftRecord)
        .where(ShiftRecord.opened_at >= ensure_utc(start))
        .where(ShiftRecord.opened_at <= ensure_utc(end))
    )
    if worker_id is not None:
        query = query.where(ShiftRecord.worker_id == worker_id)
    return list(session.exec(query).all())


class AnalyticsService:

    @staticmethod
    def average_hours(session: Session, start: datetime, end: datetime) -> float:
        now = datetime_helpers.utc_now()
        records = _records_opened_between(session, start, end)
        if not records:
            return 0.0
        return sum(_shift_hours(r, now) for r in records) / len(records)

    @staticmethod
    def daily_checkins(session: Session, day: date) -> int:
        start, end = local_day_bounds(day)
        return session.exec(
            select(func.count())
            .select_from(ShiftRecord)
            .where(ShiftRecord.opened_at >= start)
            .where(ShiftRecord.opened_at <= end)
        ).one()

    @staticmethod
    def currently_clocked_in(session: Session) -> int:
        return session.exec(
            select(func.count())
            .select_from(ShiftRecord)
            .where(ShiftRecord.is_open == True)  # noqa: E712
        ).one()

    @staticmethod
    def total_hours(
        session: Session, worker_id: str, start: datetime, end: datetime
    ) -> HoursSummary:
        """Hours worked by one worker on shifts opened within [start, end]."""
        records = _records_opened_between(session, start, end, worker_id)
        now = datetime_helpers.utc_now()
        return HoursSummary(
            start=ensure_utc(start),
            end=ensure_utc(end),
            total_hours=round(sum(_shift_hours(r, now) for r in records), 2),
            shift_count=len(records),
        )

    @staticmethod
    def manager_summary(session: Session) -> ManagerAnalytics:
        today = local_today()
        yesterday = today - timedelta(days=1)
        day_start, day_end = local_day_bounds(today)

        return ManagerAnalytics(
            currently_clocked_in=AnalyticsService.currently_clocked_in(session),
            avg_hours_today=round(
                AnalyticsService.average_hours(session, day_start, day_end), 1
            ),
            daily_checkins=AnalyticsService.daily_checkins(session, today),
            yesterday_checkins=AnalyticsService.daily_checkins(session, yesterday),
        )
