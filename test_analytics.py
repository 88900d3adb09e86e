from datetime import date, datetime, timedelta, timezone

import pytest

from core.errors import InvalidRange
from models.shift_record import ShiftRecord
from services.analytics_service import AnalyticsService


def utc(*args):
    return datetime(*args, tzinfo=timezone.utc)


@pytest.fixture
def history(session, worker, other_worker, clock):
    # clock.now is 2026-03-10 18:00 UTC, 14:00 in New York (EDT)
    shifts = [
        # today: 4h closed
        ShiftRecord(worker_id=worker.id, opened_at=utc(2026, 3, 10, 13), closed_at=utc(2026, 3, 10, 17), is_open=False),
        # today: still open, 2h so far
        ShiftRecord(worker_id=other_worker.id, opened_at=utc(2026, 3, 10, 16), is_open=True),
        # yesterday: 8h
        ShiftRecord(worker_id=worker.id, opened_at=utc(2026, 3, 9, 14), closed_at=utc(2026, 3, 9, 22), is_open=False),
        # 23:00 New York on the 9th, already the 10th in UTC: 2h
        ShiftRecord(worker_id=worker.id, opened_at=utc(2026, 3, 10, 3), closed_at=utc(2026, 3, 10, 5), is_open=False),
    ]
    session.add_all(shifts)
    session.commit()
    return shifts


def test_currently_clocked_in(session, history):
    assert AnalyticsService.currently_clocked_in(session) == 1


def test_daily_checkins_use_facility_calendar_day(session, history):
    assert AnalyticsService.daily_checkins(session, date(2026, 3, 10)) == 2
    assert AnalyticsService.daily_checkins(session, date(2026, 3, 9)) == 2
    assert AnalyticsService.daily_checkins(session, date(2026, 3, 8)) == 0


def test_average_hours_counts_open_shifts_up_to_now(session, history):
    average = AnalyticsService.average_hours(session, utc(2026, 3, 10, 4), utc(2026, 3, 10, 23))
    assert average == pytest.approx(3.0)


def test_average_hours_with_no_shifts_is_zero(session, history):
    assert AnalyticsService.average_hours(session, utc(2025, 1, 1), utc(2025, 1, 2)) == 0.0


def test_total_hours_for_one_worker(session, worker, history):
    summary = AnalyticsService.total_hours(session, worker.id, utc(2026, 3, 9), utc(2026, 3, 10, 23, 59))

    assert summary.total_hours == pytest.approx(14.0)
    assert summary.shift_count == 3


def test_total_hours_rejects_inverted_range(session, worker):
    with pytest.raises(InvalidRange):
        AnalyticsService.total_hours(session, worker.id, utc(2026, 3, 10), utc(2026, 3, 9))


def test_manager_summary(session, history):
    summary = AnalyticsService.manager_summary(session)

    assert summary.currently_clocked_in == 1
    assert summary.daily_checkins == 2
    assert summary.yesterday_checkins == 2
    assert summary.avg_hours_today == 3.0


def test_manager_summary_moves_with_the_clock(session, history, clock):
    clock.now = clock.now + timedelta(days=1)

    summary = AnalyticsService.manager_summary(session)

    assert summary.daily_checkins == 0
    assert summary.yesterday_checkins == 2
    assert summary.avg_hours_today == 0.0
