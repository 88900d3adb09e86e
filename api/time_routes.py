from datetime import datetime
from typing import Annotated, List, Optional

from fastapi import APIRouter, Depends
from sqlmodel import Session

from core.deps import require_permission
from core.policy import Operation
from db.session import get_session
from models.shift_record import PunchRequest, ShiftRecordRead
from services.analytics_service import AnalyticsService, HoursSummary
from services.punch_service import PunchService
from services.shift_service import ShiftService

# Defines API Endpoints
router = APIRouter()


# Clock In Endpoint
@router.post("/clock-in")
def clock_in(
    data: PunchRequest,
    user: Annotated[dict, Depends(require_permission(Operation.CLOCK_IN))],
    session: Session = Depends(get_session),
):
    record = PunchService.clock_in(session, worker_id=user["uid"], data=data)
    return {"status": "success", "data": ShiftRecordRead.model_validate(record)}


# Clock Out Endpoint
@router.post("/clock-out")
def clock_out(
    data: PunchRequest,
    user: Annotated[dict, Depends(require_permission(Operation.CLOCK_OUT))],
    session: Session = Depends(get_session),
):
    record = PunchService.clock_out(session, worker_id=user["uid"], data=data)
    return {"status": "success", "data": ShiftRecordRead.model_validate(record)}


# Current Open Shift (null when clocked out)
@router.get("/active-record", response_model=Optional[ShiftRecordRead])
def get_active_record(
    user: Annotated[dict, Depends(require_permission(Operation.VIEW_OWN_SHIFTS))],
    session: Session = Depends(get_session),
):
    return ShiftService.get_open_shift(session, user["uid"])


@router.get("/records", response_model=List[ShiftRecordRead])
def get_time_records(
    user: Annotated[dict, Depends(require_permission(Operation.VIEW_OWN_SHIFTS))],
    session: Session = Depends(get_session),
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
):
    """
    Retrieves the caller's shifts, newest first. Pass both start and end
    (ISO-8601) to restrict to shifts opened within that range.
    """
    return ShiftService.list_shifts(session, user["uid"], start, end)


@router.get("/hours", response_model=HoursSummary)
def get_hours_worked(
    start: datetime,
    end: datetime,
    user: Annotated[dict, Depends(require_permission(Operation.VIEW_OWN_SHIFTS))],
    session: Session = Depends(get_session),
):
    return AnalyticsService.total_hours(session, user["uid"], start, end)
