from typing import Annotated, List

from fastapi import APIRouter, Depends
from sqlmodel import Session

from core.deps import require_permission
from core.policy import Operation
from db.session import get_session
from models.shift_record import RosterEntry, ShiftRecordRead
from models.user import WorkerProfile
from services.analytics_service import AnalyticsService, ManagerAnalytics
from services.shift_service import ShiftService

router = APIRouter()


# Everyone currently on shift, most recent clock-in first
@router.get("/active-staff", response_model=List[RosterEntry])
def list_active_staff(
    manager: Annotated[dict, Depends(require_permission(Operation.VIEW_ROSTER))],
    session: Session = Depends(get_session),
):
    return [
        RosterEntry(
            shift=ShiftRecordRead.model_validate(record),
            worker=WorkerProfile.model_validate(user),
        )
        for record, user in ShiftService.list_all_open_shifts(session)
    ]


@router.get("/analytics", response_model=ManagerAnalytics)
def get_analytics(
    manager: Annotated[dict, Depends(require_permission(Operation.VIEW_ANALYTICS))],
    session: Session = Depends(get_session),
):
    return AnalyticsService.manager_summary(session)
