from typing import Annotated, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlmodel import Session

from core.deps import require_permission
from core.policy import Operation
from db.session import get_session
from models.facility import FacilityConfigurationRead, FacilityConfigurationWrite
from services.facility_service import FacilityService
from services.punch_service import PunchService
from utils.geofence import GeofenceVerdict

router = APIRouter()


# --- Pydantic Models for Request Payloads ---

class LocationCheckRequest(BaseModel):
    latitude: float | None = None
    longitude: float | None = None


# --- API Endpoints ---

@router.post("/validate", response_model=GeofenceVerdict)
def validate_location(
    data: LocationCheckRequest,
    user: Annotated[dict, Depends(require_permission(Operation.VALIDATE_LOCATION))],
    session: Session = Depends(get_session),
):
    """
    Report how far the given position is from the facility and whether it
    falls inside the clock-in perimeter. Needs a session but no particular role.
    """
    return PunchService.validate_location(session, data.latitude, data.longitude)


# Open to unauthenticated callers so the client can draw the perimeter
@router.get("/settings", response_model=Optional[FacilityConfigurationRead])
def get_location_settings(session: Session = Depends(get_session)):
    return FacilityService.get(session)


@router.put("/settings", response_model=FacilityConfigurationRead)
def set_location_settings(
    config: FacilityConfigurationWrite,
    manager: Annotated[dict, Depends(require_permission(Operation.SET_FACILITY))],
    session: Session = Depends(get_session),
):
    """Replace the facility configuration wholesale. Manager only."""
    return FacilityService.replace(session, config)
