import logging
from typing import Optional

from sqlmodel import Session

from core.errors import OutsidePerimeter
from models.shift_record import PunchRequest, ShiftRecord
from services.facility_service import FacilityService
from services.shift_service import ShiftService
from utils.geofence import GeofenceVerdict, evaluate, parse_coordinate

logger = logging.getLogger(__name__)


class PunchService:
    """Request-level clock in/out: validates input, checks the geofence, then drives the lifecycle."""

    @staticmethod
    def validate_location(
        session: Session, latitude: Optional[float], longitude: Optional[float]
    ) -> GeofenceVerdict:
        position = parse_coordinate(latitude, longitude)
        facility = FacilityService.require(session)
        return evaluate(position, facility)

    @staticmethod
    def clock_in(session: Session, worker_id: str, data: PunchRequest) -> ShiftRecord:
        # Location is re-checked here from the freshly reported position;
        # a prior client-side validation call is never trusted.
        position = parse_coordinate(data.latitude, data.longitude)
        facility = FacilityService.require(session)
        verdict = evaluate(position, facility)

        if not verdict.within_perimeter:
            logger.info(
                f"Clock-in refused for worker {worker_id}: {verdict.distance_km} km "
                f"from {facility.name} (radius {verdict.perimeter_radius_km} km)"
            )
            raise OutsidePerimeter(
                f"You are {verdict.distance_km} km from {facility.name}. "
                f"Clock-in is only allowed within {verdict.perimeter_radius_km} km."
            )

        return ShiftService.open_shift(
            session,
            worker_id=worker_id,
            position=position,
            label=data.location,
            note=data.note,
        )

    @staticmethod
    def clock_out(session: Session, worker_id: str, data: PunchRequest) -> ShiftRecord:
        # Clock-out is never blocked by distance; the position is only recorded
        position = None
        if data.latitude is not None or data.longitude is not None:
            position = parse_coordinate(data.latitude, data.longitude)

        return ShiftService.close_shift(
            session,
            worker_id=worker_id,
            position=position,
            label=data.location,
            note=data.note,
        )
