import logging
from math import isfinite
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session

from core.errors import InvalidConfig, NoFacilityConfigured
from models.facility import (
    CURRENT_FACILITY_ID,
    FacilityConfiguration,
    FacilityConfigurationWrite,
)
from utils.datetime_helpers import utc_now
from utils.geofence import COORDINATE_PRECISION

logger = logging.getLogger(__name__)


class FacilityService:

    @staticmethod
    def get(session: Session) -> Optional[FacilityConfiguration]:
        return session.get(FacilityConfiguration, CURRENT_FACILITY_ID)

    @staticmethod
    def require(session: Session) -> FacilityConfiguration:
        facility = FacilityService.get(session)
        if facility is None:
            raise NoFacilityConfigured()
        return facility

    @staticmethod
    def validate(config: FacilityConfigurationWrite) -> None:
        if not config.name or not config.name.strip():
            raise InvalidConfig("Facility name is required.")
        if not config.address or not config.address.strip():
            raise InvalidConfig("Facility address is required.")

        lat, lng = config.center_latitude, config.center_longitude
        if not (isfinite(lat) and -90.0 <= lat <= 90.0):
            raise InvalidConfig(f"Center latitude {lat} is outside [-90, 90].")
        if not (isfinite(lng) and -180.0 <= lng <= 180.0):
            raise InvalidConfig(f"Center longitude {lng} is outside [-180, 180].")

        radius = config.perimeter_radius_km
        if not (isfinite(radius) and radius > 0):
            raise InvalidConfig("Perimeter radius must be a positive number of kilometers.")

    @staticmethod
    def replace(
        session: Session, config: FacilityConfigurationWrite
    ) -> FacilityConfiguration:
        """
        Install config as the sole current facility.

        The singleton row is overwritten in a single transaction, so readers
        see either the previous configuration or this one. Every field is
        taken from config; nothing is merged from the old row.
        """
        FacilityService.validate(config)

        for attempt in range(2):
            facility = session.get(
                FacilityConfiguration, CURRENT_FACILITY_ID, with_for_update=True
            )
            now = utc_now()

            if facility is None:
                facility = FacilityConfiguration(
                    id=CURRENT_FACILITY_ID, version=1, created_at=now
                )
            else:
                facility.version += 1

            facility.name = config.name.strip()
            facility.address = config.address.strip()
            facility.center_latitude = round(config.center_latitude, COORDINATE_PRECISION)
            facility.center_longitude = round(config.center_longitude, COORDINATE_PRECISION)
            facility.perimeter_radius_km = config.perimeter_radius_km
            facility.updated_at = now

            session.add(facility)
            try:
                session.commit()
            except IntegrityError:
                # Lost the race to create the first row; retry as an update
                session.rollback()
                if attempt:
                    raise
                continue

            session.refresh(facility)
            logger.info(
                f"Facility configuration replaced: {facility.name} "
                f"(version {facility.version}, radius {facility.perimeter_radius_km} km)"
            )
            return facility
