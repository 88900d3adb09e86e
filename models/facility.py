from datetime import datetime, timezone
from typing import Optional

from pydantic import field_serializer
from sqlmodel import Field, SQLModel

from utils.datetime_helpers import format_utc_datetime

# Only one facility is geofenced at a time; it always lives in this row
CURRENT_FACILITY_ID = 1
DEFAULT_PERIMETER_RADIUS_KM = 2.0


# Fields a manager must supply in full when replacing the configuration
class FacilityConfigurationBase(SQLModel):
    name: str = Field(description="Facility display name")
    address: str = Field(description="Facility street address")
    center_latitude: float = Field(description="Latitude of facility center")
    center_longitude: float = Field(description="Longitude of facility center")
    perimeter_radius_km: float = Field(
        default=DEFAULT_PERIMETER_RADIUS_KM,
        description="Allowed clock-in radius in kilometers",
    )


# Facility w/ Circular Geofence
class FacilityConfiguration(FacilityConfigurationBase, table=True):
    __tablename__ = "facility_configuration"

    id: int = Field(default=CURRENT_FACILITY_ID, primary_key=True)
    version: int = Field(default=1)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class FacilityConfigurationWrite(FacilityConfigurationBase):
    pass


class FacilityConfigurationRead(FacilityConfigurationBase):
    version: int
    updated_at: Optional[datetime] = None

    @field_serializer("updated_at")
    def serialize_updated_at(self, dt: Optional[datetime]) -> Optional[str]:
        return format_utc_datetime(dt)
