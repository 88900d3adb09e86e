# Insert Default Facility
import os

from dotenv import load_dotenv
from sqlmodel import Session, SQLModel

from db.session import engine
from models.facility import DEFAULT_PERIMETER_RADIUS_KM, FacilityConfigurationWrite
from services.facility_service import FacilityService

load_dotenv()


def seed_facility():
    SQLModel.metadata.create_all(engine)

    with Session(engine) as session:
        # Never clobber a facility a manager already configured
        existing = FacilityService.get(session)
        if existing:
            print(f"Facility already configured: {existing.name}")
            return

        facility = FacilityService.replace(
            session,
            FacilityConfigurationWrite(
                name=os.getenv("SEED_FACILITY_NAME", "General Hospital"),
                address=os.getenv("SEED_FACILITY_ADDRESS", "1 Hospital Plaza, New York, NY"),
                center_latitude=float(os.getenv("SEED_FACILITY_LAT", "40.7128")),
                center_longitude=float(os.getenv("SEED_FACILITY_LNG", "-74.0060")),
                perimeter_radius_km=float(
                    os.getenv("SEED_FACILITY_RADIUS_KM", str(DEFAULT_PERIMETER_RADIUS_KM))
                ),
            ),
        )
        print(f"Added facility {facility.name} ({facility.perimeter_radius_km} km radius)")


if __name__ == "__main__":
    seed_facility()
