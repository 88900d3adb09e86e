from .facility import FacilityConfiguration
from .shift_record import PunchRequest, ShiftRecord
from .user import User, UserRole
