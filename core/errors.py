from fastapi import HTTPException, status

# Business errors raised by the services and the policy gate. Each one carries
# its own status code so routes can let them propagate untouched.


class TimeclockError(HTTPException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Request could not be completed."

    def __init__(self, detail: str | None = None):
        super().__init__(
            status_code=self.status_code, detail=detail or self.default_detail
        )


# --- Policy violations ---


class Forbidden(TimeclockError):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = "User doesn't have sufficient privileges for this action"


class OutsidePerimeter(TimeclockError):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = "You must be within the facility perimeter to clock in."


# --- State conflicts ---


class AlreadyOpen(TimeclockError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Already clocked in"


class NoActiveShift(TimeclockError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "No active clock-in found"


# --- Configuration errors ---


class NoFacilityConfigured(TimeclockError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Location settings not configured"


class InvalidConfig(TimeclockError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Invalid facility configuration"


# --- Validation errors ---


class InvalidCoordinate(TimeclockError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Invalid coordinate"


class InvalidRange(TimeclockError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Invalid date range"
