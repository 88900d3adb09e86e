import logging
from enum import Enum

from core.errors import Forbidden
from models.user import UserRole

logger = logging.getLogger(__name__)


# Every guarded action in the API
class Operation(str, Enum):
    VALIDATE_LOCATION = "validate_location"
    CLOCK_IN = "clock_in"
    CLOCK_OUT = "clock_out"
    VIEW_OWN_SHIFTS = "view_own_shifts"
    VIEW_FACILITY = "view_facility"
    UPDATE_OWN_ROLE = "update_own_role"
    SET_FACILITY = "set_facility"
    VIEW_ROSTER = "view_roster"
    VIEW_ANALYTICS = "view_analytics"


ALL_ROLES = frozenset(UserRole)
MANAGER_ONLY = frozenset({UserRole.MANAGER})

# Operation -> roles allowed to perform it
REQUIRED_ROLES: dict[Operation, frozenset[UserRole]] = {
    # Session-bound only; the role is never consulted
    Operation.VALIDATE_LOCATION: ALL_ROLES,
    Operation.CLOCK_IN: ALL_ROLES,
    Operation.CLOCK_OUT: ALL_ROLES,
    Operation.VIEW_OWN_SHIFTS: ALL_ROLES,
    Operation.VIEW_FACILITY: ALL_ROLES,
    Operation.UPDATE_OWN_ROLE: ALL_ROLES,
    Operation.SET_FACILITY: MANAGER_ONLY,
    Operation.VIEW_ROSTER: MANAGER_ONLY,
    Operation.VIEW_ANALYTICS: MANAGER_ONLY,
}


def authorize(caller: dict, operation: Operation) -> dict:
    """
    Check the caller's role against the policy table.

    Returns the caller unchanged so it can be used as a dependency result;
    raises Forbidden otherwise. Unknown roles are never allowed anything.
    """
    try:
        role = UserRole(caller.get("role"))
    except ValueError:
        role = None

    if role not in REQUIRED_ROLES[operation]:
        logger.info(
            f"Denied {operation.value} for user {caller.get('uid')} with role {caller.get('role')!r}"
        )
        raise Forbidden()

    return caller
