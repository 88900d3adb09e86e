import logging
from datetime import datetime, timezone
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from sqlmodel import Session

from core.deps import get_current_user, require_permission
from core.policy import Operation
from db.session import get_session
from models.user import RoleUpdateRequest, User, WorkerProfile

logger = logging.getLogger(__name__)

router = APIRouter()


def _load_user(session: Session, uid: str) -> User:
    user = session.get(User, uid)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User profile not found",
        )
    return user


@router.get("/user", response_model=WorkerProfile)
def get_own_profile(
    current_user: Annotated[dict, Depends(get_current_user)],
    session: Session = Depends(get_session),
):
    return _load_user(session, current_user["uid"])


# Self-service role switch; there is no separate admin role
@router.post("/role", response_model=WorkerProfile)
def update_own_role(
    payload: RoleUpdateRequest,
    current_user: Annotated[dict, Depends(require_permission(Operation.UPDATE_OWN_ROLE))],
    session: Session = Depends(get_session),
):
    user = _load_user(session, current_user["uid"])

    logger.info(f"User {user.id} changed role {user.role.value} -> {payload.role.value}")
    user.role = payload.role
    user.updated_at = datetime.now(timezone.utc)

    session.add(user)
    session.commit()
    session.refresh(user)
    return user
