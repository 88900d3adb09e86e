import logging
from datetime import datetime, timezone
from typing import Annotated

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from core.firebase import verify_id_token
from core.policy import Operation, authorize
from db.session import get_session
from models.user import User

logger = logging.getLogger(__name__)

# Standard credentials exception
CREDENTIALS_EXCEPTION = HTTPException(
    status_code=status.HTTP_401_UNAUTHORIZED,
    detail="Could not validate credentials",
    headers={"WWW-Authenticate": "Bearer"},
)


def _caller_from_user(user: User) -> dict:
    return {
        "uid": user.id,
        "name": user.display_name or "",
        "email": user.email or "",
        "role": user.role.value if user.role else "",
        "department": user.department,
    }


# Verifies the Firebase token and syncs the local user row from its claims
def get_current_user(
    request: Request,
    session: Session = Depends(get_session),
) -> dict:

    # 1) Extract & Analyze Authorization Header
    auth_header = request.headers.get("Authorization", "")
    if not auth_header.startswith("Bearer "):
        raise CREDENTIALS_EXCEPTION
    token = auth_header.split(" ", 1)[1]

    # 2) Verify This Points to a Real User Account
    try:
        decoded = verify_id_token(token)
    except Exception as e:
        logger.info(f"Rejected bearer token: {e}")
        raise CREDENTIALS_EXCEPTION

    uid = decoded.get("uid")
    if not uid:
        raise CREDENTIALS_EXCEPTION

    # 3) Upsert the local profile; role is owned by our table, not the token
    user = _sync_user(session, uid, decoded)

    return _caller_from_user(user)


def _claimed_email(session: Session, user: User, claims: dict):
    email = claims.get("email", user.email)
    if not email or email == user.email:
        return email

    holder_id = session.exec(select(User.id).where(User.email == email)).first()
    if holder_id is not None and holder_id != user.id:
        logger.warning(f"Email {email} already belongs to user {holder_id}; not copying it to {user.id}")
        return user.email
    return email


def _sync_user(session: Session, uid: str, claims: dict) -> User:
    for attempt in range(2):
        user = session.get(User, uid)
        if user is None:
            user = User(id=uid)
            logger.info(f"Registering new user {uid}")

        user.email = _claimed_email(session, user, claims)
        user.display_name = claims.get("name", user.display_name)
        user.profile_image_url = claims.get("picture", user.profile_image_url)
        user.updated_at = datetime.now(timezone.utc)

        session.add(user)
        try:
            session.commit()
        except IntegrityError:
            # A parallel request registered this user first; retry as an update
            session.rollback()
            if attempt:
                raise
            continue

        session.refresh(user)
        return user


def require_permission(operation: Operation):
    """Build a dependency that resolves the caller and checks them against the policy table."""

    def dependency(current_user: Annotated[dict, Depends(get_current_user)]) -> dict:
        return authorize(current_user, operation)

    return dependency
