from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel
from sqlmodel import Field, SQLModel


# The two roles a staff member can hold
class UserRole(str, Enum):
    WORKER = "worker"
    MANAGER = "manager"


# Local mirror of the identity provider's user, plus the role we authorize on
class User(SQLModel, table=True):
    __tablename__ = "users"

    id: str = Field(primary_key=True, description="Identity provider uid")
    email: Optional[str] = Field(default=None, unique=True)
    display_name: Optional[str] = None
    profile_image_url: Optional[str] = None
    role: UserRole = Field(default=UserRole.WORKER)
    department: Optional[str] = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


# Public slice of a user shown next to their shift on the roster
class WorkerProfile(SQLModel):
    id: str
    email: Optional[str] = None
    display_name: Optional[str] = None
    profile_image_url: Optional[str] = None
    department: Optional[str] = None
    role: UserRole


class RoleUpdateRequest(BaseModel):
    role: UserRole
