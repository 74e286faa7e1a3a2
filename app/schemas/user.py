"""
User schemas for API request/response validation.
Separates the stored document from API contracts; the password hash never
appears in any response schema.
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, EmailStr, Field

from app.core.ids import OBJECT_ID_PATTERN
from app.core.permissions import Role
from app.models.user import User

PHONE_PATTERN = r"^\+[1-9]\d{1,14}$"  # E.164


class Gender(str, Enum):
    MALE = "male"
    FEMALE = "female"
    OTHER = "other"


class UserCreate(BaseModel):
    """Schema for signup. Role is never accepted here."""

    name: str = Field(min_length=2, max_length=50)
    email: EmailStr
    password: str = Field(min_length=6, max_length=72)
    gender: Optional[Gender] = None
    age: Optional[int] = Field(default=None, ge=0, le=150)
    address: Optional[str] = Field(default=None, max_length=255)
    phone: Optional[str] = Field(default=None, pattern=PHONE_PATTERN)


class UserUpdate(BaseModel):
    """
    Schema for partial updates.
    Only fields present in the payload are validated and written.
    """

    name: Optional[str] = Field(default=None, min_length=2, max_length=100)
    email: Optional[EmailStr] = None
    password: Optional[str] = Field(default=None, min_length=6, max_length=72)
    gender: Optional[Gender] = None
    age: Optional[int] = Field(default=None, ge=0, le=150)
    address: Optional[str] = Field(default=None, max_length=255)
    phone: Optional[str] = Field(default=None, pattern=PHONE_PATTERN)

    def changes(self) -> dict:
        """Supplied, non-null fields only."""
        return self.model_dump(exclude_unset=True, exclude_none=True, mode="json")


class UserLogin(BaseModel):
    """Schema for user login."""

    email: EmailStr
    password: str = Field(min_length=1)


class UserPublic(BaseModel):
    """Base user record used in listings, login and role responses."""

    id: str
    name: str
    email: str
    role: Role

    model_config = {"from_attributes": True}


class UserDetails(BaseModel):
    """
    Full user record.
    Composes the base record with the profile fields instead of extending it.
    """

    user: UserPublic
    gender: Optional[str] = None
    age: Optional[int] = None
    address: Optional[str] = None
    phone: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_model(cls, user: User) -> "UserDetails":
        return cls(
            user=UserPublic.model_validate(user),
            gender=user.gender,
            age=user.age,
            address=user.address,
            phone=user.phone,
            created_at=user.created_at,
            updated_at=user.updated_at,
        )


class RoleAssignment(BaseModel):
    """Schema for assigning a role to an existing user."""

    user_id: str = Field(pattern=OBJECT_ID_PATTERN)
    role: Role
