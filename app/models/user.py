"""
User document stored in the ``users`` collection.
"""

from datetime import datetime, timezone
from typing import Optional

from sqlmodel import Field, SQLModel

from app.core.ids import new_object_id
from app.core.permissions import Role


class User(SQLModel, table=True):
    """
    User record with credentials, role and optional profile fields.

    Attributes:
        id: Opaque 24-hex document id
        name: Display name
        email: Login address; uniqueness is checked on signup, not by the store
        password_hash: Salted password hash, never serialized outward
        role: One of the fixed roles
        gender, age, address, phone: Optional profile fields
        created_at: Timestamp of account creation
        updated_at: Timestamp of last update
    """

    __tablename__ = "users"  # type: ignore

    id: str = Field(default_factory=new_object_id, primary_key=True, max_length=24)
    name: str = Field(max_length=100)
    email: str = Field(index=True, max_length=255)
    password_hash: str
    role: str = Field(default=Role.USER.value, index=True, max_length=32)
    gender: Optional[str] = Field(default=None, max_length=16)
    age: Optional[int] = Field(default=None)
    address: Optional[str] = Field(default=None, max_length=255)
    phone: Optional[str] = Field(default=None, max_length=32)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
