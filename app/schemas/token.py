"""
Token schemas for JWT authentication.
"""

from pydantic import BaseModel, Field

from app.core.ids import OBJECT_ID_PATTERN
from app.core.permissions import Role
from app.schemas.user import UserPublic


class TokenClaims(BaseModel):
    """
    Verified identity claims of a request.

    Built once from the decoded JWT payload in the authentication
    dependency; downstream code reads these typed fields only.
    """

    sub: str = Field(pattern=OBJECT_ID_PATTERN)
    role: Role
    exp: int

    @property
    def user_id(self) -> str:
        return self.sub


class LoginResponse(BaseModel):
    """Schema for a successful login."""

    token: str
    token_type: str = "bearer"
    user: UserPublic
