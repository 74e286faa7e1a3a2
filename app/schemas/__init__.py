"""Pydantic schemas for request/response validation."""

from app.schemas.common import ApiResponse, ListPage, ListQuery, PaginatedResponse, PaginationInfo
from app.schemas.product import ProductCreate, ProductRead, ProductUpdate
from app.schemas.token import LoginResponse, TokenClaims
from app.schemas.user import RoleAssignment, UserCreate, UserDetails, UserLogin, UserPublic, UserUpdate

__all__ = [
    "ApiResponse",
    "ListPage",
    "ListQuery",
    "LoginResponse",
    "PaginatedResponse",
    "PaginationInfo",
    "ProductCreate",
    "ProductRead",
    "ProductUpdate",
    "RoleAssignment",
    "TokenClaims",
    "UserCreate",
    "UserDetails",
    "UserLogin",
    "UserPublic",
    "UserUpdate",
]
