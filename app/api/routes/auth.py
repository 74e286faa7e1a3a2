"""
Authentication routes for signup and login.
Provides JWT token-based authentication.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, status

from app.api.deps import get_user_service
from app.api.responses import ERROR_RESPONSES
from app.core.exceptions import UnauthorizedError
from app.core.logging import get_logger
from app.core.security import create_access_token
from app.schemas.common import ApiResponse, ErrorResponse
from app.schemas.token import LoginResponse
from app.schemas.user import UserCreate, UserDetails, UserLogin, UserPublic
from app.services.user_service import UserService

logger = get_logger(__name__)

router = APIRouter(
    tags=["auth"],
    responses={
        400: ERROR_RESPONSES[400],
        401: ERROR_RESPONSES[401],
        409: {"model": ErrorResponse, "description": "Email already registered"},
    },
)

UserServiceDep = Annotated[UserService, Depends(get_user_service)]


@router.post(
    "/signup",
    response_model=ApiResponse[UserDetails],
    response_model_exclude_none=True,
    status_code=status.HTTP_201_CREATED,
)
def signup(user_in: UserCreate, users: UserServiceDep) -> ApiResponse[UserDetails]:
    """
    Register a new user with the default role.

    Raises:
        ConflictError: If email already registered
    """
    user = users.create(user_in)
    logger.info(f"New user registered: {user.user.email} (ID: {user.user.id})")
    return ApiResponse(status=status.HTTP_201_CREATED, message="User created successfully", data=user)


@router.post("/login", response_model=ApiResponse[LoginResponse])
def login(credentials: UserLogin, users: UserServiceDep) -> ApiResponse[LoginResponse]:
    """
    Exchange email and password for an access token.

    Raises:
        UnauthorizedError: If credentials are invalid
    """
    user = users.authenticate(email=credentials.email, password=credentials.password)
    if not user:
        logger.warning(f"Failed login attempt for email: {credentials.email}")
        raise UnauthorizedError("Invalid email or password")

    token = create_access_token(subject=user.id, role=user.role)
    logger.info(f"User logged in: {user.email} (ID: {user.id})")

    return ApiResponse(
        status=status.HTTP_200_OK,
        message="Login successful",
        data=LoginResponse(token=token, user=UserPublic.model_validate(user)),
    )
