"""
Role routes: inspect the role table and assign roles.
Assignment is restricted to master admins on top of the permission check.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, status

from app.api.deps import authenticated_body, get_user_service, require_permission, require_roles
from app.api.responses import ERROR_RESPONSES
from app.core.logging import get_logger
from app.core.permissions import Permission, Role, describe_roles
from app.schemas.common import ApiResponse
from app.schemas.token import TokenClaims
from app.schemas.user import RoleAssignment, UserPublic
from app.services.user_service import UserService

logger = get_logger(__name__)

router = APIRouter(prefix="/roles", tags=["roles"], responses=ERROR_RESPONSES)


@router.get("", response_model=ApiResponse[dict[str, list[str]]])
def list_roles(
    _: Annotated[TokenClaims, Depends(require_permission(Permission.LIST_ROLES))],
) -> ApiResponse[dict[str, list[str]]]:
    """Return every role with its permissions."""
    return ApiResponse(status=status.HTTP_200_OK, message="Roles retrieved successfully", data=describe_roles())


@router.post(
    "",
    response_model=ApiResponse[UserPublic],
    dependencies=[Depends(require_roles(Role.MASTER_ADMIN))],
)
def assign_role(
    users: Annotated[UserService, Depends(get_user_service)],
    claims: Annotated[TokenClaims, Depends(require_permission(Permission.ASSIGN_ROLE))],
    assignment: Annotated[RoleAssignment, Depends(authenticated_body(RoleAssignment))],
) -> ApiResponse[UserPublic]:
    """Set the role of an existing user."""
    user = users.assign_role(assignment.user_id, assignment.role)
    logger.info(f"User {claims.sub} assigned role {assignment.role.value} to {assignment.user_id}")
    return ApiResponse(status=status.HTTP_200_OK, message="User role updated successfully", data=user)
