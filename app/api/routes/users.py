"""
User routes: listing, detail, partial update and delete.
Every route requires a bearer token and a permission; detail and update
also apply the self-or-privileged rule before touching cache or store.
"""

from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Response, status

from app.api.deps import authenticated_body, ensure_self_or_privileged, get_user_service, require_permission
from app.api.responses import ERROR_RESPONSES, mark_cache
from app.core.permissions import Permission
from app.schemas.common import ApiResponse, ErrorResponse, ListQuery, PaginatedResponse, PaginationInfo
from app.schemas.token import TokenClaims
from app.schemas.user import UserDetails, UserPublic, UserUpdate
from app.services.user_service import UserService

router = APIRouter(
    tags=["users"],
    responses={**ERROR_RESPONSES, 409: {"model": ErrorResponse, "description": "Email already in use"}},
)

UserServiceDep = Annotated[UserService, Depends(get_user_service)]


@router.get("/users", response_model=PaginatedResponse[UserPublic])
def list_users(
    response: Response,
    users: UserServiceDep,
    _: Annotated[TokenClaims, Depends(require_permission(Permission.LIST_USERS))],
    page: Optional[str] = None,
    limit: Optional[str] = None,
    role: Optional[str] = None,
    search: Optional[str] = None,
    sort: Optional[str] = None,
) -> PaginatedResponse[UserPublic]:
    """
    List users with optional role filter, name/email search and sorting.
    Sort values: name_asc (default), name_desc, email_asc, email_desc.
    """
    query = ListQuery.from_params(page=page, limit=limit, search=search, sort=sort, filter_value=role)
    fetched = users.get_page(query)
    mark_cache(response, fetched.from_cache)

    return PaginatedResponse[UserPublic](
        status=status.HTTP_200_OK,
        message="Users fetched from cache" if fetched.from_cache else "Users fetched successfully",
        data=fetched.value.items,
        pagination=PaginationInfo.build(query.page, query.limit, fetched.value.total),
    )


@router.get("/user/{user_id}", response_model=ApiResponse[UserDetails], response_model_exclude_none=True)
def get_user(
    user_id: str,
    response: Response,
    users: UserServiceDep,
    claims: Annotated[TokenClaims, Depends(require_permission(Permission.READ_USER))],
) -> ApiResponse[UserDetails]:
    """Get a user's full record. Plain users may only read themselves."""
    ensure_self_or_privileged(claims, user_id)
    fetched = users.get(user_id)
    mark_cache(response, fetched.from_cache)

    return ApiResponse(
        status=status.HTTP_200_OK,
        message="User details fetched from cache" if fetched.from_cache else "User details fetched successfully",
        data=fetched.value,
    )


@router.put("/user/{user_id}", response_model=ApiResponse[UserDetails], response_model_exclude_none=True)
def update_user(
    user_id: str,
    users: UserServiceDep,
    claims: Annotated[TokenClaims, Depends(require_permission(Permission.UPDATE_USER))],
    user_in: Annotated[UserUpdate, Depends(authenticated_body(UserUpdate))],
) -> ApiResponse[UserDetails]:
    """
    Partially update a user. Only supplied fields change; role cannot be
    changed here (see POST /roles).
    """
    ensure_self_or_privileged(claims, user_id)
    user = users.update(user_id, user_in.changes())
    return ApiResponse(status=status.HTTP_200_OK, message="User updated successfully", data=user)


@router.delete("/user/{user_id}", response_model=ApiResponse[None], response_model_exclude_none=True)
def delete_user(
    user_id: str,
    users: UserServiceDep,
    _: Annotated[TokenClaims, Depends(require_permission(Permission.DELETE_USER))],
) -> ApiResponse[None]:
    """Delete a user by id."""
    users.delete(user_id)
    return ApiResponse(status=status.HTTP_200_OK, message="User successfully deleted")
