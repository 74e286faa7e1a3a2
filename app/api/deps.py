"""
API dependencies for FastAPI dependency injection.
Provides the store/cache handles, the authentication guard, the
authorization guards and the authenticated body parser used by the routers.
"""

from typing import Annotated, Awaitable, Callable, Optional, TypeVar

from fastapi import Depends, Header, Request
from pydantic import BaseModel, ValidationError
from sqlmodel import Session

from app.cache.store import CacheStore
from app.core.exception_handlers import field_errors
from app.core.exceptions import BadRequestError, ForbiddenError, UnauthorizedError, ValidationFailedError
from app.core.logging import get_logger
from app.core.permissions import PRIVILEGED_ROLES, Permission, Role, has_permission
from app.core.security import decode_access_token
from app.db.session import get_session
from app.schemas.token import TokenClaims
from app.services.product_service import ProductService
from app.services.user_service import UserService

logger = get_logger(__name__)

BodyT = TypeVar("BodyT", bound=BaseModel)


def get_cache(request: Request) -> CacheStore:
    """Cache store created in the application lifespan."""
    return request.app.state.cache


SessionDep = Annotated[Session, Depends(get_session)]
CacheDep = Annotated[CacheStore, Depends(get_cache)]


def get_user_service(session: SessionDep, cache: CacheDep) -> UserService:
    return UserService(session, cache)


def get_product_service(session: SessionDep, cache: CacheDep) -> ProductService:
    return ProductService(session, cache)


def get_current_claims(
    authorization: Annotated[Optional[str], Header()] = None,
) -> TokenClaims:
    """
    Authenticate the request from its bearer token.

    Args:
        authorization: Raw Authorization header

    Returns:
        Verified claims of the caller

    Raises:
        UnauthorizedError: Header missing or malformed, token invalid or expired
    """
    if not authorization:
        raise UnauthorizedError("Authorization header is required")

    parts = authorization.split()
    if len(parts) != 2 or parts[0].lower() != "bearer":
        raise UnauthorizedError("Invalid authorization header format")

    try:
        return decode_access_token(parts[1])
    except UnauthorizedError as e:
        logger.warning(f"JWT validation failed: {e.message}")
        raise


ClaimsDep = Annotated[TokenClaims, Depends(get_current_claims)]


def require_permission(permission: Permission) -> Callable[[TokenClaims], TokenClaims]:
    """
    Dependency factory: the caller's role must hold ``permission``.

    Usage:
        claims: Annotated[TokenClaims, Depends(require_permission(Permission.READ_USER))]
    """

    def _check(claims: ClaimsDep) -> TokenClaims:
        if not has_permission(claims.role, permission):
            logger.warning(f"User {claims.sub} ({claims.role.value}) lacks {permission.value}")
            raise ForbiddenError("Insufficient permissions")
        return claims

    return _check


def require_roles(*roles: Role) -> Callable[[TokenClaims], TokenClaims]:
    """Dependency factory: the caller's role must be one of ``roles``."""
    allowed = frozenset(roles)

    def _check(claims: ClaimsDep) -> TokenClaims:
        if claims.role not in allowed:
            logger.warning(f"User {claims.sub} ({claims.role.value}) not in {sorted(r.value for r in allowed)}")
            raise ForbiddenError("Insufficient role permissions")
        return claims

    return _check


def ensure_self_or_privileged(claims: TokenClaims, target_user_id: str) -> None:
    """
    Plain users may only act on their own record.

    Raises:
        ForbiddenError: A non-privileged caller targets another user
    """
    if claims.role not in PRIVILEGED_ROLES and claims.sub != target_user_id:
        logger.warning(f"User {claims.sub} denied access to user {target_user_id}")
        raise ForbiddenError("Access denied")


def authenticated_body(model: type[BodyT]) -> Callable[..., Awaitable[BodyT]]:
    """
    Dependency factory: the JSON body of a protected write, parsed as ``model``.

    The body is only read once the caller is authenticated, so an anonymous
    request gets 401 whatever it sends.

    Usage:
        product_in: Annotated[ProductCreate, Depends(authenticated_body(ProductCreate))]

    Raises:
        BadRequestError: Body is not valid JSON
        ValidationFailedError: Body does not satisfy ``model``
    """

    async def _parse(request: Request, _: ClaimsDep) -> BodyT:
        try:
            payload = await request.json()
        except ValueError:
            raise BadRequestError("Invalid request body")
        try:
            return model.model_validate(payload)
        except ValidationError as e:
            raise ValidationFailedError(field_errors(e.errors()))

    return _parse
