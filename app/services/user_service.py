"""
User service layer implementing business logic for user operations.
Separates business logic from API routes and database operations.
"""

from typing import Any, Optional

from sqlmodel import select

from app.cache.keys import EntityKind
from app.core.exceptions import ConflictError
from app.core.logging import get_logger
from app.core.permissions import Role
from app.core.security import get_password_hash, verify_password
from app.models.user import User
from app.schemas.user import UserCreate, UserDetails, UserPublic
from app.services.cached_service import CachedEntityService

logger = get_logger(__name__)


class UserService(CachedEntityService[User]):
    """Users: search on name/email, exact filter on role."""

    kind = EntityKind.USER
    model = User
    detail_schema = UserDetails
    list_item_schema = UserPublic
    search_fields = ("name", "email")
    filter_field = "role"
    sort_orders = {
        "name_asc": ("name", False),
        "name_desc": ("name", True),
        "email_asc": ("email", False),
        "email_desc": ("email", True),
    }

    def to_detail(self, obj: Any) -> UserDetails:
        return UserDetails.from_model(obj)

    def get_by_email(self, email: str) -> Optional[User]:
        """
        Retrieve a user by email address.

        Args:
            email: Email address to search for

        Returns:
            User if found, None otherwise
        """
        with self.store_errors("fetching"):
            return self.session.exec(select(User).where(User.email == email)).first()

    def _ensure_email_free(self, email: str, user_id: Optional[str] = None) -> None:
        existing = self.get_by_email(email)
        if existing is not None and existing.id != user_id:
            logger.warning(f"Email already in use: {email}")
            raise ConflictError("User with this email already exists")

    def create(self, user_in: UserCreate, role: Role = Role.USER) -> UserDetails:
        """
        Create a new user with hashed password.

        Args:
            user_in: Signup data
            role: User role; signup always uses the default

        Returns:
            Created user, without the password hash

        Raises:
            ConflictError: If the email is already registered
        """
        self._ensure_email_free(user_in.email)
        fields = user_in.model_dump(exclude={"password"}, exclude_none=True, mode="json")
        user = User(
            **fields,
            password_hash=get_password_hash(user_in.password),
            role=role.value,
        )
        return self.to_detail(self.insert(user))

    def prepare_changes(self, entity_id: str, changes: dict[str, Any]) -> dict[str, Any]:
        fields = dict(changes)
        if "email" in fields:
            self._ensure_email_free(fields["email"], user_id=entity_id)
        if "password" in fields:
            fields["password_hash"] = get_password_hash(fields.pop("password"))
        return fields

    def assign_role(self, user_id: str, role: Role) -> UserPublic:
        """
        Change a user's role and invalidate its cached views.

        Raises:
            NotFoundError: If the user does not exist
        """
        details = self.update(user_id, {"role": role.value})
        logger.info(f"Role of user {user_id} set to {role.value}")
        return details.user  # type: ignore[attr-defined]

    def authenticate(self, email: str, password: str) -> Optional[User]:
        """
        Authenticate a user by email and password.

        Args:
            email: User's email
            password: Plain text password

        Returns:
            User if authentication successful, None otherwise
        """
        user = self.get_by_email(email)
        if not user:
            return None
        if not verify_password(password, user.password_hash):
            return None
        return user
