"""
Pytest configuration and fixtures.
Provides an in-memory database, an in-memory Redis double, a test client
and users/tokens for every role.
"""

import os

os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("CACHE_REFRESH_ENABLED", "false")
os.environ.setdefault("DISABLE_BOOTSTRAP_USERS", "true")
os.environ.setdefault("REDIS_SOCKET_TIMEOUT", "0.2")

from typing import Generator  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlmodel import Session, create_engine  # noqa: E402
from sqlmodel.pool import StaticPool  # noqa: E402

from app.api.deps import get_cache  # noqa: E402
from app.cache.store import CacheStore  # noqa: E402
from app.core.permissions import Role  # noqa: E402
from app.db.session import get_session, init_db  # noqa: E402
from app.main import app  # noqa: E402
from app.schemas.user import UserCreate, UserDetails  # noqa: E402
from app.services.product_service import ProductService  # noqa: E402
from app.services.user_service import UserService  # noqa: E402
from tests.utils import FakeRedis, login  # noqa: E402


@pytest.fixture(name="session")
def session_fixture() -> Generator[Session, None, None]:
    """
    Create a test database session.
    Uses an in-memory SQLite database for fast tests.
    """
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(engine)

    with Session(engine) as session:
        yield session


@pytest.fixture(name="fake_redis")
def fake_redis_fixture() -> FakeRedis:
    return FakeRedis()


@pytest.fixture(name="cache")
def cache_fixture(fake_redis: FakeRedis) -> CacheStore:
    return CacheStore(fake_redis)  # type: ignore[arg-type]


@pytest.fixture(name="client")
def client_fixture(session: Session, cache: CacheStore) -> Generator[TestClient, None, None]:
    """
    Create a test client with dependency overrides.
    """

    def get_session_override() -> Generator[Session, None, None]:
        yield session

    app.dependency_overrides[get_session] = get_session_override
    app.dependency_overrides[get_cache] = lambda: cache

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture(name="user_service")
def user_service_fixture(session: Session, cache: CacheStore) -> UserService:
    return UserService(session, cache)


@pytest.fixture(name="product_service")
def product_service_fixture(session: Session, cache: CacheStore) -> ProductService:
    return ProductService(session, cache)


def _create(users: UserService, name: str, email: str, password: str, role: Role) -> UserDetails:
    return users.create(UserCreate(name=name, email=email, password=password), role=role)


@pytest.fixture(name="test_user")
def test_user_fixture(user_service: UserService) -> UserDetails:
    return _create(user_service, "Test User", "test@example.com", "testpassword123", Role.USER)


@pytest.fixture(name="other_user")
def other_user_fixture(user_service: UserService) -> UserDetails:
    return _create(user_service, "Other User", "other@example.com", "otherpassword123", Role.USER)


@pytest.fixture(name="test_sub_admin")
def test_sub_admin_fixture(user_service: UserService) -> UserDetails:
    return _create(user_service, "Sub Admin", "sub@example.com", "subpassword123", Role.SUB_ADMIN)


@pytest.fixture(name="test_admin")
def test_admin_fixture(user_service: UserService) -> UserDetails:
    return _create(user_service, "Master Admin", "admin@example.com", "adminpassword123", Role.MASTER_ADMIN)


@pytest.fixture(name="user_token")
def user_token_fixture(client: TestClient, test_user: UserDetails) -> str:
    return login(client, "test@example.com", "testpassword123")


@pytest.fixture(name="sub_admin_token")
def sub_admin_token_fixture(client: TestClient, test_sub_admin: UserDetails) -> str:
    return login(client, "sub@example.com", "subpassword123")


@pytest.fixture(name="admin_token")
def admin_token_fixture(client: TestClient, test_admin: UserDetails) -> str:
    return login(client, "admin@example.com", "adminpassword123")
