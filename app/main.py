"""
Main FastAPI application entry point.
Configures the application, middleware, routes, the cache store and the
background cache refresher.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlmodel import Session

from app.api.routes import auth, health, products, roles, users
from app.cache.store import CacheStore
from app.core.config import settings
from app.core.exception_handlers import register_exception_handlers
from app.core.exceptions import AppError
from app.core.logging import get_logger, setup_logging
from app.core.permissions import Role
from app.db.session import engine, init_db, session_factory
from app.schemas.user import UserCreate
from app.services.user_service import UserService
from app.workers.cache_refresher import CacheRefresher

setup_logging()
logger = get_logger(__name__)


def bootstrap_master_admin(cache: CacheStore) -> None:
    """Create the first master admin if no account uses its email yet."""
    with Session(engine) as session:
        users = UserService(session, cache)
        if users.get_by_email(settings.FIRST_SUPERUSER_EMAIL):
            return
        logger.info("Creating first master admin...")
        try:
            admin = users.create(
                UserCreate(
                    name=settings.FIRST_SUPERUSER_NAME,
                    email=settings.FIRST_SUPERUSER_EMAIL,
                    password=settings.FIRST_SUPERUSER_PASSWORD,
                ),
                role=Role.MASTER_ADMIN,
            )
        except AppError as e:
            logger.error(f"Failed to create master admin: {e.message}")
            logger.warning("Continuing without master admin. Role assignment will be unavailable.")
            return
        logger.info(f"Master admin created: {admin.user.email}")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan handler.
    Creates tables, wires the shared cache store and starts the refresher.
    """
    logger.info(f"Starting {settings.PROJECT_NAME} v{settings.VERSION}")

    logger.info("Creating database tables...")
    init_db(engine)

    cache = CacheStore.from_settings()
    if not cache.ping():
        logger.warning("Cache unavailable at startup; reads will fall back to the database")
    app.state.cache = cache

    if not settings.DISABLE_BOOTSTRAP_USERS:
        bootstrap_master_admin(cache)
    else:
        logger.info("User bootstrapping disabled (DISABLE_BOOTSTRAP_USERS=true)")

    refresher = CacheRefresher(
        session_factory=session_factory(engine),
        cache=cache,
        interval_seconds=settings.CACHE_REFRESH_INTERVAL_SECONDS,
        ttl_seconds=settings.CACHE_REFRESH_TTL_SECONDS,
    )
    if settings.CACHE_REFRESH_ENABLED:
        refresher.start()
    app.state.cache_refresher = refresher

    logger.info("Application startup complete")

    yield

    logger.info("Shutting down application...")
    refresher.shutdown()
    cache.close()


app = FastAPI(
    title=settings.PROJECT_NAME,
    version=settings.VERSION,
    openapi_url=f"{settings.API_V1_PREFIX}/openapi.json",
    docs_url=f"{settings.API_V1_PREFIX}/docs",
    redoc_url=f"{settings.API_V1_PREFIX}/redoc",
    lifespan=lifespan,
)

if settings.BACKEND_CORS_ORIGINS:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[str(origin).rstrip("/") for origin in settings.BACKEND_CORS_ORIGINS],
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["authorization", "content-type", "accept"],
        expose_headers=["X-Cache"],
    )

register_exception_handlers(app)

app.include_router(health.router, prefix=settings.API_V1_PREFIX)
app.include_router(auth.router, prefix=settings.API_V1_PREFIX)
app.include_router(users.router, prefix=settings.API_V1_PREFIX)
app.include_router(roles.router, prefix=settings.API_V1_PREFIX)
app.include_router(products.router, prefix=settings.API_V1_PREFIX)
