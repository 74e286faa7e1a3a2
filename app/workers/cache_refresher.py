"""
Periodic cache refresher.

Keeps hot data warm by re-reading the whole products and users collections
on a fixed interval and rewriting the full-list entries and every detail
entry. It runs on the APScheduler worker thread with its own sessions and
does not coordinate with request-driven invalidation: a tick that read a
row just before an update committed may re-cache the old value right after
the update invalidated it. Entries carry a TTL, so that window is bounded.
"""

from typing import Optional

from apscheduler.schedulers.background import BackgroundScheduler

from app.cache.store import CacheStore
from app.core.exceptions import InternalError
from app.core.logging import get_logger
from app.db.session import SessionFactory
from app.services.cached_service import CachedEntityService
from app.services.product_service import ProductService
from app.services.user_service import UserService

logger = get_logger(__name__)

JOB_ID = "cache-refresh"


class CacheRefresher:
    """
    Owns the refresh job and its scheduler.

    Args:
        session_factory: Opens a new primary-store session per collection
        cache: Shared cache store
        interval_seconds: Delay between ticks
        ttl_seconds: TTL of refreshed entries
    """

    services: tuple[type[CachedEntityService], ...] = (ProductService, UserService)

    def __init__(
        self,
        session_factory: SessionFactory,
        cache: CacheStore,
        interval_seconds: int,
        ttl_seconds: int,
    ) -> None:
        self.session_factory = session_factory
        self.cache = cache
        self.interval_seconds = interval_seconds
        self.ttl_seconds = ttl_seconds
        self._scheduler: Optional[BackgroundScheduler] = None

    def refresh_once(self) -> dict[str, int]:
        """
        Run one refresh tick.

        A failing collection is logged and skipped; the next tick retries.

        Returns:
            Entities cached per kind, for the collections that succeeded
        """
        refreshed: dict[str, int] = {}
        for service_cls in self.services:
            kind = service_cls.kind.value
            try:
                with self.session_factory() as session:
                    count = service_cls(session, self.cache).warm(self.ttl_seconds)
            except InternalError as e:
                logger.error(f"Cache refresh for {kind}s failed: {e.message}")
                continue
            refreshed[kind] = count
            logger.info(f"Refreshed cache for {count} {kind}s")
        return refreshed

    def start(self) -> None:
        """Schedule the interval job and start the background thread."""
        if self._scheduler is not None:
            return
        scheduler = BackgroundScheduler(daemon=True)
        scheduler.add_job(
            self.refresh_once,
            "interval",
            seconds=self.interval_seconds,
            id=JOB_ID,
            replace_existing=True,
            max_instances=1,
            coalesce=True,
        )
        scheduler.start()
        self._scheduler = scheduler
        logger.info(f"Cache refresher started (every {self.interval_seconds}s)")

    def shutdown(self) -> None:
        if self._scheduler is None:
            return
        self._scheduler.shutdown(wait=False)
        self._scheduler = None
        logger.info("Cache refresher stopped")

    @property
    def running(self) -> bool:
        return self._scheduler is not None and self._scheduler.running
