"""
Read-through / write-around repository logic shared by users and products.

Reads consult the cache first and populate it on a miss. Writes go to the
primary store only and then invalidate the entity's detail key plus every
cached listing of the kind. Invalidation runs after the commit and before
the caller gets its result; a cache failure there is logged, not raised.
"""

from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, ClassVar, Generic, Iterator, Optional, TypeVar

from pydantic import BaseModel, ValidationError
from sqlalchemy import func, or_
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, SQLModel, col, select

from app.cache.keys import EntityKind, all_key, detail_key, list_key, list_pattern
from app.cache.store import CacheStore
from app.core.config import settings
from app.core.exceptions import BadRequestError, InternalError, NotFoundError
from app.core.ids import is_valid_object_id
from app.core.logging import get_logger
from app.schemas.common import ListPage, ListQuery

logger = get_logger(__name__)

ModelT = TypeVar("ModelT", bound=SQLModel)
T = TypeVar("T")


@dataclass(frozen=True)
class Fetched(Generic[T]):
    """A read result and whether it was served from the cache."""

    value: T
    from_cache: bool


def _escape_like(term: str) -> str:
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class CachedEntityService(Generic[ModelT]):
    """
    CRUD service for one entity kind with cache-aside reads.

    Subclasses declare the model, the cache kind, the searchable and
    filterable fields, the named sort orders and how rows become response
    schemas.
    """

    kind: ClassVar[EntityKind]
    model: ClassVar[type[SQLModel]]
    detail_schema: ClassVar[type[BaseModel]]
    list_item_schema: ClassVar[type[BaseModel]]
    search_fields: ClassVar[tuple[str, ...]]
    filter_field: ClassVar[str]
    sort_orders: ClassVar[dict[str, tuple[str, bool]]]  # name -> (field, descending)
    default_sort: ClassVar[str] = "name_asc"

    def __init__(self, session: Session, cache: CacheStore):
        self.session = session
        self.cache = cache

    # -- conversion hooks -------------------------------------------------

    def to_detail(self, obj: Any) -> BaseModel:
        return self.detail_schema.model_validate(obj)

    def to_list_item(self, obj: Any) -> BaseModel:
        return self.list_item_schema.model_validate(obj)

    def prepare_changes(self, entity_id: str, changes: dict[str, Any]) -> dict[str, Any]:
        """Turn validated API fields into stored fields. Overridden for secrets."""
        return changes

    # -- helpers ----------------------------------------------------------

    @property
    def label(self) -> str:
        return self.kind.value.capitalize()

    def check_id(self, entity_id: str) -> None:
        if not is_valid_object_id(entity_id):
            raise BadRequestError(f"Invalid {self.kind.value} ID")

    @contextmanager
    def store_errors(self, action: str) -> Iterator[None]:
        """Roll back and report store failures as InternalError."""
        try:
            yield
        except SQLAlchemyError as e:
            logger.error(f"Store error while {action} {self.kind.value}: {e}")
            self.session.rollback()
            raise InternalError(f"Error {action} {self.kind.value}")

    def _cached(self, key: str, schema: type[BaseModel]) -> Optional[Any]:
        raw = self.cache.get(key)
        if raw is None:
            return None
        try:
            return schema.model_validate_json(raw)
        except ValidationError:
            logger.warning(f"Discarding undecodable cache entry {key}")
            self.cache.delete(key)
            return None

    def _page_schema(self) -> type[BaseModel]:
        return ListPage[self.list_item_schema]  # type: ignore[name-defined]

    def _conditions(self, query: ListQuery) -> list[Any]:
        conditions: list[Any] = []
        if query.filter_value:
            conditions.append(col(getattr(self.model, self.filter_field)) == query.filter_value)
        if query.search:
            pattern = f"%{_escape_like(query.search)}%"
            conditions.append(
                or_(
                    *(
                        col(getattr(self.model, field)).ilike(pattern, escape="\\")
                        for field in self.search_fields
                    )
                )
            )
        return conditions

    def resolve_sort(self, sort: str) -> str:
        """Map a requested sort to a known sort name, falling back to the default."""
        return sort if sort in self.sort_orders else self.default_sort

    def _order_by(self, sort: str) -> list[Any]:
        field, descending = self.sort_orders[self.resolve_sort(sort)]
        column = col(getattr(self.model, field))
        # id as tie-breaker keeps pages stable
        return [column.desc() if descending else column.asc(), col(getattr(self.model, "id")).asc()]

    def invalidate(self, entity_id: str) -> None:
        """Drop the detail entry and every list entry of this kind."""
        self.cache.delete(detail_key(self.kind, entity_id))
        self.cache.delete_pattern(list_pattern(self.kind))

    def _load(self, entity_id: str) -> Any:
        with self.store_errors("fetching"):
            obj = self.session.get(self.model, entity_id)
        if obj is None:
            raise NotFoundError(f"{self.label} not found")
        return obj

    # -- operations -------------------------------------------------------

    def get(self, entity_id: str) -> Fetched[Any]:
        """Read one entity by id, cache first."""
        self.check_id(entity_id)
        key = detail_key(self.kind, entity_id)

        cached = self._cached(key, self.detail_schema)
        if cached is not None:
            return Fetched(cached, from_cache=True)

        result = self.to_detail(self._load(entity_id))
        self.cache.set(key, result.model_dump_json(), settings.CACHE_DETAIL_TTL_SECONDS)
        return Fetched(result, from_cache=False)

    def get_page(self, query: ListQuery) -> Fetched[Any]:
        """Read one filtered, sorted page plus the total count, cache first."""
        query = query.model_copy(update={"sort": self.resolve_sort(query.sort)})
        key = list_key(self.kind, query)
        page_schema = self._page_schema()

        cached = self._cached(key, page_schema)
        if cached is not None:
            return Fetched(cached, from_cache=True)

        conditions = self._conditions(query)
        count_stmt = select(func.count()).select_from(self.model)
        stmt = select(self.model)
        if conditions:
            count_stmt = count_stmt.where(*conditions)
            stmt = stmt.where(*conditions)
        stmt = stmt.order_by(*self._order_by(query.sort)).offset(query.offset).limit(query.limit)

        with self.store_errors("listing"):
            total = self.session.exec(count_stmt).one()
            rows = self.session.exec(stmt).all()

        page = page_schema(items=[self.to_list_item(r) for r in rows], total=total)
        self.cache.set(key, page.model_dump_json(), settings.CACHE_LIST_TTL_SECONDS)
        return Fetched(page, from_cache=False)

    def insert(self, obj: ModelT) -> ModelT:
        """Insert a new row. The cache is left to populate on first read."""
        with self.store_errors("creating"):
            self.session.add(obj)
            self.session.commit()
            self.session.refresh(obj)
        logger.info(f"Created {self.kind.value} {obj.id}")  # type: ignore[attr-defined]
        return obj

    def update(self, entity_id: str, changes: dict[str, Any]) -> BaseModel:
        """
        Apply a partial update and return the stored result.

        Raises:
            BadRequestError: Invalid id or nothing to change
            NotFoundError: No entity with this id
        """
        self.check_id(entity_id)
        if not changes:
            raise BadRequestError("No fields to update")

        fields = self.prepare_changes(entity_id, changes)
        obj = self._load(entity_id)
        with self.store_errors("updating"):
            for name, value in fields.items():
                setattr(obj, name, value)
            obj.updated_at = datetime.now(timezone.utc)  # type: ignore[attr-defined]
            self.session.add(obj)
            self.session.commit()

        self.invalidate(entity_id)

        with self.store_errors("fetching"):
            self.session.refresh(obj)
        logger.info(f"Updated {self.kind.value} {entity_id}: {sorted(fields)}")
        return self.to_detail(obj)

    def delete(self, entity_id: str) -> None:
        """
        Hard-delete an entity.

        Raises:
            BadRequestError: Invalid id
            NotFoundError: No entity with this id
        """
        self.check_id(entity_id)
        obj = self._load(entity_id)
        with self.store_errors("deleting"):
            self.session.delete(obj)
            self.session.commit()

        self.invalidate(entity_id)
        logger.info(f"Deleted {self.kind.value} {entity_id}")

    def warm(self, ttl: int) -> int:
        """
        Write the full collection and every entity into the cache.

        Used by the cache refresher, independent of request traffic.

        Returns:
            Number of entities cached

        Raises:
            InternalError: The collection could not be read
        """
        with self.store_errors("loading"):
            rows = self.session.exec(select(self.model).order_by(*self._order_by(self.default_sort))).all()

        page = self._page_schema()(items=[self.to_list_item(r) for r in rows], total=len(rows))
        if not self.cache.set(all_key(self.kind), page.model_dump_json(), ttl):
            logger.warning(f"Skipping {self.kind.value} refresh, cache unavailable")
            return 0

        for row in rows:
            entity_id = row.id  # type: ignore[attr-defined]
            if not self.cache.set(detail_key(self.kind, entity_id), self.to_detail(row).model_dump_json(), ttl):
                logger.warning(f"Failed to refresh cache for {self.kind.value} {entity_id}")
        return len(rows)
