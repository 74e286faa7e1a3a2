"""
Cache key builders. Single place for key format.

Detail keys are ``{kind}:{id}``; list keys live under ``{kind}s:`` so one
pattern delete clears every cached listing of a kind without touching detail
keys. List keys encode page, page size, the categorical filter, the search
term and the sort name. Free-text parts are percent-encoded, so distinct
query shapes never share an entry.
"""

from enum import Enum
from urllib.parse import quote

from app.schemas.common import ListQuery


class EntityKind(str, Enum):
    USER = "user"
    PRODUCT = "product"


# Name of the categorical filter encoded in list keys, per kind
_FILTER_LABELS: dict[EntityKind, str] = {
    EntityKind.USER: "role",
    EntityKind.PRODUCT: "cat",
}


def _part(value: str) -> str:
    # ":" and glob characters are escaped so free text cannot forge another key
    return quote(value, safe="")


def _list_prefix(kind: EntityKind) -> str:
    return f"{kind.value}s"


def detail_key(kind: EntityKind, entity_id: str) -> str:
    """Cache key for a single entity."""
    return f"{kind.value}:{entity_id}"


def list_key(kind: EntityKind, query: ListQuery) -> str:
    """Cache key for one list query shape."""
    return (
        f"{_list_prefix(kind)}:p{query.page}:l{query.limit}"
        f":{_FILTER_LABELS[kind]}{_part(query.filter_value)}"
        f":q{_part(query.search)}:sort{_part(query.sort)}"
    )


def list_pattern(kind: EntityKind) -> str:
    """Match pattern covering every list entry of a kind."""
    return f"{_list_prefix(kind)}:*"


def all_key(kind: EntityKind) -> str:
    """Key of the full-collection entry written by the cache refresher."""
    return f"{_list_prefix(kind)}:all"
