"""
Tests for cache key builders.
"""

from fnmatch import fnmatchcase

from app.cache.keys import EntityKind, all_key, detail_key, list_key, list_pattern
from app.schemas.common import ListQuery


def test_detail_keys() -> None:
    assert detail_key(EntityKind.USER, "abc") == "user:abc"
    assert detail_key(EntityKind.PRODUCT, "abc") == "product:abc"


def test_list_key_encodes_every_parameter() -> None:
    query = ListQuery(page=2, limit=5, search="pen", sort="price_desc", filter_value="stationery")
    assert list_key(EntityKind.PRODUCT, query) == "products:p2:l5:catstationery:qpen:sortprice_desc"


def test_distinct_queries_get_distinct_keys() -> None:
    base = ListQuery(page=1, limit=10)
    variants = [
        base,
        base.model_copy(update={"page": 2}),
        base.model_copy(update={"limit": 20}),
        base.model_copy(update={"search": "x"}),
        base.model_copy(update={"sort": "name_desc"}),
        base.model_copy(update={"filter_value": "user"}),
    ]
    keys = {list_key(EntityKind.USER, q) for q in variants}
    assert len(keys) == len(variants)


def test_list_pattern_covers_lists_but_not_details() -> None:
    pattern = list_pattern(EntityKind.USER)
    assert fnmatchcase(list_key(EntityKind.USER, ListQuery()), pattern)
    assert fnmatchcase(all_key(EntityKind.USER), pattern)
    assert not fnmatchcase(detail_key(EntityKind.USER, "abc"), pattern)
    assert not fnmatchcase(list_key(EntityKind.PRODUCT, ListQuery()), pattern)


def test_separators_in_free_text_cannot_collide() -> None:
    a = ListQuery(search="Pen:sortprice_desc", sort="")
    b = ListQuery(search="Pen", sort="price_desc:sort")
    assert list_key(EntityKind.PRODUCT, a) != list_key(EntityKind.PRODUCT, b)

    c = ListQuery(filter_value="x:qy")
    d = ListQuery(filter_value="x", search="y")
    assert list_key(EntityKind.PRODUCT, c) != list_key(EntityKind.PRODUCT, d)


def test_free_text_is_percent_encoded() -> None:
    query = ListQuery(search="50% off*", filter_value="a:b")
    key = list_key(EntityKind.PRODUCT, query)
    assert key == "products:p1:l10:cata%3Ab:q50%25%20off%2A:sort"
    assert fnmatchcase(key, list_pattern(EntityKind.PRODUCT))
