"""
Test helpers: an in-memory Redis double and request helpers.
"""

from fnmatch import fnmatchcase
from typing import Any, Iterator, Optional

import redis
from fastapi.testclient import TestClient

from app.core.config import settings

API = settings.API_V1_PREFIX


class FakeRedis:
    """In-memory stand-in for the subset of the redis client the cache uses."""

    def __init__(self) -> None:
        self.data: dict[str, str] = {}
        self.ttls: dict[str, int] = {}

    def ping(self) -> bool:
        return True

    def get(self, key: str) -> Optional[str]:
        return self.data.get(key)

    def setex(self, key: str, ttl: int, value: str) -> bool:
        self.data[key] = value
        self.ttls[key] = ttl
        return True

    def delete(self, *keys: str) -> int:
        removed = 0
        for key in keys:
            if self.data.pop(key, None) is not None:
                self.ttls.pop(key, None)
                removed += 1
        return removed

    def scan_iter(self, match: str = "*") -> Iterator[str]:
        return iter([k for k in list(self.data) if fnmatchcase(k, match)])

    def pipeline(self, transaction: bool = True) -> "FakePipeline":
        return FakePipeline(self)

    def close(self) -> None:
        pass


class FakePipeline:
    def __init__(self, client: FakeRedis) -> None:
        self.client = client
        self.calls: list[tuple[str, ...]] = []

    def unlink(self, *keys: str) -> "FakePipeline":
        self.calls.append(keys)
        return self

    def execute(self) -> list[int]:
        return [self.client.delete(*keys) for keys in self.calls]


class BrokenRedis:
    """Redis client whose every call fails as if the server were down."""

    def __getattr__(self, name: str) -> Any:
        def _fail(*args: Any, **kwargs: Any) -> Any:
            raise redis.ConnectionError("Connection refused")

        return _fail


def login(client: TestClient, email: str, password: str) -> str:
    response = client.post(f"{API}/login", json={"email": email, "password": password})
    assert response.status_code == 200, response.text
    return response.json()["data"]["token"]


def auth_header(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}
