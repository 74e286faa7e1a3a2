"""
Tests for the role table endpoint and role assignment.
"""

from fastapi.testclient import TestClient

from app.cache.keys import EntityKind, detail_key
from app.core.ids import new_object_id
from app.core.security import decode_access_token
from app.schemas.user import UserDetails
from tests.utils import API, FakeRedis, auth_header, login


def test_list_roles(client: TestClient, sub_admin_token: str) -> None:
    response = client.get(f"{API}/roles", headers=auth_header(sub_admin_token))
    assert response.status_code == 200
    data = response.json()["data"]
    assert set(data) == {"master_admin", "sub_admin", "user"}
    assert "assign:role" in data["master_admin"]
    assert "delete:product" not in data["sub_admin"]
    assert data["user"] == sorted(data["user"])


def test_list_roles_forbidden_for_user(client: TestClient, user_token: str) -> None:
    response = client.get(f"{API}/roles", headers=auth_header(user_token))
    assert response.status_code == 403


def test_assign_role(
    client: TestClient, admin_token: str, test_user: UserDetails, fake_redis: FakeRedis
) -> None:
    headers = auth_header(admin_token)
    client.get(f"{API}/user/{test_user.user.id}", headers=headers)
    client.get(f"{API}/users", headers=headers)

    response = client.post(
        f"{API}/roles",
        json={"user_id": test_user.user.id, "role": "sub_admin"},
        headers=headers,
    )
    assert response.status_code == 200
    body = response.json()
    assert body["message"] == "User role updated successfully"
    assert body["data"]["role"] == "sub_admin"

    assert detail_key(EntityKind.USER, test_user.user.id) not in fake_redis.data
    assert not any(k.startswith("users:") for k in fake_redis.data)

    token = login(client, "test@example.com", "testpassword123")
    assert decode_access_token(token).role.value == "sub_admin"


def test_new_role_grants_permissions_after_login(
    client: TestClient, admin_token: str, test_user: UserDetails
) -> None:
    client.post(
        f"{API}/roles",
        json={"user_id": test_user.user.id, "role": "sub_admin"},
        headers=auth_header(admin_token),
    )
    token = login(client, "test@example.com", "testpassword123")
    assert client.get(f"{API}/users", headers=auth_header(token)).status_code == 200


def test_sub_admin_cannot_assign_roles(
    client: TestClient, sub_admin_token: str, test_user: UserDetails
) -> None:
    response = client.post(
        f"{API}/roles",
        json={"user_id": test_user.user.id, "role": "master_admin"},
        headers=auth_header(sub_admin_token),
    )
    assert response.status_code == 403


def test_user_cannot_promote_self(client: TestClient, user_token: str, test_user: UserDetails) -> None:
    response = client.post(
        f"{API}/roles",
        json={"user_id": test_user.user.id, "role": "master_admin"},
        headers=auth_header(user_token),
    )
    assert response.status_code == 403

    token = login(client, "test@example.com", "testpassword123")
    assert decode_access_token(token).role.value == "user"


def test_assign_unknown_role(client: TestClient, admin_token: str, test_user: UserDetails) -> None:
    response = client.post(
        f"{API}/roles",
        json={"user_id": test_user.user.id, "role": "superuser"},
        headers=auth_header(admin_token),
    )
    assert response.status_code == 400
    assert response.json()["errors"][0]["field"] == "role"


def test_assign_role_invalid_user_id(client: TestClient, admin_token: str) -> None:
    response = client.post(
        f"{API}/roles",
        json={"user_id": "123", "role": "user"},
        headers=auth_header(admin_token),
    )
    assert response.status_code == 400


def test_assign_role_unknown_user(client: TestClient, admin_token: str) -> None:
    response = client.post(
        f"{API}/roles",
        json={"user_id": new_object_id(), "role": "user"},
        headers=auth_header(admin_token),
    )
    assert response.status_code == 404
    assert response.json()["message"] == "User not found"
