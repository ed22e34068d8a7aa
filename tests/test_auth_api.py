"""Registration and login."""

from iam.core.config import settings
from iam.core.security import decode_access_token


async def test_register_returns_user_and_token(client, seeded):
    response = await client.post(
        "/api/auth/register",
        json={
            "username": "jdoe",
            "email": "jdoe@example.com",
            "password": "secret123",
            "firstName": "Jane",
        },
    )
    assert response.status_code == 201
    body = response.json()
    assert body["tokenType"] == "bearer"
    assert body["user"]["username"] == "jdoe"
    assert body["user"]["firstName"] == "Jane"
    assert body["user"]["isActive"] is True
    assert "passwordHash" not in body["user"]
    assert decode_access_token(body["token"])["sub"] == str(body["user"]["id"])


async def test_registered_user_starts_with_nothing(client, seeded):
    response = await client.post(
        "/api/auth/register",
        json={"username": "fresh", "email": "fresh@example.com", "password": "secret123"},
    )
    token = response.json()["token"]
    perms = await client.get("/api/me/permissions", headers={"Authorization": f"Bearer {token}"})
    assert perms.json() == []


async def test_register_duplicate_email_is_409(client, seeded):
    response = await client.post(
        "/api/auth/register",
        json={"username": "other", "email": settings.ADMIN_EMAIL, "password": "secret123"},
    )
    assert response.status_code == 409


async def test_register_duplicate_username_is_409(client, seeded):
    response = await client.post(
        "/api/auth/register",
        json={"username": settings.ADMIN_USERNAME, "email": "x@example.com", "password": "secret123"},
    )
    assert response.status_code == 409


async def test_register_validates_payload(client, seeded):
    response = await client.post(
        "/api/auth/register",
        json={"username": "ab", "email": "not-an-email", "password": "123"},
    )
    assert response.status_code == 422


async def test_login_admin(client, seeded):
    response = await client.post(
        "/api/auth/login",
        json={"email": settings.ADMIN_EMAIL, "password": settings.ADMIN_PASSWORD},
    )
    assert response.status_code == 200
    token = response.json()["token"]
    perms = await client.get("/api/me/permissions", headers={"Authorization": f"Bearer {token}"})
    assert len(perms.json()) == 24


async def test_login_wrong_password_is_401(client, seeded):
    response = await client.post(
        "/api/auth/login",
        json={"email": settings.ADMIN_EMAIL, "password": "nope"},
    )
    assert response.status_code == 401
    assert response.json() == {"detail": "Invalid email or password"}


async def test_login_unknown_email_is_401(client, seeded):
    response = await client.post(
        "/api/auth/login",
        json={"email": "ghost@example.com", "password": "whatever"},
    )
    assert response.status_code == 401
    assert response.json() == {"detail": "Invalid email or password"}


async def test_login_inactive_user_is_401(client, seeded, graph):
    await graph.user(email="sleepy@example.com", is_active=False, password="secret123")
    response = await client.post(
        "/api/auth/login",
        json={"email": "sleepy@example.com", "password": "secret123"},
    )
    assert response.status_code == 401
    assert response.json() == {"detail": "Account is deactivated"}
