"""Tests for login and staff administration"""

from httpx import AsyncClient


async def test_login_and_me(client: AsyncClient, test_user):
    response = await client.post(
        "/auth/login",
        data={"username": "staff@example.com", "password": "staffpass123"},
    )

    assert response.status_code == 200
    token = response.json()["access_token"]
    assert response.json()["token_type"] == "bearer"

    me = await client.get("/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert me.status_code == 200
    assert me.json()["email"] == "staff@example.com"
    assert me.json()["role"] == "staff"


async def test_login_wrong_password(client: AsyncClient, test_user):
    response = await client.post(
        "/auth/login",
        data={"username": "staff@example.com", "password": "wrong"},
    )

    assert response.status_code == 401


async def test_invalid_token_rejected(client: AsyncClient):
    response = await client.get("/auth/me", headers={"Authorization": "Bearer garbage"})

    assert response.status_code == 401


async def test_staff_management_requires_admin(authenticated_client: AsyncClient):
    response = await authenticated_client.get("/api/staff")

    assert response.status_code == 403


async def test_admin_creates_and_deactivates_staff(admin_client: AsyncClient, client: AsyncClient):
    created = await admin_client.post(
        "/api/staff",
        json={
            "email": "host@example.com",
            "password": "hostpass123",
            "full_name": "Front Host",
            "position": "Host",
        },
    )
    assert created.status_code == 201
    user = created.json()
    assert user["role"] == "staff"
    assert user["is_active"] is True

    duplicate = await admin_client.post(
        "/api/staff",
        json={"email": "host@example.com", "password": "x", "full_name": "Again"},
    )
    assert duplicate.status_code == 409

    listing = await admin_client.get("/api/staff")
    assert {row["email"] for row in listing.json()} == {"admin@example.com", "host@example.com"}

    removed = await admin_client.delete(f"/api/staff/{user['id']}")
    assert removed.status_code == 204

    login = await client.post(
        "/auth/login",
        data={"username": "host@example.com", "password": "hostpass123"},
    )
    assert login.status_code == 401


async def test_admin_cannot_deactivate_self(admin_client: AsyncClient, test_admin_user):
    response = await admin_client.delete(f"/api/staff/{test_admin_user.id}")

    assert response.status_code == 400
