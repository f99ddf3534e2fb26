import pytest


@pytest.mark.asyncio
async def test_register(client):
    response = await client.post(
        "/api/v1/auth/register",
        json={
            "email": "newuser@test.com",
            "password": "securepass123",
            "name": "New User",
        },
    )
    assert response.status_code == 201
    data = response.json()
    assert data["email"] == "newuser@test.com"
    assert data["name"] == "New User"
    assert data["role"] == "member"
    assert data["timezone"] == "UTC"
    assert "id" in data


@pytest.mark.asyncio
async def test_register_duplicate_email(client):
    payload = {
        "email": "duplicate@test.com",
        "password": "securepass123",
        "name": "First User",
    }
    await client.post("/api/v1/auth/register", json=payload)

    response = await client.post("/api/v1/auth/register", json=payload)
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_register_short_password(client):
    response = await client.post(
        "/api/v1/auth/register",
        json={"email": "short@test.com", "password": "short", "name": "Short"},
    )
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_login(client):
    # Register first
    await client.post(
        "/api/v1/auth/register",
        json={
            "email": "login@test.com",
            "password": "mypassword",
            "name": "Login User",
        },
    )

    # Login
    response = await client.post(
        "/api/v1/auth/login",
        json={"email": "login@test.com", "password": "mypassword"},
    )
    assert response.status_code == 200
    data = response.json()
    assert "access_token" in data
    assert "refresh_token" in data
    assert data["token_type"] == "bearer"


@pytest.mark.asyncio
async def test_login_invalid_credentials(client):
    response = await client.post(
        "/api/v1/auth/login",
        json={"email": "nobody@test.com", "password": "wrongpassword"},
    )
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_get_me(client, auth_headers):
    response = await client.get("/api/v1/auth/me", headers=auth_headers)
    assert response.status_code == 200
    data = response.json()
    assert data["role"] == "member"
    assert "email" in data


@pytest.mark.asyncio
async def test_get_me_no_auth(client):
    response = await client.get("/api/v1/auth/me")
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_update_me_timezone(client, auth_headers):
    response = await client.patch(
        "/api/v1/auth/me",
        headers=auth_headers,
        json={"name": "Renamed", "timezone": "America/New_York"},
    )
    assert response.status_code == 200
    data = response.json()
    assert data["name"] == "Renamed"
    assert data["timezone"] == "America/New_York"


@pytest.mark.asyncio
async def test_update_me_unknown_timezone(client, auth_headers):
    response = await client.patch(
        "/api/v1/auth/me", headers=auth_headers, json={"timezone": "Mars/Olympus_Mons"}
    )
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_refresh_token(client):
    # Register and login
    await client.post(
        "/api/v1/auth/register",
        json={
            "email": "refresh@test.com",
            "password": "mypassword",
            "name": "Refresh User",
        },
    )
    login_resp = await client.post(
        "/api/v1/auth/login",
        json={"email": "refresh@test.com", "password": "mypassword"},
    )
    refresh_token = login_resp.json()["refresh_token"]

    # Refresh
    response = await client.post(
        "/api/v1/auth/refresh",
        json={"refresh_token": refresh_token},
    )
    assert response.status_code == 200
    data = response.json()
    assert "access_token" in data
    assert "refresh_token" in data


@pytest.mark.asyncio
async def test_refresh_rejects_access_token(client, auth_headers):
    access_token = auth_headers["Authorization"].split(" ", 1)[1]
    response = await client.post("/api/v1/auth/refresh", json={"refresh_token": access_token})
    assert response.status_code == 403
