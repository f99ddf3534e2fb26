import pytest


async def _create_project(client, headers, name="Test Project", key="TEST"):
    response = await client.post(
        "/api/v1/projects", headers=headers, json={"name": name, "key": key}
    )
    assert response.status_code == 201
    return response.json()


@pytest.mark.asyncio
async def test_create_project(client, auth_headers, member_user):
    response = await client.post(
        "/api/v1/projects",
        headers=auth_headers,
        json={"name": "Website Redesign", "key": "web", "description": "Q4 refresh"},
    )
    assert response.status_code == 201
    data = response.json()
    assert data["name"] == "Website Redesign"
    assert data["key"] == "WEB"
    assert data["owner_id"] == str(member_user.id)


@pytest.mark.asyncio
async def test_create_project_duplicate_key(client, auth_headers):
    await _create_project(client, auth_headers, key="DUP")
    response = await client.post(
        "/api/v1/projects", headers=auth_headers, json={"name": "Other", "key": "dup"}
    )
    assert response.status_code == 409


@pytest.mark.asyncio
async def test_create_project_invalid_key(client, auth_headers):
    response = await client.post(
        "/api/v1/projects", headers=auth_headers, json={"name": "Bad", "key": "X"}
    )
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_list_projects(client, auth_headers):
    await _create_project(client, auth_headers, key="LIST")

    response = await client.get("/api/v1/projects", headers=auth_headers)
    assert response.status_code == 200
    data = response.json()
    assert data["total"] == 1
    assert data["projects"][0]["key"] == "LIST"


@pytest.mark.asyncio
async def test_list_projects_includes_memberships(client, make_user, make_project, headers_for):
    owner = await make_user()
    member = await make_user()
    await make_project(owner, members=[member], key="SHARED")
    await make_project(owner, key="PRIVATE")

    response = await client.get("/api/v1/projects", headers=headers_for(member))
    assert response.status_code == 200
    keys = [p["key"] for p in response.json()["projects"]]
    assert keys == ["SHARED"]


@pytest.mark.asyncio
async def test_get_project(client, auth_headers):
    project = await _create_project(client, auth_headers, name="Get Test")

    response = await client.get(f"/api/v1/projects/{project['id']}", headers=auth_headers)
    assert response.status_code == 200
    assert response.json()["name"] == "Get Test"


@pytest.mark.asyncio
async def test_get_project_forbidden(client, make_user, make_project, auth_headers):
    stranger = await make_user()
    project = await make_project(stranger)

    response = await client.get(f"/api/v1/projects/{project.id}", headers=auth_headers)
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_update_project(client, auth_headers):
    project = await _create_project(client, auth_headers)

    response = await client.patch(
        f"/api/v1/projects/{project['id']}",
        headers=auth_headers,
        json={"name": "Updated Name"},
    )
    assert response.status_code == 200
    assert response.json()["name"] == "Updated Name"


@pytest.mark.asyncio
async def test_update_project_requires_owner(client, make_user, make_project, headers_for):
    owner = await make_user()
    member = await make_user()
    project = await make_project(owner, members=[member])

    response = await client.patch(
        f"/api/v1/projects/{project.id}", headers=headers_for(member), json={"name": "Nope"}
    )
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_delete_project(client, auth_headers):
    project = await _create_project(client, auth_headers)

    response = await client.delete(f"/api/v1/projects/{project['id']}", headers=auth_headers)
    assert response.status_code == 204

    response = await client.get(f"/api/v1/projects/{project['id']}", headers=auth_headers)
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_add_and_list_members(client, auth_headers, make_user):
    project = await _create_project(client, auth_headers)
    teammate = await make_user(name="Teammate")

    response = await client.post(
        f"/api/v1/projects/{project['id']}/members",
        headers=auth_headers,
        json={"email": teammate.email},
    )
    assert response.status_code == 201
    assert response.json()["user_id"] == str(teammate.id)

    response = await client.get(f"/api/v1/projects/{project['id']}/members", headers=auth_headers)
    assert response.status_code == 200
    members = response.json()
    assert len(members) == 2
    assert members[0]["is_owner"] is True
    assert members[1]["name"] == "Teammate"


@pytest.mark.asyncio
async def test_add_member_twice(client, auth_headers, make_user):
    project = await _create_project(client, auth_headers)
    teammate = await make_user()
    url = f"/api/v1/projects/{project['id']}/members"

    await client.post(url, headers=auth_headers, json={"email": teammate.email})
    response = await client.post(url, headers=auth_headers, json={"email": teammate.email})
    assert response.status_code == 409


@pytest.mark.asyncio
async def test_add_unknown_member(client, auth_headers):
    project = await _create_project(client, auth_headers)

    response = await client.post(
        f"/api/v1/projects/{project['id']}/members",
        headers=auth_headers,
        json={"email": "ghost@test.com"},
    )
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_remove_member(client, auth_headers, make_user, headers_for):
    project = await _create_project(client, auth_headers)
    teammate = await make_user()
    await client.post(
        f"/api/v1/projects/{project['id']}/members",
        headers=auth_headers,
        json={"email": teammate.email},
    )

    response = await client.delete(
        f"/api/v1/projects/{project['id']}/members/{teammate.id}", headers=auth_headers
    )
    assert response.status_code == 204

    response = await client.get(f"/api/v1/projects/{project['id']}", headers=headers_for(teammate))
    assert response.status_code == 403
