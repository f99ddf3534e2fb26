import pytest


@pytest.mark.asyncio
async def test_admin_routes_require_admin(client, auth_headers):
    response = await client.get("/api/v1/admin/stats", headers=auth_headers)
    assert response.status_code == 403

    response = await client.post("/api/v1/admin/reports/daily/run-now", headers=auth_headers)
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_platform_stats(client, admin_headers, member_user, make_project, make_task):
    project = await make_project(member_user)
    await make_task(project, member_user)

    response = await client.get("/api/v1/admin/stats", headers=admin_headers)
    assert response.status_code == 200
    data = response.json()
    assert data["total_users"] == 2
    assert data["users_by_role"] == {"member": 1, "admin": 1}
    assert data["total_projects"] == 1
    assert data["tasks_by_status"] == {"todo": 1}


@pytest.mark.asyncio
async def test_verify_user(client, admin_headers, make_user):
    pending = await make_user(is_verified=False)

    response = await client.post(f"/api/v1/admin/users/{pending.id}/verify", headers=admin_headers)
    assert response.status_code == 200
    assert response.json()["is_verified"] is True


@pytest.mark.asyncio
async def test_verify_unknown_user(client, admin_headers):
    response = await client.post(
        "/api/v1/admin/users/00000000-0000-0000-0000-000000000000/verify", headers=admin_headers
    )
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_deactivated_user_cannot_authenticate(client, admin_headers, member_user, auth_headers):
    response = await client.patch(
        f"/api/v1/admin/users/{member_user.id}/deactivate", headers=admin_headers
    )
    assert response.status_code == 204

    response = await client.get("/api/v1/auth/me", headers=auth_headers)
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_queue_report_batch(client, admin_headers, mock_celery_tasks):
    response = await client.post("/api/v1/admin/reports/weekly/run", headers=admin_headers)
    assert response.status_code == 202
    assert response.json() == {"task_id": "celery-task-123", "report_type": "weekly"}
    mock_celery_tasks.assert_called_once_with("weekly")


@pytest.mark.asyncio
async def test_run_report_batch_now(client, db_session, admin_headers, make_user, mock_send_email):
    await make_user()
    await make_user(is_verified=False)
    await db_session.commit()

    response = await client.post("/api/v1/admin/reports/daily/run-now", headers=admin_headers)
    assert response.status_code == 200
    # The admin and the verified member
    assert response.json() == {"report_type": "daily", "success": 2, "failed": 0}
    assert mock_send_email.call_count == 2


@pytest.mark.asyncio
async def test_run_unknown_report_type(client, admin_headers):
    response = await client.post("/api/v1/admin/reports/monthly/run-now", headers=admin_headers)
    assert response.status_code == 422
