"""审计日志路由与记录器测试。"""
import pytest
from httpx import AsyncClient

from app.models.audit_log import AuditLog
from app.services.audit import record_audit


@pytest.fixture
async def sample_audit(db_session, admin_user):
    entries = [
        AuditLog(user_id=admin_user.id, action="addProduct", detail="Added product: Mug"),
        AuditLog(user_id=None, action="monthlyCleanup", detail="Deleted product 7"),
    ]
    db_session.add_all(entries)
    await db_session.commit()
    return entries


class TestAuditLogs:
    async def test_list_audit_logs_admin(self, client: AsyncClient, admin_headers, sample_audit):
        resp = await client.get("/api/v1/audit-logs", headers=admin_headers)
        assert resp.status_code == 200
        data = resp.json()
        assert data["total"] == 2
        # 最新的在前
        assert data["items"][0]["action"] == "monthlyCleanup"
        assert data["items"][0]["user_id"] is None

    async def test_filter_by_action(self, client: AsyncClient, admin_headers, sample_audit):
        resp = await client.get("/api/v1/audit-logs?action=addProduct", headers=admin_headers)
        assert resp.json()["total"] == 1

    async def test_filter_by_user(self, client: AsyncClient, admin_headers, admin_user, sample_audit):
        resp = await client.get(f"/api/v1/audit-logs?user_id={admin_user.id}", headers=admin_headers)
        assert [e["action"] for e in resp.json()["items"]] == ["addProduct"]

    async def test_user_cannot_access(self, client: AsyncClient, user_headers):
        resp = await client.get("/api/v1/audit-logs", headers=user_headers)
        assert resp.status_code == 403

    async def test_anonymous_cannot_access(self, client: AsyncClient):
        resp = await client.get("/api/v1/audit-logs")
        assert resp.status_code == 401


class TestRecordAudit:
    async def test_record_in_own_session(self, session_factory, store):
        entry = await record_audit(session_factory, 5, "updateUser", "Updated user 5: role")
        assert entry.id is not None
        assert entry.created_at is not None
        stored = await store.find(AuditLog)
        assert [(e.user_id, e.action) for e in stored] == [(5, "updateUser")]

    async def test_each_mutation_appends_one_entry(self, client: AsyncClient, admin_headers, admin_user,
                                                   regular_user, store):
        await client.delete(f"/api/v1/users/{regular_user.id}", headers=admin_headers)
        await client.put(f"/api/v1/users/{admin_user.id}", json={"name": "Root"}, headers=admin_headers)
        actions = [e.action for e in await store.find(AuditLog)]
        assert actions == ["deleteUser", "updateUser"]
