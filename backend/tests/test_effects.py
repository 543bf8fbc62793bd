"""副作用分发器测试 — 审计与邮件失败互相隔离，不影响主流程。"""
from unittest.mock import AsyncMock, patch

from app.models.audit_log import AuditLog
from app.services.effects import SideEffects
from tests.conftest import FakeMailer


class TestSideEffects:
    async def test_dispatch_runs_all(self, session_factory, store):
        mailer = FakeMailer()
        effects = SideEffects(session_factory, mailer)
        effects.audit(1, "addProduct", "Added product: Mug")
        effects.mail("a@test.com", "Hello", "<p>hi</p>")
        assert effects.pending == 2

        assert await effects.dispatch() == 2
        assert effects.pending == 0
        assert mailer.sent[0]["to"] == "a@test.com"
        assert await store.count(AuditLog, action="addProduct") == 1

    async def test_dispatch_twice_does_not_repeat(self, session_factory, store):
        effects = SideEffects(session_factory)
        effects.audit(None, "monthlyCleanup")
        await effects.dispatch()
        assert await effects.dispatch() == 0
        assert await store.count(AuditLog) == 1

    async def test_mail_failure_isolated(self, session_factory, store, caplog):
        effects = SideEffects(session_factory, FakeMailer(fail=True))
        effects.mail("a@test.com", "Hello", "<p>hi</p>")
        effects.audit(1, "register")
        assert await effects.dispatch() == 1
        assert await store.count(AuditLog, action="register") == 1
        assert "Side effect mail:Hello failed" in caplog.text

    async def test_audit_failure_isolated(self, session_factory):
        mailer = FakeMailer()
        # partial 在登记时绑定 record_audit，所以在 patch 范围内登记
        with patch("app.services.effects.record_audit", new=AsyncMock(side_effect=RuntimeError("disk full"))):
            effects = SideEffects(session_factory, mailer)
            effects.audit(1, "addFeedback")
            effects.mail("a@test.com", "Hello", "<p>hi</p>")
            assert await effects.dispatch() == 1
        assert len(mailer.sent) == 1

    async def test_no_mailer_drops_mail(self, session_factory, caplog):
        effects = SideEffects(session_factory)
        effects.mail("a@test.com", "Hello", "<p>hi</p>")
        assert effects.pending == 0
        assert "No mailer configured" in caplog.text


class TestAuditOnFailedRequest:
    async def test_denied_request_writes_no_audit(self, client, user_headers, store):
        resp = await client.post("/api/v1/products", json={"name": "Lamp"}, headers=user_headers)
        assert resp.status_code == 403
        assert await store.count(AuditLog) == 0

    async def test_audit_failure_keeps_response(self, client, admin_headers):
        with patch("app.services.effects.record_audit", new=AsyncMock(side_effect=RuntimeError("disk full"))):
            resp = await client.post("/api/v1/products", json={"name": "Lamp"}, headers=admin_headers)
        assert resp.status_code == 201
        assert resp.json()["name"] == "Lamp"
