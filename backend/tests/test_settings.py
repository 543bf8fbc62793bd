"""配置与健康检查测试。"""
from httpx import AsyncClient

from app.core.config import Settings


class TestSettings:
    def test_database_url_from_parts(self, monkeypatch):
        monkeypatch.delenv("DATABASE_URL", raising=False)
        settings = Settings(postgres_host="db", postgres_user="u", postgres_password="p", postgres_db="fb")
        assert settings.database_url == "postgresql+asyncpg://u:p@db:5432/fb"

    def test_database_url_override(self, monkeypatch):
        monkeypatch.setenv("DATABASE_URL", "sqlite+aiosqlite:///./local.db")
        assert Settings().database_url == "sqlite+aiosqlite:///./local.db"

    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("CLEANUP_ENABLED", raising=False)
        settings = Settings()
        assert settings.cleanup_cron == "0 0 1 * *"
        assert settings.cleanup_enabled is True
        assert settings.verification_token_expire_hours == 24
        assert settings.reset_token_expire_minutes == 60

    def test_is_production(self):
        assert Settings(environment="Production").is_production
        assert not Settings(environment="development").is_production


class TestHealth:
    async def test_health(self, client: AsyncClient):
        resp = await client.get("/health")
        assert resp.status_code == 200
        assert resp.json()["checks"]["api"] == "ok"
