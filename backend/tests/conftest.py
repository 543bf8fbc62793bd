"""
反馈服务测试基础配置

提供 SQLite 异步数据库、记录型假邮件客户端、FastAPI 测试客户端等通用 fixture。
每个测试使用独立的临时 SQLite 文件，不依赖外部 PostgreSQL/SMTP。
"""
import os
from typing import AsyncGenerator

# 必须在导入 app 之前设置环境变量，避免真实连接
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["JWT_SECRET_KEY"] = "test-secret-key"
os.environ["CLEANUP_ENABLED"] = "false"

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from app.core.database import Base, get_db, get_session_factory
from app.core.deps import get_mailer
from app.core.security import create_access_token, hash_password
from app.core.store import DocumentStore
from app.models.product import Product
from app.models.user import User
from app.services.effects import SideEffects


# ── 假邮件客户端 ──────────────────────────────────────────────────────
class FakeMailer:
    """记录发送内容的邮件客户端，fail=True 时模拟 SMTP 故障。"""
    def __init__(self, fail: bool = False):
        self.fail = fail
        self.sent: list[dict] = []

    async def send_mail(self, to: str, subject: str, html: str) -> None:
        if self.fail:
            raise ConnectionError("SMTP server unavailable")
        self.sent.append({"to": to, "subject": subject, "html": html})


# ── Fixtures ──────────────────────────────────────────────────────────

@pytest_asyncio.fixture
async def session_factory(tmp_path) -> AsyncGenerator[async_sessionmaker, None]:
    """每个测试一个临时 SQLite 文件，测试前建表，测试后释放。"""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}", poolclass=NullPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """提供一个干净的数据库会话。"""
    async with session_factory() as session:
        yield session


@pytest.fixture
def store(db_session: AsyncSession) -> DocumentStore:
    return DocumentStore(db_session)


@pytest.fixture
def mailer() -> FakeMailer:
    return FakeMailer()


@pytest.fixture
def effects(session_factory, mailer) -> SideEffects:
    return SideEffects(session_factory, mailer)


@pytest_asyncio.fixture
async def client(db_session: AsyncSession, session_factory, mailer) -> AsyncGenerator[AsyncClient, None]:
    """提供配置好依赖覆盖的异步 HTTP 测试客户端。"""
    from app.main import app

    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_session_factory] = lambda: session_factory
    app.dependency_overrides[get_mailer] = lambda: mailer

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


async def make_user(
    db_session: AsyncSession,
    email: str,
    role: str = "user",
    verified: bool = True,
    password: str = "secret123",
    name: str = "Tester",
) -> User:
    user = User(
        email=email,
        name=name,
        hashed_password=hash_password(password),
        role=role,
        verified=verified,
    )
    db_session.add(user)
    await db_session.commit()
    await db_session.refresh(user)
    return user


@pytest_asyncio.fixture
async def admin_user(db_session: AsyncSession) -> User:
    """已验证的管理员。"""
    return await make_user(db_session, "admin@test.com", role="admin", password="admin123", name="Admin")


@pytest_asyncio.fixture
async def regular_user(db_session: AsyncSession) -> User:
    """已验证的普通用户。"""
    return await make_user(db_session, "alice@test.com", password="alice123", name="Alice")


@pytest_asyncio.fixture
async def other_user(db_session: AsyncSession) -> User:
    """另一个已验证的普通用户。"""
    return await make_user(db_session, "bob@test.com", password="bob123", name="Bob")


@pytest_asyncio.fixture
async def product(db_session: AsyncSession) -> Product:
    item = Product(name="Coffee Mug", description="Ceramic, 350ml", average_rating=0.0)
    db_session.add(item)
    await db_session.commit()
    await db_session.refresh(item)
    return item


def bearer(user: User) -> dict:
    return {"Authorization": f"Bearer {create_access_token(str(user.id), user.role)}"}


@pytest.fixture
def admin_headers(admin_user: User) -> dict:
    """管理员认证头。"""
    return bearer(admin_user)


@pytest.fixture
def user_headers(regular_user: User) -> dict:
    """普通用户认证头。"""
    return bearer(regular_user)


@pytest.fixture
def other_headers(other_user: User) -> dict:
    return bearer(other_user)
