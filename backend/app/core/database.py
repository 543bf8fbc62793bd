"""
数据库连接模块 (Database Connection Module)

基于 SQLAlchemy 2.0 异步模式创建数据库引擎和会话工厂。
引擎与会话工厂由进程入口持有，业务组件通过依赖注入获取，不直接引用全局连接。

Creates the database engine and session factory based on SQLAlchemy 2.0 async mode.
The process entry point owns them; business components receive them through
dependency injection instead of reaching for global connections.
"""
from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from app.core.config import settings

# 创建异步数据库引擎 (Create Async Database Engine)
engine = create_async_engine(
    settings.database_url,
    echo=False  # 关闭 SQL 日志输出 (Disable SQL logging)
)

# 创建异步会话工厂 (Create Async Session Factory)
async_session = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False  # 提交后不过期对象，便于访问已保存的数据 (Don't expire objects after commit)
)


class Base(DeclarativeBase):
    """ORM 模型基类 (ORM Model Base Class)"""
    pass


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI 依赖项：获取数据库会话 (FastAPI Dependency: Get Database Session)

    使用异步上下文管理器确保会话在请求结束后正确关闭，防止连接泄漏。
    Uses an async context manager so the session is closed after the request.
    """
    async with async_session() as session:
        yield session


def get_session_factory() -> async_sessionmaker:
    """
    FastAPI 依赖项：获取会话工厂 (FastAPI Dependency: Get Session Factory)

    审计记录等副作用在请求会话之外独立写入，需要自己的会话。
    Side effects such as audit entries write outside the request session and open their own.
    """
    return async_session
