"""
FastAPI 依赖项模块 (FastAPI Dependencies Module)

解析请求中可选的 Bearer 令牌为调用者身份，并提供存储、副作用分发器和邮件客户端的注入点。
令牌缺失、无效或过期时调用者为 None；是否拒绝由授权守卫决定。

Resolves the optional bearer token into a caller identity and provides injection
points for the store, the side-effect dispatcher and the mailer. A missing, invalid
or expired token yields None; the authorization guard decides whether to reject.
"""
from typing import Optional

from fastapi import BackgroundTasks, Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.core.database import get_db, get_session_factory
from app.core.security import decode_token
from app.models.user import User
from app.services.effects import SideEffects
from app.services.notification import Mailer

# Bearer Token 认证方案，缺失时不自动报错 (Bearer scheme that does not auto-reject)
security = HTTPBearer(auto_error=False)


async def get_caller(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: AsyncSession = Depends(get_db),
) -> Optional[User]:
    """
    解析调用者身份 (Resolve caller identity)

    校验 JWT 签名、有效期和令牌类型，然后以数据库中的用户为准（角色以存储值为准）。
    Validates JWT signature, expiry and type, then loads the stored user (the stored role wins).
    """
    if credentials is None:
        return None
    payload = decode_token(credentials.credentials)
    if payload is None or payload.get("type") != "access":
        return None
    user_id = payload.get("sub")
    try:
        return await db.get(User, int(user_id))
    except (TypeError, ValueError):
        return None


def get_mailer(request: Request) -> Mailer:
    """进程入口在 lifespan 中创建并挂到 app.state (Created by the lifespan and stored on app.state)"""
    return request.app.state.mailer


def get_effects(
    background_tasks: BackgroundTasks,
    session_factory: async_sessionmaker = Depends(get_session_factory),
    mailer: Mailer = Depends(get_mailer),
) -> SideEffects:
    """
    请求级副作用分发器 (Request-scoped side-effect dispatcher)

    审计和邮件在响应产生后通过 BackgroundTasks 执行，失败只写日志，不影响主结果。
    Audit entries and emails run through BackgroundTasks after the response is built;
    failures are logged only and never affect the primary result.
    """
    effects = SideEffects(session_factory, mailer)
    background_tasks.add_task(effects.dispatch)
    return effects
